"""
Manova - Stress Analysis Core

Scores survey answers, generates deep dives for high-stress answers,
detects recurring stress through vector memory and decides when to escalate.
"""

__version__ = "1.0.0"

from manova.settings import Settings
from manova.domains import Domain
from manova.scoring.stress_scorer import StressScorer
from manova.scoring.llm_scorer import LLMStressScorer
from manova.insight.deep_dive import DeepDiveGenerator
from manova.memory.embedding_adapter import EmbeddingAdapter
from manova.memory.vector_store import QdrantVectorStore
from manova.memory.recurrence_detector import RecurrenceDetector
from manova.orchestration.trigger_aggregator import TriggerAggregator
from manova.orchestration.pipeline import StressPipeline

__all__ = [
    'Settings',
    'Domain',
    'StressScorer',
    'LLMStressScorer',
    'DeepDiveGenerator',
    'EmbeddingAdapter',
    'QdrantVectorStore',
    'RecurrenceDetector',
    'TriggerAggregator',
    'StressPipeline',
]

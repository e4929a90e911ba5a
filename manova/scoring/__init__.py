from .stress_scorer import StressScorer
from .llm_scorer import LLMStressScorer
from .metrics import (
    calculate_stress_metrics,
    identify_stress_triggers,
    generate_stress_summary,
    compare_with_history,
)

__all__ = [
    'StressScorer',
    'LLMStressScorer',
    'calculate_stress_metrics',
    'identify_stress_triggers',
    'generate_stress_summary',
    'compare_with_history',
]

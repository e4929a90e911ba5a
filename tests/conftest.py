"""
Manova Test Fixtures
Qdrant runs in memory; completion and embedding clients are stand-ins
exposing the same call shape as the real SDKs.
"""
import json
from types import SimpleNamespace
from typing import List, Optional

import pytest
from qdrant_client import QdrantClient

from manova.domains import band_for_score
from manova.insight.deep_dive import DeepDiveGenerator
from manova.memory.embedding_adapter import EmbeddingAdapter
from manova.memory.recurrence_detector import RecurrenceDetector
from manova.memory.vector_store import QdrantVectorStore
from manova.models import StressAssessment
from manova.orchestration.pipeline import StressPipeline
from manova.orchestration.trigger_aggregator import TriggerAggregator
from manova.scoring.stress_scorer import StressScorer

TEST_DIM = 8
TEST_COLLECTION = "test_emotions"


class FakeCompletions:
    """Mimics groq's chat.completions.create and records every call."""

    def __init__(self, content: Optional[str] = None, error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeEmbeddings:
    """Mimics openai's embeddings.create."""

    def __init__(self, dim: int = TEST_DIM, error: Optional[Exception] = None):
        self.dim = dim
        self.error = error
        self.calls = []

    def create(self, model, input, encoding_format="float"):
        self.calls.append({"model": model, "input": input, "encoding_format": encoding_format})
        if self.error:
            raise self.error
        texts = input if isinstance(input, list) else [input]
        data = [
            SimpleNamespace(index=i, embedding=[float(len(t))] + [0.5] * (self.dim - 1))
            for i, t in enumerate(texts)
        ]
        return SimpleNamespace(data=data)


def fake_llm(content=None, error=None):
    completions = FakeCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def fake_embedding_client(dim=TEST_DIM, error=None):
    return SimpleNamespace(embeddings=FakeEmbeddings(dim, error))


def llm_json(payload) -> str:
    return "```json\n" + json.dumps(payload) + "\n```"


def make_assessment(score: int, domain: str = "Work & Career", tag: str = "Workload Overwhelm",
                    cause_tag: str = "overwork") -> StressAssessment:
    intensity, color = band_for_score(score)
    return StressAssessment(
        score=score, tag=tag, cause_tag=cause_tag,
        intensity=intensity, label_color=color,
        reason="test", domain=domain
    )


def unit_vector(*head: float) -> List[float]:
    values = list(head) + [0.0] * (TEST_DIM - len(head))
    return values[:TEST_DIM]


@pytest.fixture
def qdrant_client():
    client = QdrantClient(":memory:")
    yield client
    client.close()


@pytest.fixture
def store(qdrant_client):
    return QdrantVectorStore(qdrant_client, TEST_COLLECTION, TEST_DIM)


@pytest.fixture
def detector(store):
    return RecurrenceDetector(store)


@pytest.fixture
def pipeline(detector):
    return StressPipeline(
        scorer=StressScorer(),
        deep_dive=DeepDiveGenerator(None),
        embedder=EmbeddingAdapter(None, dim=TEST_DIM),
        detector=detector,
        aggregator=TriggerAggregator(),
    )

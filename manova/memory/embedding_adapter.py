"""
Embedding Adapter
Text -> fixed-length vector through an OpenAI-compatible embeddings endpoint.
Any provider failure yields a deterministic pseudo-embedding instead.
"""
import re
from functools import lru_cache
from typing import List, Optional, Tuple

import numpy as np
from openai import OpenAI

from config import EMBEDDING_MODEL, EMBEDDING_DIM, EMPTY_TEXT_PLACEHOLDER
from manova.domains import band_for_score
from manova.errors import ManovaError, ProviderUnavailable, MalformedProviderResponse
from manova.utils import Result


def normalize_text(text: Optional[str]) -> str:
    """Trim and collapse whitespace; empty input becomes the placeholder."""
    cleaned = re.sub(r"\s+", " ", (text or "")).strip()
    return cleaned or EMPTY_TEXT_PLACEHOLDER


def text_seed(text: str) -> int:
    """32-bit signed rolling hash (h * 31 + c) over UTF-16 code units."""
    data = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


@lru_cache(maxsize=256)
def _fallback_values(text: str, dim: int) -> Tuple[float, ...]:
    seed = text_seed(text) + np.arange(dim, dtype=np.float64)
    values = (np.sin(0.1 * seed) + np.cos(0.2 * seed)) * 0.01
    return tuple(values.tolist())


def fallback_embedding(text: str, dim: int = EMBEDDING_DIM) -> List[float]:
    """Deterministic vector for text; identical input gives an identical vector."""
    return list(_fallback_values(text, dim))


def build_context_text(question: str, answer: str, domain: str, stress_score: int) -> str:
    """Contextual string embedded for each high-stress response."""
    intensity, _ = band_for_score(stress_score)
    return normalize_text(
        f"Domain: {domain} Question: {question} Response: {answer} "
        f"Stress Level: {stress_score}/10 Emotional Context: {intensity} stress"
    )


class EmbeddingAdapter:
    """Embeds text with the provider; never raises."""

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        model: str = EMBEDDING_MODEL,
        dim: int = EMBEDDING_DIM
    ):
        self.client = client
        self.model = model
        self.dim = dim

    def embed(self, text: str) -> List[float]:
        cleaned = normalize_text(text)

        def use_fallback(error: ManovaError) -> List[float]:
            print(f"  Warning: Embedding failed ({error.kind}: {error.message}), using fallback vector")
            return fallback_embedding(cleaned, self.dim)

        return self._request([cleaned]).map(lambda vectors: vectors[0]).recover(use_fallback)

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """One provider call for every non-empty text; per-text fallback on failure."""
        cleaned = [normalize_text(t) for t in texts]
        indices = [i for i, t in enumerate(texts) if (t or "").strip()]

        vectors = [fallback_embedding(c, self.dim) for c in cleaned]
        if not indices:
            return vectors

        result = self._request([cleaned[i] for i in indices])
        if not result.ok:
            print(f"  Warning: Batch embedding failed ({result.error.message}), using fallback vectors")
            return vectors

        for i, vector in zip(indices, result.value):
            vectors[i] = vector
        return vectors

    def embed_response(self, question: str, answer: str, domain: str, stress_score: int) -> List[float]:
        return self.embed(build_context_text(question, answer, domain, stress_score))

    def _request(self, inputs: List[str]) -> Result[List[List[float]]]:
        if self.client is None:
            return Result.failure(ProviderUnavailable("No embedding client configured"))

        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=inputs if len(inputs) > 1 else inputs[0],
                encoding_format="float"
            )
        except Exception as e:
            return Result.failure(ProviderUnavailable(f"Embedding request failed: {e}"))

        data = getattr(response, "data", None) or []
        if len(data) != len(inputs):
            return Result.failure(MalformedProviderResponse(
                "Unexpected number of embeddings",
                {"expected": len(inputs), "received": len(data)}
            ))

        try:
            data = sorted(data, key=lambda item: getattr(item, "index", 0) or 0)
            vectors = [self._to_vector(getattr(item, "embedding", None)) for item in data]
        except MalformedProviderResponse as e:
            return Result.failure(e)
        except Exception as e:
            return Result.failure(MalformedProviderResponse(f"Unreadable embedding response: {e}"))
        return Result.success(vectors)

    def _to_vector(self, embedding) -> List[float]:
        """Provider vector as floats; wrong length or non-numeric values are rejected."""
        if embedding is None or isinstance(embedding, (str, bytes)):
            raise MalformedProviderResponse("Embedding missing from response")

        values = list(embedding)
        if len(values) != self.dim:
            raise MalformedProviderResponse(
                "Embedding has the wrong dimension",
                {"expected": self.dim, "received": len(values)}
            )
        if any(isinstance(v, bool) or not isinstance(v, (int, float, np.number)) for v in values):
            raise MalformedProviderResponse("Embedding contains non-numeric values")
        return [float(v) for v in values]

"""Tests for the embedding adapter and its deterministic fallback."""
import math
from types import SimpleNamespace

import pytest

from manova.memory.embedding_adapter import (
    EmbeddingAdapter, fallback_embedding, normalize_text, text_seed, build_context_text
)
from conftest import fake_embedding_client, TEST_DIM


def test_normalize_collapses_whitespace():
    assert normalize_text("  feeling \n\t  tired  ") == "feeling tired"


def test_empty_text_becomes_placeholder():
    assert normalize_text("   ") == "empty text"
    assert normalize_text(None) == "empty text"


def test_text_seed_is_java_style_hash():
    assert text_seed("") == 0
    assert text_seed("a") == 97
    assert text_seed("ab") == 97 * 31 + 98


def test_text_seed_stays_in_signed_32_bit_range():
    seed = text_seed("a much longer sentence that overflows the hash " * 4)
    assert -2 ** 31 <= seed < 2 ** 31


def test_fallback_vector_formula():
    vector = fallback_embedding("a", dim=4)
    expected = [(math.sin(0.1 * (97 + i)) + math.cos(0.2 * (97 + i))) * 0.01 for i in range(4)]

    assert len(vector) == 4
    for got, want in zip(vector, expected):
        assert abs(got - want) < 1e-12


def test_fallback_is_idempotent():
    adapter = EmbeddingAdapter(None, dim=TEST_DIM)
    first = adapter.embed("I feel exhausted at work")
    second = adapter.embed("I feel exhausted at work")

    assert first == second
    assert len(first) == TEST_DIM


def test_default_dimension():
    assert len(EmbeddingAdapter(None).embed("hello")) == 1536


def test_provider_vector_returned_unchanged():
    client = fake_embedding_client()
    vector = EmbeddingAdapter(client, model="embed-test", dim=TEST_DIM).embed("  hi  there ")

    call = client.embeddings.calls[0]
    assert call["input"] == "hi there"
    assert call["encoding_format"] == "float"
    assert vector == [8.0] + [0.5] * (TEST_DIM - 1)


def test_provider_error_falls_back():
    client = fake_embedding_client(error=RuntimeError("401 unauthorized"))
    vector = EmbeddingAdapter(client, dim=TEST_DIM).embed("some text")

    assert vector == fallback_embedding("some text", TEST_DIM)


def test_batch_uses_one_call_and_keeps_order():
    client = fake_embedding_client()
    vectors = EmbeddingAdapter(client, dim=TEST_DIM).embed_batch(["a", "", "abc"])

    assert len(client.embeddings.calls) == 1
    assert client.embeddings.calls[0]["input"] == ["a", "abc"]
    assert vectors[0][0] == 1.0
    assert vectors[1] == fallback_embedding("empty text", TEST_DIM)
    assert vectors[2][0] == 3.0


def test_batch_falls_back_per_text():
    client = fake_embedding_client(error=TimeoutError())
    vectors = EmbeddingAdapter(client, dim=TEST_DIM).embed_batch(["one", "two"])

    assert vectors == [fallback_embedding("one", TEST_DIM), fallback_embedding("two", TEST_DIM)]


def test_context_text():
    text = build_context_text("How overwhelmed?", "Very  often", "Work & Career", 9)

    assert text == ("Domain: Work & Career Question: How overwhelmed? Response: Very often "
                    "Stress Level: 9/10 Emotional Context: High stress")


def _client_returning(*embeddings):
    data = [SimpleNamespace(index=i, embedding=e) for i, e in enumerate(embeddings)]
    embeddings_api = SimpleNamespace(create=lambda **kwargs: SimpleNamespace(data=data))
    return SimpleNamespace(embeddings=embeddings_api)


@pytest.mark.parametrize("embedding", [None, "not a vector", 42])
def test_unreadable_embedding_falls_back(embedding):
    vector = EmbeddingAdapter(_client_returning(embedding), dim=TEST_DIM).embed("hello")

    assert vector == fallback_embedding("hello", TEST_DIM)


def test_item_without_embedding_falls_back():
    data = [SimpleNamespace(index=0)]
    client = SimpleNamespace(embeddings=SimpleNamespace(create=lambda **kwargs: SimpleNamespace(data=data)))

    assert EmbeddingAdapter(client, dim=TEST_DIM).embed("hello") == fallback_embedding("hello", TEST_DIM)


def test_wrong_dimension_falls_back():
    vector = EmbeddingAdapter(_client_returning([0.1, 0.2]), dim=TEST_DIM).embed("hello")

    assert len(vector) == TEST_DIM
    assert vector == fallback_embedding("hello", TEST_DIM)


def test_non_numeric_values_fall_back():
    bad = [0.1] * (TEST_DIM - 1) + ["x"]
    vector = EmbeddingAdapter(_client_returning(bad), dim=TEST_DIM).embed("hello")

    assert vector == fallback_embedding("hello", TEST_DIM)


def test_batch_with_malformed_vector_falls_back_for_all():
    client = _client_returning([0.5] * TEST_DIM, [0.1, 0.2])
    vectors = EmbeddingAdapter(client, dim=TEST_DIM).embed_batch(["one", "two"])

    assert vectors == [fallback_embedding("one", TEST_DIM), fallback_embedding("two", TEST_DIM)]

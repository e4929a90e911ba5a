"""Tests for settings validation."""
import pytest

from manova.errors import ValidationError
from manova.settings import Settings


def test_defaults_are_valid():
    settings = Settings().validate()

    assert settings.similarity_threshold == 0.85
    assert settings.embedding_dim == 1536
    assert not settings.has_llm


def test_missing_credentials_are_allowed():
    settings = Settings(groq_api_key="", embedding_api_key="").validate()
    assert not settings.has_embeddings


@pytest.mark.parametrize("field,value", [
    ("similarity_threshold", 1.5),
    ("embedding_dim", 0),
    ("recurrence_top_k", -1),
    ("history_limit", 500),
    ("provider_timeout", 0),
])
def test_invalid_values_fail_fast(field, value):
    with pytest.raises(ValidationError) as exc:
        Settings(**{field: value}).validate()

    assert field in exc.value.details


def test_invalid_weight():
    with pytest.raises(ValidationError):
        Settings(confidence_weights={"high_stress": 2.0}).validate()


def test_to_dict_masks_secrets():
    data = Settings(groq_api_key="gsk_secret").to_dict()

    assert data["groq_api_key"] == "***"
    assert data["embedding_api_key"] == ""

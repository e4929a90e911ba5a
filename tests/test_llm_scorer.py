"""Tests for the LLM scorer and its heuristic fallback."""
import json

import pytest

from manova.errors import MalformedProviderResponse
from manova.scoring.llm_scorer import LLMStressScorer, coerce_score, validate_llm_assessment
from conftest import fake_llm, llm_json

QUESTION = "How overwhelmed do you feel by your workload?"
ANSWER = "Very Often"

VALID = {
    "score": 8,
    "tag": "Workload Overwhelm",
    "causeTag": "time_pressure",
    "intensity": "Low",
    "labelColor": "green",
    "reason": "Frequent overload at work",
}


def test_valid_response_is_trusted_after_rebanding():
    client = fake_llm(llm_json(VALID))
    result = LLMStressScorer(client).score(QUESTION, ANSWER, "Work & Career", "q1")

    assert result.generated_by == "ai"
    assert result.score == 8
    assert result.cause_tag == "time_pressure"
    assert result.intensity == "High"
    assert result.label_color == "red"
    assert result.question_id == "q1"


def test_prompt_contains_question_and_answer():
    client = fake_llm(llm_json(VALID))
    LLMStressScorer(client, model="test-model").score(QUESTION, ANSWER, "Work & Career")

    call = client.chat.completions.calls[0]
    assert call["model"] == "test-model"
    prompt = call["messages"][1]["content"]
    assert QUESTION in prompt
    assert ANSWER in prompt


@pytest.mark.parametrize("payload", [
    "not json at all",
    json.dumps(dict(VALID, tag="Mild Annoyance")),
    json.dumps(dict(VALID, causeTag="boredom")),
    json.dumps({k: v for k, v in VALID.items() if k != "reason"}),
    json.dumps(dict(VALID, score="high")),
])
def test_untrusted_output_falls_back_to_heuristic(payload):
    result = LLMStressScorer(fake_llm(payload)).score(QUESTION, ANSWER, "Work & Career")

    assert result.generated_by == "heuristic"
    assert result.tag == "Burnout Risk"
    assert result.cause_tag == "burnout"


def test_provider_error_falls_back():
    client = fake_llm(error=RuntimeError("rate limited"))
    result = LLMStressScorer(client).score(QUESTION, ANSWER, "Work & Career")

    assert result.generated_by == "heuristic"
    assert result.score == 9


def test_missing_client_falls_back():
    result = LLMStressScorer(None).score(QUESTION, ANSWER, "Work & Career")
    assert result.generated_by == "heuristic"


@pytest.mark.parametrize("value,expected", [(15, 10), (0, 1), ("7", 7), (6.0, 6), ("-2", 1)])
def test_coerce_score_clamps(value, expected):
    assert coerce_score(value) == expected


@pytest.mark.parametrize("value", [True, 6.5, "seven", None, "²", "--3", "4.0"])
def test_coerce_score_rejects_non_integers(value):
    with pytest.raises(MalformedProviderResponse):
        coerce_score(value)


def test_validate_clamps_out_of_range_score():
    result = validate_llm_assessment(dict(VALID, score=42), "Health")

    assert result.score == 10
    assert result.domain == "Health"


def test_unicode_digit_score_falls_back():
    client = fake_llm(llm_json(dict(VALID, score="²")))
    result = LLMStressScorer(client).score(QUESTION, ANSWER, "Work & Career")

    assert result.generated_by == "heuristic"
    assert result.score == 9

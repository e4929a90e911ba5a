"""Tests for deep-dive generation and its fallback table."""
import json

import pytest

from manova.domains import DEEP_DIVE_FALLBACKS, GENERIC_DEEP_DIVE_FALLBACK, Domain
from manova.insight.deep_dive import DeepDiveGenerator, should_generate_deep_dive, format_for_ui
from conftest import fake_llm, llm_json, make_assessment

ARGS = ("How overwhelmed do you feel?", "Very often", 9, "Burnout Risk", "High")


class TestPredicate:

    def test_high_score_qualifies(self):
        assert should_generate_deep_dive(make_assessment(7))

    def test_moderate_score_does_not(self):
        assert not should_generate_deep_dive(make_assessment(6))


class TestFallback:

    def test_invalid_json_uses_domain_table(self):
        generator = DeepDiveGenerator(fake_llm("Sure! Here are some ideas..."))
        insight = generator.deep_dive(*ARGS, domain="Work & Career")

        table = DEEP_DIVE_FALLBACKS[Domain.WORK_CAREER]
        assert insight.generated_by == "fallback"
        assert insight.causes == table["causes"]
        assert insight.solutions == table["solutions"]

    def test_unknown_domain_uses_generic_table(self):
        insight = DeepDiveGenerator(None).deep_dive(*ARGS, domain="Hobbies")

        assert insight.generated_by == "fallback"
        assert insight.causes == GENERIC_DEEP_DIVE_FALLBACK["causes"]
        assert len(insight.solutions) == 3

    @pytest.mark.parametrize("label,domain", [
        ("Financial Security", Domain.FINANCIAL),
        ("Personal Relationships", Domain.PERSONAL_LIFE),
        ("Health & Wellness", Domain.HEALTH),
    ])
    def test_table_aliases(self, label, domain):
        insight = DeepDiveGenerator(None).deep_dive(*ARGS, domain=label)
        assert insight.causes == DEEP_DIVE_FALLBACKS[domain]["causes"]

    def test_provider_error_uses_fallback(self):
        generator = DeepDiveGenerator(fake_llm(error=ConnectionError("offline")))
        insight = generator.deep_dive(*ARGS, domain="Health")

        assert insight.generated_by == "fallback"

    @pytest.mark.parametrize("payload", [
        {"causes": [], "solutions": ["a", "b", "c"]},
        {"causes": ["a", "b", "c"]},
        {"causes": ["a", 2, "c"], "solutions": ["a", "b", "c"]},
        {"causes": "a, b, c", "solutions": ["a", "b", "c"]},
    ])
    def test_structural_validation(self, payload):
        insight = DeepDiveGenerator(fake_llm(json.dumps(payload))).deep_dive(*ARGS, domain="Health")
        assert insight.generated_by == "fallback"


class TestAIPath:

    def test_fenced_json_is_accepted_and_truncated(self):
        payload = {
            "causes": ["Deadlines", "No breaks", "Unclear goals", "Extra"],
            "solutions": ["Block time", "Take walks", "Talk to manager", "Extra"],
        }
        insight = DeepDiveGenerator(fake_llm(llm_json(payload))).deep_dive(*ARGS, domain="Work & Career")

        assert insight.generated_by == "ai"
        assert insight.causes == ["Deadlines", "No breaks", "Unclear goals"]
        assert len(insight.solutions) == 3
        assert insight.timestamp

    def test_short_lists_are_topped_up(self):
        payload = {"causes": ["Deadlines"], "solutions": ["Block time", "Take walks"]}
        insight = DeepDiveGenerator(fake_llm(json.dumps(payload))).deep_dive(*ARGS, domain="Work & Career")

        assert insight.generated_by == "ai"
        assert insight.causes[0] == "Deadlines"
        assert len(insight.causes) == 3
        assert len(insight.solutions) == 3


def test_format_for_ui_splits_solutions():
    insight = DeepDiveGenerator(None).deep_dive(*ARGS, domain="Health")
    ui = format_for_ui(insight, "q1", "Health")

    assert ui["recommendations"]["immediate"] == insight.solutions[:2]
    assert ui["recommendations"]["longTerm"] == insight.solutions[2:]
    assert ui["analysis"]["generatedBy"] == "fallback"
    assert "Professional support" in ui["recommendations"]["followUp"]

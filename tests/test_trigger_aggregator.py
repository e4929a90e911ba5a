"""Tests for the trigger aggregator."""
import pytest

from manova.models import RecurrenceFinding
from manova.orchestration.trigger_aggregator import TriggerAggregator, priority_at_least
from conftest import make_assessment

WORK = "Work & Career"


@pytest.fixture
def aggregator():
    return TriggerAggregator()


def finding(domain=WORK, matches=1):
    return RecurrenceFinding(is_recurring=True, match_count=matches,
                             average_similarity=0.93, domain=domain)


class TestNoTrigger:

    def test_empty_survey(self, aggregator):
        decision = aggregator.decide([], [])

        assert decision.should_trigger is False
        assert decision.priority == "low"
        assert decision.trigger_type == "none"
        assert decision.confidence == 0
        assert decision.follow_up_questions == []
        assert decision.message.tone == "positive"

    def test_all_low_scores(self, aggregator):
        decision = aggregator.decide([make_assessment(s) for s in (1, 2, 3, 3)], [])

        assert decision.should_trigger is False
        assert decision.priority == "low"


class TestEscalation:

    def test_recurring_work_stress(self, aggregator):
        assessments = [make_assessment(9, WORK) for _ in range(3)]
        findings = [RecurrenceFinding.none(WORK), finding(matches=1), finding(matches=2)]

        decision = aggregator.decide(assessments, findings)

        assert priority_at_least(decision.priority, "high")
        assert WORK in decision.focus_areas
        assert decision.should_trigger

    def test_critical_on_five_high_scores(self, aggregator):
        decision = aggregator.decide([make_assessment(7) for _ in range(5)] + [make_assessment(1)], [])

        assert decision.priority == "critical"
        assert decision.trigger_type == "critical_stress"
        assert decision.recommendations[0] == "Consider immediate professional support"
        assert decision.message.tone == "compassionate"
        assert "professional_help_openness" in [q.id for q in decision.follow_up_questions]

    def test_recurring_pattern_alone_is_high(self, aggregator):
        assessments = [make_assessment(2, WORK), make_assessment(3, "Health")]
        decision = aggregator.decide(assessments, [finding(matches=2)])

        assert decision.priority == "high"
        assert decision.trigger_type == "recurring_patterns"
        assert decision.confidence == pytest.approx(0.4)
        ids = [q.id for q in decision.follow_up_questions]
        assert "pattern_awareness" in ids
        assert "work_support" in ids
        assert "recurring stress patterns" in decision.message.message

    def test_two_recurring_findings_are_a_pattern(self, aggregator):
        decision = aggregator.decide([make_assessment(2)], [finding(matches=1), finding("Health", 1)])
        assert decision.priority == "high"

    def test_single_recurrence_is_low_moderate(self, aggregator):
        decision = aggregator.decide([make_assessment(2)], [finding(matches=1)])

        assert decision.priority == "low-moderate"
        assert decision.should_trigger

    def test_multi_domain_is_moderate(self, aggregator):
        assessments = [
            make_assessment(6, WORK),
            make_assessment(6, "Personal Life"),
            make_assessment(2, "Health"),
            make_assessment(2, "Financial Stress"),
        ]
        decision = aggregator.decide(assessments, [])

        assert decision.priority == "moderate"
        assert set(decision.focus_areas) == {WORK, "Personal Life"}
        assert decision.confidence == pytest.approx(0.2)
        assert "relationship_support" in [q.id for q in decision.follow_up_questions]

    def test_single_high_score_is_low_moderate(self, aggregator):
        decision = aggregator.decide([make_assessment(7, WORK), make_assessment(2, "Health"),
                                      make_assessment(2, "Health")], [])

        assert decision.priority == "low-moderate"
        assert decision.trigger_type == "low_confidence"
        assert decision.focus_areas == [WORK]


class TestBaseline:

    def test_increase_over_baseline_triggers(self, aggregator):
        decision = aggregator.decide([make_assessment(5), make_assessment(5)], [], historical_baseline=3.5)

        assert decision.should_trigger
        assert decision.confidence == pytest.approx(0.2)
        assert any("historical baseline" in r for r in decision.reasons)

    def test_small_increase_does_not(self, aggregator):
        decision = aggregator.decide([make_assessment(5)], [], historical_baseline=4.5)
        assert decision.should_trigger is False


def test_confidence_is_clamped(aggregator):
    assessments = [make_assessment(9, WORK), make_assessment(9, "Health")]
    decision = aggregator.decide(assessments, [finding(), finding("Health")], historical_baseline=2.0)

    assert decision.confidence == 1.0


def test_focus_areas_are_unique(aggregator):
    decision = aggregator.decide([make_assessment(9, WORK), make_assessment(8, WORK)], [finding()])
    assert decision.focus_areas == [WORK]


def test_to_dict_shape(aggregator):
    data = aggregator.decide([make_assessment(9)], []).to_dict()

    assert set(data) >= {"shouldTrigger", "priority", "confidence", "focusAreas",
                         "recommendations", "message", "followUpQuestions"}

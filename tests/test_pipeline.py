"""End-to-end tests for the survey pipeline (in-memory Qdrant, no providers)."""
import json

from manova.insight.deep_dive import DeepDiveGenerator
from manova.memory.embedding_adapter import EmbeddingAdapter
from manova.models import SurveyResponse
from manova.orchestration.pipeline import StressPipeline, historical_baseline
from manova.orchestration.trigger_aggregator import TriggerAggregator, priority_at_least
from manova.scoring.stress_scorer import StressScorer
from conftest import TEST_COLLECTION, TEST_DIM

USER = "user_1"
WORK = "Work & Career"
OVERWHELMED = "How overwhelmed do you feel by your workload?"


def work_response(question_id="work_2"):
    return SurveyResponse(question_id, OVERWHELMED, "Very Often", WORK, USER)


def test_results_keep_input_order(pipeline):
    responses = [
        SurveyResponse("a", "How often do you feel valued?", "Often", "Self-Worth & Identity", USER),
        work_response("b"),
        {"questionId": "c", "question": "How was your week?", "answer": "Fine", "domain": "Health"},
    ]
    analysis = pipeline.analyze_survey(USER, responses)

    assert [r.response.question_id for r in analysis.results] == ["a", "b", "c"]


def test_only_high_stress_answers_get_deep_dive_and_storage(pipeline, store):
    analysis = pipeline.analyze_survey(USER, [
        SurveyResponse("low", "How often do you feel valued?", "Often", "Self-Worth & Identity", USER),
        work_response("high"),
    ])
    low, high = analysis.results

    assert low.deep_dive is None and low.vector_id is None
    assert high.deep_dive.generated_by == "fallback"
    assert high.vector_id.startswith(f"{USER}_")
    assert high.recurrence.is_recurring is False
    assert store.count(USER) == 1


def test_low_stress_survey_does_not_trigger(pipeline):
    analysis = pipeline.analyze_survey(USER, [
        SurveyResponse("a", "How often do you feel drained?", "Never", WORK, USER),
        SurveyResponse("b", "How often do you feel valued?", "Very often", "Personal Life", USER),
    ])

    assert analysis.decision.should_trigger is False
    assert analysis.decision.priority == "low"


def test_empty_survey(pipeline):
    analysis = pipeline.analyze_survey(USER, [])

    assert analysis.results == []
    assert analysis.decision.priority == "low"
    assert analysis.history_comparison["trend"] == "no_data"


def test_recurring_work_stress_across_surveys(pipeline):
    days = ["2026-03-01T09:00:00+00:00", "2026-03-02T09:00:00+00:00", "2026-03-03T09:00:00+00:00"]
    analyses = [pipeline.analyze_survey(USER, [work_response()], timestamp=day) for day in days]

    first, second, third = (a.results[0].recurrence for a in analyses)
    assert not first.is_recurring
    assert second.is_recurring and second.match_count == 1
    assert third.is_recurring and third.match_count == 2

    decision = analyses[-1].decision
    assert priority_at_least(decision.priority, "high")
    assert WORK in decision.focus_areas
    assert analyses[-1].history_comparison["hasHistoricalData"]


def test_store_outage_does_not_abort_survey(pipeline, qdrant_client):
    qdrant_client.delete_collection(TEST_COLLECTION)
    analysis = pipeline.analyze_survey(USER, [work_response()])
    result = analysis.results[0]

    assert result.assessment.score == 9
    assert result.deep_dive is not None
    assert result.vector_id is None
    assert result.storage_error["kind"] == "index_not_found"
    assert result.recurrence.is_recurring is False
    assert analysis.decision.should_trigger


def test_cleanup_prunes_after_survey(detector):
    pipeline = StressPipeline(
        StressScorer(), DeepDiveGenerator(None), EmbeddingAdapter(None, dim=TEST_DIM),
        detector, TriggerAggregator(), keep_recent=2
    )
    for _ in range(3):
        pipeline.analyze_survey(USER, [work_response()])

    assert detector.store.count(USER) == 2


def test_to_dict_is_serializable(pipeline):
    analysis = pipeline.analyze_survey(USER, [work_response()])
    data = json.loads(json.dumps(analysis.to_dict()))

    assert data["results"][0]["assessment"]["tag"] == "Burnout Risk"
    assert data["decision"]["priority"] == "critical"


def test_baseline_coerces_stored_scores():
    history = [{"metadata": {"stress_score": s}} for s in ("9", 7, "n/a", None)]

    assert historical_baseline(history) == 8.0
    assert historical_baseline([{"metadata": {"stress_score": "oops"}}]) is None


def test_string_score_in_history_does_not_break_survey(pipeline, store):
    store.upsert(USER, [0.5] * TEST_DIM, {"domain": WORK, "stressScore": "8"})
    analysis = pipeline.analyze_survey(USER, [work_response()])

    assert analysis.history_comparison["hasHistoricalData"] is True
    assert analysis.history_comparison["historicalAverage"] == 8.0

"""
Stress Pipeline
One survey submission end to end:
score -> (high stress) deep dive + embed + recurrence check + record
-> metrics -> trigger decision -> pruning.

Each component degrades on its own; only caller input errors abort.
"""
from datetime import datetime, timezone
from typing import List, Optional, Union, Dict, Any

import numpy as np

from config import CLEANUP_KEEP_RECENT, HISTORY_LIMIT
from manova.domains import stored_stress_score
from manova.errors import VectorStoreError
from manova.insight.deep_dive import DeepDiveGenerator, should_generate_deep_dive
from manova.memory.embedding_adapter import EmbeddingAdapter
from manova.memory.recurrence_detector import RecurrenceDetector
from manova.models import SurveyResponse, SurveyAnalysis, ResponseAnalysis
from manova.orchestration.trigger_aggregator import TriggerAggregator
from manova.scoring.metrics import (
    calculate_stress_metrics, identify_stress_triggers,
    generate_stress_summary, compare_with_history
)
from manova.scoring.stress_scorer import StressScorer


def historical_baseline(history: List[Dict[str, Any]]) -> Optional[float]:
    """Average stored stress score, or None without usable history."""
    scores = [stored_stress_score(entry.get("metadata")) for entry in history or []]
    scores = [s for s in scores if s is not None and s > 0]
    if not scores:
        return None
    return float(np.mean(scores))


class StressPipeline:
    """
    Wires the scorer, deep-dive generator, embedding adapter,
    recurrence detector and trigger aggregator together.
    """

    def __init__(
        self,
        scorer,
        deep_dive: DeepDiveGenerator,
        embedder: EmbeddingAdapter,
        detector: Optional[RecurrenceDetector],
        aggregator: TriggerAggregator,
        history_limit: int = HISTORY_LIMIT,
        keep_recent: int = CLEANUP_KEEP_RECENT
    ):
        self.scorer = scorer or StressScorer()
        self.deep_dive = deep_dive
        self.embedder = embedder
        self.detector = detector
        self.aggregator = aggregator
        self.history_limit = history_limit
        self.keep_recent = keep_recent

    def analyze_survey(
        self,
        user_id: str,
        responses: List[Union[SurveyResponse, Dict[str, Any]]],
        timestamp: Optional[str] = None
    ) -> SurveyAnalysis:
        timestamp = timestamp or datetime.now(timezone.utc).isoformat()
        print(f"\n  [Pipeline] Analyzing {len(responses)} response(s) for {user_id}")

        # History is read before anything from this survey is written
        history = self.detector.history(user_id, self.history_limit) if self.detector else []

        results = []
        for raw in responses:
            response = raw if isinstance(raw, SurveyResponse) else SurveyResponse.from_dict(raw, user_id)
            results.append(self._analyze_response(user_id, response, timestamp))

        assessments = [r.assessment for r in results]
        findings = [r.recurrence for r in results if r.recurrence is not None]

        metrics = calculate_stress_metrics(assessments)
        summary = generate_stress_summary(metrics, identify_stress_triggers(results))
        comparison = compare_with_history(metrics, history)

        decision = self.aggregator.decide(assessments, findings, historical_baseline(history))

        if self.detector:
            self.detector.cleanup(user_id, self.keep_recent)

        return SurveyAnalysis(
            user_id=user_id,
            timestamp=timestamp,
            results=results,
            decision=decision,
            metrics=metrics,
            summary=summary,
            history_comparison=comparison,
        )

    def _analyze_response(self, user_id: str, response: SurveyResponse, timestamp: str) -> ResponseAnalysis:
        assessment = self.scorer.score(
            response.question_text, response.answer_text,
            response.domain, response.question_id
        )
        result = ResponseAnalysis(response=response, assessment=assessment)

        if not should_generate_deep_dive(assessment):
            return result

        result.deep_dive = self.deep_dive.for_assessment(
            assessment, response.question_text, response.answer_text
        )

        if self.detector is None:
            return result

        embedding = self.embedder.embed_response(
            response.question_text, response.answer_text,
            assessment.domain, assessment.score
        )

        # Checked before recording so a record never matches itself
        result.recurrence = self.detector.find_recurrence(user_id, embedding, assessment.domain)

        try:
            stored = self.detector.record(user_id, embedding, {
                "user_id": user_id,
                "domain": assessment.domain,
                "question_id": response.question_id,
                "stress_score": assessment.score,
                "emotion": assessment.tag,
                "intensity": assessment.intensity,
                "cause_tag": assessment.cause_tag,
                "timestamp": timestamp,
                "question": response.question_text,
                "response": response.answer_text,
            })
            result.vector_id = stored["vectorId"]
        except VectorStoreError as e:
            print(f"  Warning: Could not store embedding for {response.question_id} ({e.message})")
            result.storage_error = e.to_dict()

        return result

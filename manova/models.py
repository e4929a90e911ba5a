"""
Manova Data Model
Every entity passed between components. ``to_dict`` emits the camelCase
JSON shape returned by the API handlers.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any


@dataclass
class SurveyResponse:
    question_id: str
    question_text: str
    answer_text: str
    domain: str
    user_id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any], user_id: str = "") -> "SurveyResponse":
        """Accept both snake_case and the camelCase survey payload."""
        return cls(
            question_id=str(data.get("question_id", data.get("questionId", ""))),
            question_text=data.get("question_text", data.get("question", "")) or "",
            answer_text=data.get("answer_text", data.get("answer", data.get("responseText", ""))) or "",
            domain=data.get("domain", "") or "",
            user_id=data.get("user_id", data.get("userId", user_id)) or user_id,
        )


@dataclass(frozen=True)
class StressAssessment:
    score: int
    tag: str
    cause_tag: str
    intensity: str
    label_color: str
    reason: str
    domain: str = ""
    question_id: str = ""
    generated_by: str = "heuristic"

    @property
    def is_high_stress(self) -> bool:
        return self.score >= 7 or self.intensity == "High"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "tag": self.tag,
            "causeTag": self.cause_tag,
            "intensity": self.intensity,
            "labelColor": self.label_color,
            "reason": self.reason,
            "domain": self.domain,
            "questionId": self.question_id,
            "generatedBy": self.generated_by,
        }


@dataclass
class DeepDiveInsight:
    causes: List[str]
    solutions: List[str]
    generated_by: str
    timestamp: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "causes": list(self.causes),
            "solutions": list(self.solutions),
            "generatedBy": self.generated_by,
            "timestamp": self.timestamp,
        }


@dataclass
class EmbeddingRecord:
    record_id: str
    vector: List[float]
    metadata: Dict[str, Any]


@dataclass
class RecurrenceFinding:
    is_recurring: bool
    match_count: int = 0
    average_similarity: float = 0.0
    domain: str = ""
    matches: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def none(cls, domain: str = "") -> "RecurrenceFinding":
        return cls(is_recurring=False, domain=domain)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isRecurring": self.is_recurring,
            "matchCount": self.match_count,
            "averageSimilarity": round(self.average_similarity, 4),
            "domain": self.domain,
            "matches": self.matches,
        }


@dataclass
class StressMetrics:
    average_score: float = 0.0
    total_responses: int = 0
    high_stress_count: int = 0
    moderate_stress_count: int = 0
    low_stress_count: int = 0
    domain_stats: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    overall_risk: str = "low"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "averageScore": round(self.average_score, 2),
            "totalResponses": self.total_responses,
            "highStressCount": self.high_stress_count,
            "moderateStressCount": self.moderate_stress_count,
            "lowStressCount": self.low_stress_count,
            "domainStats": self.domain_stats,
            "overallRisk": self.overall_risk,
        }


@dataclass
class PersonalizedMessage:
    title: str
    message: str
    tone: str
    action_items: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "message": self.message,
            "tone": self.tone,
            "actionItems": list(self.action_items),
        }


@dataclass
class FollowUpQuestion:
    id: str
    question: str
    type: str
    category: str
    options: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "type": self.type,
            "category": self.category,
            "options": list(self.options),
        }


@dataclass
class TriggerDecision:
    should_trigger: bool
    priority: str
    confidence: float
    focus_areas: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    trigger_type: str = "none"
    reasons: List[str] = field(default_factory=list)
    message: Optional[PersonalizedMessage] = None
    follow_up_questions: List[FollowUpQuestion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shouldTrigger": self.should_trigger,
            "priority": self.priority,
            "confidence": round(self.confidence, 2),
            "focusAreas": list(self.focus_areas),
            "recommendations": list(self.recommendations),
            "triggerType": self.trigger_type,
            "reasons": list(self.reasons),
            "message": self.message.to_dict() if self.message else None,
            "followUpQuestions": [q.to_dict() for q in self.follow_up_questions],
        }


@dataclass
class ResponseAnalysis:
    """Per-response pipeline output, in survey order."""
    response: SurveyResponse
    assessment: StressAssessment
    deep_dive: Optional[DeepDiveInsight] = None
    recurrence: Optional[RecurrenceFinding] = None
    vector_id: Optional[str] = None
    storage_error: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.response.question_id,
            "question": self.response.question_text,
            "answer": self.response.answer_text,
            "assessment": self.assessment.to_dict(),
            "deepDive": self.deep_dive.to_dict() if self.deep_dive else None,
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "vectorId": self.vector_id,
            "storageError": self.storage_error,
        }


@dataclass
class SurveyAnalysis:
    user_id: str
    timestamp: str
    results: List[ResponseAnalysis]
    decision: TriggerDecision
    metrics: StressMetrics
    summary: Dict[str, Any] = field(default_factory=dict)
    history_comparison: Dict[str, Any] = field(default_factory=dict)

    @property
    def assessments(self) -> List[StressAssessment]:
        return [r.assessment for r in self.results]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "timestamp": self.timestamp,
            "results": [r.to_dict() for r in self.results],
            "decision": self.decision.to_dict(),
            "metrics": self.metrics.to_dict(),
            "summary": self.summary,
            "historyComparison": self.history_comparison,
        }

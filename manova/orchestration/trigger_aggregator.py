"""
Trigger Aggregator
Combines one survey's assessments, recurrence findings and an optional
historical baseline into a single escalation decision.

Pure: nothing is kept between calls; the caller supplies the history window.
"""
from typing import Dict, List, Optional

from config import (
    CONFIDENCE_WEIGHTS, BASELINE_INCREASE_PCT, HIGH_STRESS_THRESHOLD,
    MULTI_DOMAIN_COUNT, RECURRENCE_PATTERN_MIN_MATCHES
)
from manova.domains import Domain
from manova.models import (
    StressAssessment, RecurrenceFinding, TriggerDecision,
    PersonalizedMessage, FollowUpQuestion
)
from manova.scoring.metrics import calculate_stress_metrics, stressed_domains


PRIORITY_ORDER = ["low", "low-moderate", "moderate", "high", "critical"]


def priority_rank(priority: str) -> int:
    return PRIORITY_ORDER.index(priority)


def priority_at_least(priority: str, threshold: str) -> bool:
    return priority_rank(priority) >= priority_rank(threshold)


PRIORITY_RECOMMENDATIONS = {
    "critical": [
        "Consider immediate professional support",
        "Immediate attention recommended",
        "Take steps to reduce immediate stressors",
    ],
    "high": [
        "Schedule time for stress management",
        "Consider professional consultation",
    ],
    "triggered": [
        "Focus on identified stress areas",
        "Implement stress reduction techniques",
    ],
    "none": [
        "Continue current wellness practices",
        "Maintain work-life balance",
    ],
}


def _unique(items: List[str]) -> List[str]:
    seen = []
    for item in items:
        if item and item not in seen:
            seen.append(item)
    return seen


class TriggerAggregator:
    """Decides whether to escalate into a deep-dive conversation."""

    def __init__(
        self,
        weights: Optional[Dict[str, float]] = None,
        baseline_increase_pct: float = BASELINE_INCREASE_PCT,
        pattern_min_matches: int = RECURRENCE_PATTERN_MIN_MATCHES
    ):
        self.weights = dict(CONFIDENCE_WEIGHTS)
        self.weights.update(weights or {})
        self.baseline_increase_pct = baseline_increase_pct
        self.pattern_min_matches = pattern_min_matches

    def decide(
        self,
        assessments: List[StressAssessment],
        findings: List[RecurrenceFinding],
        historical_baseline: Optional[float] = None
    ) -> TriggerDecision:
        metrics = calculate_stress_metrics(assessments)
        high_stress = sorted(
            [a for a in assessments if a.score >= HIGH_STRESS_THRESHOLD],
            key=lambda a: a.score,
            reverse=True
        )
        recurring = [f for f in findings if f.is_recurring]
        multi_domain = stressed_domains(metrics)

        should_trigger = False
        confidence = 0.0
        reasons, focus_areas = [], []

        # High-stress answers in this survey
        if high_stress:
            should_trigger = True
            reasons.append(f"{len(high_stress)} high-stress responses detected")
            focus_areas.extend(a.domain for a in high_stress)
            confidence += self.weights["high_stress"]

        # Recurrence against stored history
        if recurring:
            should_trigger = True
            reasons.append(f"{len(recurring)} recurring stress patterns identified")
            focus_areas.extend(f.domain for f in recurring)
            confidence += self.weights["recurring_patterns"]

        # Overall risk
        if metrics.overall_risk == "critical":
            should_trigger = True
            reasons.append("Critical stress levels detected")
            confidence += self.weights["critical_risk"]
        elif metrics.overall_risk == "high":
            should_trigger = True
            reasons.append("High stress levels detected")
            confidence += self.weights["high_risk"]

        # Several domains under strain
        if len(multi_domain) >= MULTI_DOMAIN_COUNT:
            should_trigger = True
            reasons.append(f"{len(multi_domain)} domains showing elevated stress")
            focus_areas.extend(multi_domain)
            confidence += self.weights["multi_domain"]

        # Deviation from the user's own baseline
        if historical_baseline and historical_baseline > 0 and assessments:
            increase = (metrics.average_score - historical_baseline) / historical_baseline * 100
            if increase > self.baseline_increase_pct:
                should_trigger = True
                reasons.append(f"{round(increase)}% increase from historical baseline")
                confidence += self.weights["baseline_deviation"]

        recurring_pattern = (
            len(recurring) >= self.pattern_min_matches
            or any(f.match_count >= self.pattern_min_matches for f in recurring)
        )

        if metrics.overall_risk == "critical":
            priority = "critical"
        elif recurring_pattern or metrics.overall_risk == "high":
            priority = "high"
        elif len(multi_domain) >= MULTI_DOMAIN_COUNT:
            priority = "moderate"
        elif recurring or high_stress:
            priority = "low-moderate"
        else:
            priority = "low"

        confidence = max(0.0, min(confidence, 1.0))
        trigger_type = self._trigger_type(
            should_trigger, metrics.overall_risk, recurring_pattern, confidence
        )

        decision = TriggerDecision(
            should_trigger=should_trigger,
            priority=priority,
            confidence=confidence,
            focus_areas=_unique(focus_areas),
            recommendations=self._recommendations(should_trigger, priority, recurring_pattern),
            trigger_type=trigger_type,
            reasons=reasons,
        )
        decision.message = create_personalized_message(decision, bool(recurring))
        decision.follow_up_questions = generate_follow_up_questions(decision)

        print(f"  [Trigger] trigger={decision.should_trigger} | {decision.priority} | "
              f"{decision.trigger_type} | confidence {decision.confidence:.2f} | "
              f"focus {decision.focus_areas}")

        return decision

    @staticmethod
    def _trigger_type(should_trigger: bool, risk: str, recurring_pattern: bool, confidence: float) -> str:
        if risk == "critical":
            return "critical_stress"
        if risk == "high":
            return "high_stress"
        if recurring_pattern:
            return "recurring_patterns"
        if not should_trigger:
            return "none"
        if confidence >= 0.7:
            return "high_confidence"
        if confidence >= 0.4:
            return "moderate_confidence"
        return "low_confidence"

    @staticmethod
    def _recommendations(should_trigger: bool, priority: str, recurring_pattern: bool) -> List[str]:
        items = []
        if recurring_pattern:
            items.append("Consider professional consultation")

        if priority in ("critical", "high"):
            items.extend(PRIORITY_RECOMMENDATIONS[priority])
        elif should_trigger:
            items.extend(PRIORITY_RECOMMENDATIONS["triggered"])
        else:
            items.extend(PRIORITY_RECOMMENDATIONS["none"])

        return _unique(items)


def create_personalized_message(decision: TriggerDecision, has_recurrence: bool = False) -> PersonalizedMessage:
    """User-facing title, message, tone and action items keyed by priority."""
    if not decision.should_trigger:
        return PersonalizedMessage(
            title="Great Job!",
            message="Your responses indicate healthy stress levels. "
                    "Keep up the good work with your wellness journey!",
            tone="positive",
            action_items=["Continue current wellness practices", "Maintain work-life balance"],
        )

    if decision.priority == "critical":
        return PersonalizedMessage(
            title="We're Here to Support You",
            message="I notice you're experiencing significant stress across multiple areas. "
                    "This takes courage to acknowledge, and support is available.",
            tone="compassionate",
            action_items=[
                "Consider reaching out to a mental health professional",
                "Connect with trusted friends or family",
                "Take immediate steps to reduce daily stressors",
            ],
        )

    if decision.priority == "high":
        areas = " and ".join(decision.focus_areas) or "a few areas"
        if has_recurrence:
            opening = f"I've identified some recurring stress patterns, particularly in {areas}."
        else:
            opening = f"I've noticed elevated stress, particularly in {areas}."
        return PersonalizedMessage(
            title="Let's Address These Patterns Together",
            message=f"{opening} Let's explore strategies to help you feel better.",
            tone="encouraging",
            action_items=[
                "Focus on the stressed areas we identified",
                "Consider professional guidance",
                "Implement targeted stress reduction techniques",
            ],
        )

    return PersonalizedMessage(
        title="Understanding Your Stress Patterns",
        message="Your responses show some areas that could benefit from attention. "
                "Let's explore these patterns to help you develop better coping strategies.",
        tone="supportive",
        action_items=[
            "Reflect on the stress triggers we identified",
            "Practice stress management techniques",
            "Monitor these patterns over time",
        ],
    )


def generate_follow_up_questions(decision: TriggerDecision) -> List[FollowUpQuestion]:
    """Targeted follow-ups keyed by trigger type, focus domains and priority."""
    if not decision.should_trigger:
        return []

    questions = []

    if decision.trigger_type in ("high_stress", "critical_stress"):
        questions.append(FollowUpQuestion(
            id="stress_impact",
            question="How is this stress currently affecting your daily life and relationships?",
            type="open_text",
            category="impact_assessment",
        ))
        questions.append(FollowUpQuestion(
            id="stress_duration",
            question="How long have you been experiencing these stress levels?",
            type="multiple_choice",
            category="duration_assessment",
            options=["Less than a week", "1-2 weeks", "1-3 months", "3-6 months", "More than 6 months"],
        ))

    if Domain.WORK_CAREER.value in decision.focus_areas:
        questions.append(FollowUpQuestion(
            id="work_support",
            question="What specific aspects of your work environment contribute most to your stress?",
            type="multiple_select",
            category="work_stress",
            options=["Workload", "Management", "Colleagues", "Job security", "Work-life balance", "Career growth"],
        ))

    if Domain.PERSONAL_LIFE.value in decision.focus_areas:
        questions.append(FollowUpQuestion(
            id="relationship_support",
            question="Who in your life provides the most emotional support during stressful times?",
            type="open_text",
            category="support_system",
        ))

    if decision.trigger_type == "recurring_patterns":
        questions.append(FollowUpQuestion(
            id="pattern_awareness",
            question="Have you noticed these stress patterns before? What usually helps you cope?",
            type="open_text",
            category="pattern_exploration",
        ))
        questions.append(FollowUpQuestion(
            id="coping_strategies",
            question="Which coping strategies have you tried recently?",
            type="multiple_select",
            category="coping_assessment",
            options=["Exercise", "Meditation", "Talking to friends", "Professional help", "Hobbies", "Time off"],
        ))

    if decision.priority in ("critical", "high"):
        questions.append(FollowUpQuestion(
            id="professional_help_openness",
            question="How do you feel about speaking with a mental health professional?",
            type="multiple_choice",
            category="help_seeking",
            options=["Very open to it", "Somewhat interested", "Unsure",
                     "Prefer to try other methods first", "Not interested"],
        ))

    return questions

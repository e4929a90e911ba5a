"""
Heuristic Stress Scorer
Maps a survey question/answer pair to a 1-10 stress score, tag and cause tag.

Question intent (positive vs negative framing) decides how the frequency
of the answer translates to stress: "Never" feeling supported is high
stress, "Never" feeling drained is low stress.
"""
from typing import Optional, Tuple

from manova.domains import Domain, DOMAIN_RULES, GENERIC_CAUSE_TAGS, band_for_score, canonical_domain
from manova.models import StressAssessment


POSITIVE_INTENT_KEYWORDS = [
    'support', 'recognition', 'energy', 'meaningful', 'positive',
    'satisfaction', 'acknowledgment', 'valued', 'understood', 'complete',
]
NEGATIVE_INTENT_KEYWORDS = [
    'drained', 'exhausted', 'overwhelmed', 'conflict', 'stress',
    'burnout', 'difficult', 'pressure', 'beyond capacity',
]

# "very often" before "often"
LOW_FREQUENCY_ANSWERS = ['never', 'not at all', 'rarely']
MEDIUM_FREQUENCY_ANSWERS = ['sometimes', 'somewhat', 'a little']
HIGH_FREQUENCY_ANSWERS = ['very often', 'often', 'mostly', 'completely']

STRESS_WORDS = ['overwhelmed', 'stressed', 'anxious', 'worried', 'exhausted', 'burned out']

# (intent, frequency) -> (score, tag, reason)
TRUTH_TABLE = {
    ("positive", "low"): (9, "Support Deficiency",
                          "Lack of positive experiences or support indicates significant stress"),
    ("positive", "medium"): (5, "Recognition Deficit",
                             "Limited positive experiences suggest moderate stress"),
    ("positive", "high"): (2, "Low Stress",
                           "Regular positive experiences indicate low stress"),
    ("negative", "high"): (9, "Energy Depletion",
                           "Frequent negative experiences indicate high stress"),
    ("negative", "medium"): (5, "Workload Overwhelm",
                             "Occasional negative experiences suggest moderate stress"),
    ("negative", "low"): (2, "Low Stress",
                          "Rare negative experiences indicate low stress"),
}

DEFAULT_RESULT = (5, "Low Stress", "Response indicates manageable stress levels")
STRESS_WORD_RESULT = (7, "Emotional Disconnection", "Response contains stress indicators")


def classify_intent(question: str) -> str:
    """Return 'positive', 'negative' or 'unclear'."""
    lowered = (question or "").lower()
    positive = any(k in lowered for k in POSITIVE_INTENT_KEYWORDS)
    negative = any(k in lowered for k in NEGATIVE_INTENT_KEYWORDS)

    if positive and not negative:
        return "positive"
    if negative and not positive:
        return "negative"
    return "unclear"


FREQUENCY_ORDER = {
    "positive": (("low", LOW_FREQUENCY_ANSWERS), ("medium", MEDIUM_FREQUENCY_ANSWERS),
                 ("high", HIGH_FREQUENCY_ANSWERS)),
    "negative": (("high", HIGH_FREQUENCY_ANSWERS), ("medium", MEDIUM_FREQUENCY_ANSWERS),
                 ("low", LOW_FREQUENCY_ANSWERS)),
}


def classify_frequency(answer: str, intent: str = "positive") -> str:
    """
    Return 'low', 'medium', 'high' or 'unclear'.

    An answer mixing keywords resolves toward the stressful reading:
    low frequency first for positive questions, high frequency first for negative ones.
    """
    lowered = (answer or "").lower()

    for frequency, keywords in FREQUENCY_ORDER.get(intent, FREQUENCY_ORDER["positive"]):
        if any(a in lowered for a in keywords):
            return frequency
    return "unclear"


def apply_domain_rule(domain: Domain, tag: str, score: int) -> Tuple[str, str]:
    """Refine a generic tag and derive its cause tag for a domain."""
    rule = DOMAIN_RULES.get(domain)
    generic_cause = GENERIC_CAUSE_TAGS.get(tag, "low_stress")

    if rule is None:
        return tag, generic_cause

    if rule["fixed_tag"]:
        tag = rule["fixed_tag"]

    remap = rule["tag_remap"].get(tag)
    if remap:
        new_tag, (high_cause, low_cause) = remap
        return new_tag, high_cause if score >= 7 else low_cause

    for min_score, cause in rule["cause_bands"]:
        if score >= min_score:
            return tag, cause

    return tag, generic_cause


class StressScorer:
    """
    Local rule engine. Pure function of (question, answer, domain);
    also the mandatory fallback for the LLM scorer.
    """

    def score(
        self,
        question: str,
        answer: str,
        domain: Optional[str] = None,
        question_id: str = ""
    ) -> StressAssessment:
        """Score a single answer."""
        domain_enum = Domain.from_label(domain)

        intent = classify_intent(question)
        frequency = classify_frequency(answer, intent)

        if intent == "unclear":
            lowered = (answer or "").lower()
            if any(w in lowered for w in STRESS_WORDS):
                score, tag, reason = STRESS_WORD_RESULT
            else:
                score, tag, reason = DEFAULT_RESULT
        else:
            score, tag, reason = TRUTH_TABLE.get((intent, frequency), DEFAULT_RESULT)

        tag, cause_tag = apply_domain_rule(domain_enum, tag, score)
        intensity, label_color = band_for_score(score)

        return StressAssessment(
            score=score,
            tag=tag,
            cause_tag=cause_tag,
            intensity=intensity,
            label_color=label_color,
            reason=reason,
            domain=canonical_domain(domain),
            question_id=question_id,
            generated_by="heuristic",
        )

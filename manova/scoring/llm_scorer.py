"""
LLM Stress Scorer
Delegates scoring to a Groq chat model with a rigid JSON prompt.
The heuristic scorer is the mandatory fallback: this class never raises.
"""
import re
from typing import Dict, Any, Optional

from groq import Groq

from config import GROQ_MODEL, SCORING_TEMPERATURE, SCORING_MAX_TOKENS
from manova.domains import STRESS_TAGS, CAUSE_TAGS, band_for_score, canonical_domain
from manova.errors import ManovaError, ProviderUnavailable, MalformedProviderResponse
from manova.models import StressAssessment
from manova.scoring.stress_scorer import StressScorer
from manova.utils import parse_json_object, Result


SCORING_PROMPT = """You are an expert mental wellness psychologist with deep understanding of stress indicators and question context.

CRITICAL ANALYSIS RULES:
1. POSITIVE QUESTIONS: When a question asks about POSITIVE things (support, recognition, energy, meaningful relationships), answers like "Never" or "Not at all" indicate HIGH STRESS
2. NEGATIVE QUESTIONS: When a question asks about NEGATIVE things (feeling drained, overwhelmed, conflict), answers like "Never" indicate LOW STRESS
3. CONTEXT MATTERS: Same answer means different things based on what's being asked

Question: "{question}"
Answer: "{answer}"
Domain: "{domain}"

SCORING LOGIC:
For POSITIVE intent questions: Never/Not at all = 9-10 stress, Often/Completely = 1-2 stress
For NEGATIVE intent questions: Never/Not at all = 1-2 stress, Often/Very Often = 9-10 stress

Return ONLY a JSON object with this exact structure:
{{
  "score": 1-10,
  "tag": {tags},
  "causeTag": {cause_tags},
  "intensity": "Low" | "Moderate" | "High",
  "labelColor": "green" | "yellow" | "red",
  "reason": "Brief sentence explaining why this indicates stress based on question intent and answer"
}}

INTENSITY AND COLOR MAPPING:
- Score 1-3: Low intensity, green color
- Score 4-6: Moderate intensity, yellow color
- Score 7-10: High intensity, red color

Be precise and context-aware. The same answer can indicate different stress levels based on question intent."""

REQUIRED_FIELDS = ("score", "tag", "causeTag", "intensity", "labelColor", "reason")


def _quoted_union(values) -> str:
    return " | ".join(f'"{v}"' for v in values)


def coerce_score(value: Any) -> int:
    """
    Integer score clamped into [1, 10].

    Raises:
        MalformedProviderResponse: if the value is not an integer
    """
    if isinstance(value, bool):
        raise MalformedProviderResponse("score is not an integer", {"score": value})
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and re.fullmatch(r"-?[0-9]+", value.strip()):
        value = int(value.strip())

    if not isinstance(value, int):
        raise MalformedProviderResponse("score is not an integer", {"score": value})

    return max(1, min(10, value))


def validate_llm_assessment(
    data: Dict[str, Any],
    domain: str = "",
    question_id: str = ""
) -> StressAssessment:
    """
    Trust nothing from the model: every field present, vocabularies closed,
    and intensity / colour recomputed from the score.

    Raises:
        MalformedProviderResponse: on a missing field or out-of-vocabulary value
    """
    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
    if missing:
        raise MalformedProviderResponse("Missing required fields", {"missing": missing})

    if data["tag"] not in STRESS_TAGS:
        raise MalformedProviderResponse("Unknown tag", {"tag": data["tag"]})
    if data["causeTag"] not in CAUSE_TAGS:
        raise MalformedProviderResponse("Unknown cause tag", {"causeTag": data["causeTag"]})

    score = coerce_score(data["score"])
    intensity, label_color = band_for_score(score)

    return StressAssessment(
        score=score,
        tag=data["tag"],
        cause_tag=data["causeTag"],
        intensity=intensity,
        label_color=label_color,
        reason=str(data["reason"]),
        domain=canonical_domain(domain),
        question_id=question_id,
        generated_by="ai",
    )


class LLMStressScorer:
    """
    Scores answers with a completion model, falling back to the
    heuristic rule engine on any provider or validation failure.
    """

    def __init__(
        self,
        llm_client: Optional[Groq],
        model: str = GROQ_MODEL,
        fallback: Optional[StressScorer] = None
    ):
        self.llm = llm_client
        self.model = model
        self.fallback = fallback or StressScorer()

    def score(
        self,
        question: str,
        answer: str,
        domain: Optional[str] = None,
        question_id: str = ""
    ) -> StressAssessment:
        """Score a single answer; never raises."""
        result = self._request(question, answer, domain).map(
            lambda data: validate_llm_assessment(data, domain or "", question_id)
        )

        def use_heuristic(error: ManovaError) -> StressAssessment:
            print(f"  Warning: LLM scoring failed ({error.kind}: {error.message}), using heuristic")
            return self.fallback.score(question, answer, domain, question_id)

        return result.recover(use_heuristic)

    def _request(self, question: str, answer: str, domain: Optional[str]) -> Result[Dict[str, Any]]:
        if self.llm is None:
            return Result.failure(ProviderUnavailable("No completion client configured"))

        prompt = SCORING_PROMPT.format(
            question=(question or "")[:500],
            answer=(answer or "")[:500],
            domain=domain or "General",
            tags=_quoted_union(STRESS_TAGS),
            cause_tags=_quoted_union(CAUSE_TAGS),
        )

        try:
            response = self.llm.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You are an expert mental health AI. Respond only with valid JSON."},
                    {"role": "user", "content": prompt}
                ],
                temperature=SCORING_TEMPERATURE,
                max_tokens=SCORING_MAX_TOKENS
            )
            content = response.choices[0].message.content or ""
        except Exception as e:
            return Result.failure(ProviderUnavailable(f"Completion request failed: {e}"))

        try:
            return Result.success(parse_json_object(content))
        except MalformedProviderResponse as e:
            return Result.failure(e)

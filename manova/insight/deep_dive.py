"""
Deep-Dive Generator
Root causes and coping strategies for high-stress answers.
Uses the completion model when available and a fixed domain table otherwise.
"""
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from groq import Groq

from config import GROQ_MODEL, DEEP_DIVE_TEMPERATURE, DEEP_DIVE_MAX_TOKENS, HIGH_STRESS_THRESHOLD
from manova.domains import Domain, DEEP_DIVE_FALLBACKS, GENERIC_DEEP_DIVE_FALLBACK
from manova.errors import ManovaError, ProviderUnavailable, MalformedProviderResponse
from manova.models import StressAssessment, DeepDiveInsight
from manova.utils import parse_json_object, Result


DEEP_DIVE_PROMPT = """You are a compassionate mental wellness expert helping users explore their emotional challenges.

Question: "{question}"
User Response: "{answer}"
Stress Score: {score}/10
Emotion: {emotion}
Intensity: {intensity}

Based on this response: "{answer}", return top 3 root-level stress contributors that could explain their emotional discomfort. Each contributor should be short and specific.

Also provide 3 personalized coping strategies that are practical and emotionally intelligent.

Output only valid JSON in this format:
{{
  "causes": ["Cause 1", "Cause 2", "Cause 3"],
  "solutions": ["Tip 1", "Tip 2", "Tip 3"]
}}
Do not include anything else."""

ITEMS_PER_LIST = 3


def should_generate_deep_dive(assessment: StressAssessment) -> bool:
    """Deep dives are only produced for high-stress answers."""
    return assessment.score >= HIGH_STRESS_THRESHOLD or assessment.intensity == "High"


def fallback_insight(domain: Optional[str]) -> Dict[str, List[str]]:
    """Pre-written causes / solutions for a domain label."""
    table = DEEP_DIVE_FALLBACKS.get(Domain.from_label(domain), GENERIC_DEEP_DIVE_FALLBACK)
    return {"causes": list(table["causes"]), "solutions": list(table["solutions"])}


def _string_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data.get(key)
    if not isinstance(value, list) or not value:
        raise MalformedProviderResponse(f"'{key}' must be a non-empty list", {key: value})
    if not all(isinstance(item, str) and item.strip() for item in value):
        raise MalformedProviderResponse(f"'{key}' must contain only non-empty strings", {key: value})
    return [item.strip() for item in value[:ITEMS_PER_LIST]]


def validate_deep_dive(data: Dict[str, Any], domain: Optional[str] = None) -> Dict[str, List[str]]:
    """
    Both lists present, non-empty and made of strings.
    Lists are cut to three items; short lists are topped up from the domain table.

    Raises:
        MalformedProviderResponse: if either list is missing or malformed
    """
    causes = _string_list(data, "causes")
    solutions = _string_list(data, "solutions")

    table = fallback_insight(domain)
    for items, key in ((causes, "causes"), (solutions, "solutions")):
        for extra in table[key]:
            if len(items) >= ITEMS_PER_LIST:
                break
            if extra not in items:
                items.append(extra)

    return {"causes": causes, "solutions": solutions}


class DeepDiveGenerator:
    """Produces a DeepDiveInsight; never raises."""

    def __init__(self, llm_client: Optional[Groq] = None, model: str = GROQ_MODEL):
        self.llm = llm_client
        self.model = model

    def deep_dive(
        self,
        question: str,
        answer: str,
        score: int,
        emotion: str,
        intensity: str,
        domain: Optional[str] = None
    ) -> DeepDiveInsight:
        print(f"  [DeepDive] {domain or 'General'} | score {score} | {emotion} | {intensity}")

        result = self._request(question, answer, score, emotion, intensity).map(
            lambda data: validate_deep_dive(data, domain)
        )

        def use_table(error: ManovaError) -> Dict[str, Any]:
            print(f"  Warning: Deep dive generation failed ({error.kind}: {error.message}), using fallback")
            return dict(fallback_insight(domain), generated_by="fallback")

        content = result.map(lambda items: dict(items, generated_by="ai")).recover(use_table)

        return DeepDiveInsight(
            causes=content["causes"],
            solutions=content["solutions"],
            generated_by=content["generated_by"],
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    def for_assessment(self, assessment: StressAssessment, question: str, answer: str) -> DeepDiveInsight:
        return self.deep_dive(
            question, answer, assessment.score, assessment.tag,
            assessment.intensity, assessment.domain
        )

    def _request(
        self,
        question: str,
        answer: str,
        score: int,
        emotion: str,
        intensity: str
    ) -> Result[Dict[str, Any]]:
        if self.llm is None:
            return Result.failure(ProviderUnavailable("No completion client configured"))

        prompt = DEEP_DIVE_PROMPT.format(
            question=(question or "")[:500],
            answer=(answer or "")[:500],
            score=score,
            emotion=emotion,
            intensity=intensity,
        )

        try:
            response = self.llm.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You are a compassionate mental wellness expert. Respond only with valid JSON."},
                    {"role": "user", "content": prompt}
                ],
                temperature=DEEP_DIVE_TEMPERATURE,
                max_tokens=DEEP_DIVE_MAX_TOKENS
            )
            content = response.choices[0].message.content or ""
        except Exception as e:
            return Result.failure(ProviderUnavailable(f"Completion request failed: {e}"))

        try:
            return Result.success(parse_json_object(content))
        except MalformedProviderResponse as e:
            return Result.failure(e)


def format_for_ui(insight: DeepDiveInsight, question_id: str = "", domain: str = "") -> Dict[str, Any]:
    """Split solutions into immediate / long-term actions for display."""
    if insight.generated_by == "ai":
        follow_up = "Consider speaking with a mental health professional if stress persists"
    else:
        follow_up = "Professional support may be beneficial for ongoing concerns"

    return {
        "questionId": question_id,
        "domain": domain,
        "stressLevel": "high",
        "analysis": insight.to_dict(),
        "recommendations": {
            "immediate": insight.solutions[:2],
            "longTerm": insight.solutions[2:],
            "severity": "high",
            "followUp": follow_up,
        },
    }

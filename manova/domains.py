"""
Domains and Vocabularies
Closed life-area enum, the fixed tag / cause-tag vocabularies, and the
per-domain data tables used by the scorer and the deep-dive fallback.
"""
from enum import Enum
from typing import Dict, List, Optional, Tuple

from config import DOMAIN_ALIASES, HIGH_STRESS_THRESHOLD, MODERATE_STRESS_THRESHOLD


class Domain(str, Enum):
    WORK_CAREER = "Work & Career"
    PERSONAL_LIFE = "Personal Life"
    FINANCIAL = "Financial Stress"
    HEALTH = "Health"
    SELF_WORTH = "Self-Worth & Identity"
    GENERAL = "General"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Domain":
        """Resolve a free-form domain label; unknown labels map to GENERAL."""
        if isinstance(label, Domain):
            return label
        if not label:
            return cls.GENERAL

        normalized = " ".join(str(label).split()).lower()
        for domain in cls:
            if domain.value.lower() == normalized:
                return domain

        canonical = DOMAIN_ALIASES.get(normalized)
        if canonical:
            return cls(canonical)

        return cls.GENERAL


def canonical_domain(label: Optional[str]) -> str:
    """Canonical name for known domains; unknown labels are kept as given."""
    domain = Domain.from_label(label)
    if domain is Domain.GENERAL and label:
        return " ".join(str(label).split())
    return domain.value


# Stress tags (11)
STRESS_TAGS = (
    "Support Deficiency",
    "Emotional Disconnection",
    "Energy Depletion",
    "Recognition Deficit",
    "Workload Overwhelm",
    "Social Isolation",
    "Financial Strain",
    "Health Neglect",
    "Identity Crisis",
    "Burnout Risk",
    "Low Stress",
)

# Emotional cause tags (20)
CAUSE_TAGS = (
    "burnout",
    "insecurity",
    "relationship_stress",
    "financial_fear",
    "overwork",
    "loneliness",
    "perfectionism",
    "impostor_syndrome",
    "boundary_issues",
    "abandonment_fear",
    "career_stagnation",
    "health_anxiety",
    "self_worth",
    "communication_issues",
    "time_pressure",
    "rejection_fear",
    "inadequacy",
    "overwhelm",
    "isolation",
    "low_stress",
)

INTENSITIES = ("Low", "Moderate", "High")
LABEL_COLORS = ("green", "yellow", "red")

# Cause tag kept by domains without a remap rule
GENERIC_CAUSE_TAGS = {
    "Support Deficiency": "isolation",
    "Recognition Deficit": "insecurity",
    "Energy Depletion": "burnout",
    "Workload Overwhelm": "overwork",
    "Emotional Disconnection": "overwhelm",
    "Low Stress": "low_stress",
}


def band_for_score(score: int) -> Tuple[str, str]:
    """Intensity and label colour for a 1-10 score."""
    if score >= HIGH_STRESS_THRESHOLD:
        return "High", "red"
    if score >= MODERATE_STRESS_THRESHOLD:
        return "Moderate", "yellow"
    return "Low", "green"


def stored_stress_score(metadata: Optional[Dict]) -> Optional[float]:
    """Stress score from stored metadata; None when missing or not numeric."""
    value = (metadata or {}).get("stress_score")
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or value != value:
        return None
    return float(value)


# Per-domain remap rules.
#   tag_remap:   generic tag -> (new tag, (cause if score >= 7, cause otherwise))
#   fixed_tag:   tag applied to every answer in the domain
#   cause_bands: (min score, cause) checked top-down when no tag remap fired
DOMAIN_RULES: Dict[Domain, Dict] = {
    Domain.WORK_CAREER: {
        "tag_remap": {
            "Support Deficiency": ("Recognition Deficit", ("burnout", "insecurity")),
            "Energy Depletion": ("Burnout Risk", ("burnout", "burnout")),
        },
        "fixed_tag": None,
        "cause_bands": [(7, "overwork"), (4, "career_stagnation")],
    },
    Domain.PERSONAL_LIFE: {
        "tag_remap": {
            "Support Deficiency": ("Social Isolation", ("loneliness", "loneliness")),
            "Energy Depletion": ("Emotional Disconnection", ("relationship_stress", "relationship_stress")),
        },
        "fixed_tag": None,
        "cause_bands": [(7, "relationship_stress"), (4, "boundary_issues")],
    },
    Domain.FINANCIAL: {
        "tag_remap": {},
        "fixed_tag": "Financial Strain",
        "cause_bands": [(1, "financial_fear")],
    },
    Domain.HEALTH: {
        "tag_remap": {},
        "fixed_tag": "Health Neglect",
        "cause_bands": [(1, "health_anxiety")],
    },
    Domain.SELF_WORTH: {
        "tag_remap": {},
        "fixed_tag": "Identity Crisis",
        "cause_bands": [(7, "inadequacy"), (4, "self_worth"), (1, "insecurity")],
    },
}


# Deep-dive fallback (3 causes, 3 solutions per domain)
DEEP_DIVE_FALLBACKS: Dict[Domain, Dict[str, List[str]]] = {
    Domain.WORK_CAREER: {
        "causes": [
            "Heavy workload and unrealistic deadlines creating chronic pressure",
            "Lack of work-life balance leading to burnout and exhaustion",
            "Unclear expectations or insufficient support from management",
        ],
        "solutions": [
            "Practice time-blocking to prioritize urgent tasks and set boundaries",
            "Communicate with your supervisor about workload concerns and seek support",
            "Take short breaks every hour to reset your mental energy",
        ],
    },
    Domain.FINANCIAL: {
        "causes": [
            "Insufficient emergency savings creating anxiety about unexpected expenses",
            "Monthly expenses exceeding income leading to ongoing financial stress",
            "Lack of clear financial planning causing uncertainty about the future",
        ],
        "solutions": [
            "Create a simple budget to track spending and identify areas to cut costs",
            "Start small by saving a little each day to build an emergency fund gradually",
            "Consider speaking with a financial counselor or using budgeting apps",
        ],
    },
    Domain.PERSONAL_LIFE: {
        "causes": [
            "Communication breakdowns leading to misunderstandings and conflict",
            "Unmet emotional needs creating feelings of isolation or resentment",
            "Different life goals or values causing relationship tension",
        ],
        "solutions": [
            "Practice active listening and express your needs clearly and kindly",
            "Schedule regular check-ins with important people in your life",
            "Consider couples or family counseling if conflicts persist",
        ],
    },
    Domain.HEALTH: {
        "causes": [
            "Chronic stress weakening immune system and overall physical health",
            "Poor sleep patterns disrupting emotional regulation and energy levels",
            "Neglecting self-care due to overwhelming responsibilities",
        ],
        "solutions": [
            "Establish a consistent sleep schedule and create a calming bedtime routine",
            "Start with 10-15 minutes of daily movement or gentle exercise",
            "Practice deep breathing exercises when feeling overwhelmed",
        ],
    },
}

GENERIC_DEEP_DIVE_FALLBACK: Dict[str, List[str]] = {
    "causes": [
        "Overwhelming responsibilities creating chronic stress and anxiety",
        "Lack of effective coping strategies for managing difficult situations",
        "Insufficient support systems during challenging times",
    ],
    "solutions": [
        "Break large problems into smaller, manageable steps",
        "Reach out to trusted friends, family, or professionals for support",
        "Practice mindfulness or relaxation techniques to manage stress",
    ],
}

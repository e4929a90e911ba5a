"""
Survey Metrics
Aggregate statistics over one survey's assessments, the high-stress
trigger list, a readable summary and comparison with stored history.
"""
from typing import Dict, List, Any, Optional

import numpy as np

from config import (
    HIGH_STRESS_THRESHOLD, MODERATE_STRESS_THRESHOLD,
    CRITICAL_AVERAGE_SCORE, CRITICAL_HIGH_STRESS_COUNT,
    HIGH_AVERAGE_SCORE, HIGH_HIGH_STRESS_COUNT, DOMAIN_STRESS_AVERAGE,
    HISTORY_STABLE_PCT, HISTORY_SHIFT_PCT
)
from manova.domains import stored_stress_score
from manova.models import StressAssessment, StressMetrics, ResponseAnalysis


def overall_risk_level(average: float, high_stress_count: int) -> str:
    if high_stress_count >= CRITICAL_HIGH_STRESS_COUNT or average >= CRITICAL_AVERAGE_SCORE:
        return "critical"
    if high_stress_count >= HIGH_HIGH_STRESS_COUNT or average >= HIGH_AVERAGE_SCORE:
        return "high"
    if high_stress_count >= 1 or average >= MODERATE_STRESS_THRESHOLD:
        return "moderate"
    return "low"


def calculate_stress_metrics(assessments: List[StressAssessment]) -> StressMetrics:
    """Average, band counts, per-domain stats and overall risk."""
    if not assessments:
        return StressMetrics()

    scores = np.array([a.score for a in assessments], dtype=float)
    average = float(scores.mean())
    high = int((scores >= HIGH_STRESS_THRESHOLD).sum())
    moderate = int(((scores >= MODERATE_STRESS_THRESHOLD) & (scores < HIGH_STRESS_THRESHOLD)).sum())
    low = int((scores < MODERATE_STRESS_THRESHOLD).sum())

    domain_stats: Dict[str, Dict[str, Any]] = {}
    for a in assessments:
        stats = domain_stats.setdefault(a.domain, {
            "scores": [],
            "averageScore": 0.0,
            "highStressCount": 0,
            "totalQuestions": 0,
        })
        stats["scores"].append(a.score)
        stats["totalQuestions"] += 1
        if a.score >= HIGH_STRESS_THRESHOLD:
            stats["highStressCount"] += 1

    for stats in domain_stats.values():
        stats["averageScore"] = float(np.mean(stats["scores"]))

    return StressMetrics(
        average_score=average,
        total_responses=len(assessments),
        high_stress_count=high,
        moderate_stress_count=moderate,
        low_stress_count=low,
        domain_stats=domain_stats,
        overall_risk=overall_risk_level(average, high),
    )


def stressed_domains(metrics: StressMetrics, min_average: float = DOMAIN_STRESS_AVERAGE) -> List[str]:
    """Domains whose average reaches min_average, highest first."""
    ranked = sorted(
        metrics.domain_stats.items(),
        key=lambda item: item[1]["averageScore"],
        reverse=True
    )
    return [domain for domain, stats in ranked if stats["averageScore"] >= min_average]


def identify_stress_triggers(results: List[ResponseAnalysis]) -> List[Dict[str, Any]]:
    """High-stress responses, highest score first."""
    triggers = []
    for r in results:
        a = r.assessment
        if a.score < HIGH_STRESS_THRESHOLD:
            continue
        triggers.append({
            "question": r.response.question_text,
            "answer": r.response.answer_text,
            "domain": a.domain,
            "stressScore": a.score,
            "emotion": a.tag,
            "causeTag": a.cause_tag,
            "intensity": a.intensity,
        })

    return sorted(triggers, key=lambda t: t["stressScore"], reverse=True)


def generate_stress_summary(metrics: StressMetrics, triggers: List[Dict[str, Any]]) -> Dict[str, Any]:
    primary_domains = [
        {
            "domain": domain,
            "averageScore": metrics.domain_stats[domain]["averageScore"],
            "highStressCount": metrics.domain_stats[domain]["highStressCount"],
            "totalQuestions": metrics.domain_stats[domain]["totalQuestions"],
        }
        for domain in stressed_domains(metrics)
    ]
    top_triggers = triggers[:3]

    return {
        "overallRisk": metrics.overall_risk,
        "averageStress": round(metrics.average_score, 2),
        "totalHighStressResponses": metrics.high_stress_count,
        "primaryStressDomains": primary_domains,
        "topStressTriggers": top_triggers,
        "needsAttention": metrics.overall_risk in ("high", "critical"),
        "recommendProfessionalHelp": (
            metrics.overall_risk == "critical"
            or metrics.high_stress_count >= CRITICAL_HIGH_STRESS_COUNT
        ),
        "summary": _text_summary(metrics, primary_domains, top_triggers),
    }


def _text_summary(metrics: StressMetrics, primary_domains: List[Dict], top_triggers: List[Dict]) -> str:
    risk = metrics.overall_risk
    if risk == "critical":
        summary = (f"Your responses indicate significant stress across multiple areas. "
                   f"With {metrics.high_stress_count} high-stress responses, ")
    elif risk == "high":
        summary = (f"Your responses show elevated stress levels that warrant attention. "
                   f"With {metrics.high_stress_count} high-stress responses, ")
    elif risk == "moderate":
        summary = "Your responses indicate manageable stress levels with some areas of concern. "
    else:
        summary = "Your responses show generally healthy stress levels. "

    if primary_domains:
        names = ", ".join(d["domain"] for d in primary_domains)
        summary += f"The primary areas of concern are: {names}. "

    if top_triggers:
        causes = [t["emotion"] or t["causeTag"] for t in top_triggers]
        summary += f"Key stress triggers include responses related to {', '.join(c for c in causes if c)}."

    return summary.strip()


def compare_with_history(metrics: StressMetrics, history: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    """
    Trend of the current average against stored scores.

    Args:
        metrics: current survey metrics
        history: records from the vector store (``metadata.stress_score``)
    """
    if not history:
        return {
            "hasHistoricalData": False,
            "trend": "no_data",
            "message": "No historical data available for comparison",
        }

    scores = [stored_stress_score(entry.get("metadata")) for entry in history]
    scores = [s for s in scores if s is not None and s > 0]

    if not scores:
        return {
            "hasHistoricalData": False,
            "trend": "no_data",
            "message": "No valid historical stress scores available",
        }

    historical_average = float(np.mean(scores))
    current_average = metrics.average_score
    difference = current_average - historical_average
    pct = difference / historical_average * 100

    if abs(pct) < HISTORY_STABLE_PCT:
        trend, message = "stable", "Your stress levels are consistent with your historical patterns"
    elif pct > HISTORY_SHIFT_PCT:
        trend = "increasing"
        message = f"Your stress levels have increased by {round(pct)}% compared to your historical average"
    elif pct < -HISTORY_SHIFT_PCT:
        trend = "decreasing"
        message = f"Your stress levels have decreased by {round(abs(pct))}% compared to your historical average"
    elif pct > 0:
        trend, message = "slightly_increasing", "Your stress levels are slightly higher than usual"
    else:
        trend, message = "slightly_decreasing", "Your stress levels are slightly lower than usual"

    return {
        "hasHistoricalData": True,
        "historicalAverage": round(historical_average, 2),
        "currentAverage": round(current_average, 2),
        "difference": round(difference, 2),
        "percentageChange": round(pct, 2),
        "trend": trend,
        "message": message,
        "dataPoints": len(scores),
    }

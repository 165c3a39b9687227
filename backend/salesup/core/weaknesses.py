# salesup/core/weaknesses.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from salesup.core.entries import EntryRecord
from salesup.core.metrics import MetricsBundle

RECENT_LIMIT = 10
MAX_WEAKNESSES = 5
MAX_RECOMMENDATIONS = 6

INSURANCE_RATE_FLOOR = 50
UPGRADE_RATE_FLOOR = 30
PERFORMANCE_SCORE_FLOOR = 70
CONSISTENCY_FLOOR = 60
UPSELL_REVENUE_FLOOR = 50
UPGRADE_SUCCESS_FLOOR = 0.3

RECOMMENDATIONS: dict[str, tuple[str, ...]] = {
    "insurance_rate": (
        "Practice explaining insurance benefits clearly",
        "Work on building trust with reluctant customers",
        "Focus on value proposition rather than price",
    ),
    "upgrade_rate": (
        "Improve upselling techniques",
        "Practice identifying customer needs",
        "Work on presenting upgrade value effectively",
    ),
    "objection_handling": (
        "Practice responding to price objections",
        "Work on empathy and active listening",
        "Develop better rebuttals for common objections",
    ),
    "overall_performance": (
        "Focus on overall sales technique improvement",
        "Practice complete sales conversations",
        "Work on closing techniques",
    ),
    "consistency": (
        "Maintain regular daily entries",
        "Focus on consistent performance",
        "Develop daily routine habits",
    ),
    "upselling": (
        "Practice identifying upselling opportunities",
        "Work on presenting additional value",
        "Improve cross-selling techniques",
    ),
}


@dataclass(frozen=True)
class WeaknessReport:
    weaknesses: tuple[str, ...]
    recommendations: tuple[str, ...]


def _dedupe(items: Sequence[str], limit: int) -> tuple[str, ...]:
    # dict keeps first-seen order
    return tuple(dict.fromkeys(items))[:limit]


def identify_weaknesses(metrics: MetricsBundle, recent_entries: Sequence[EntryRecord]) -> WeaknessReport:
    """Threshold checks on the snapshot plus the last few raw entries."""
    flagged: list[str] = []

    if metrics.insurance_rate < INSURANCE_RATE_FLOOR:
        flagged.append("insurance_rate")
    if metrics.upgrade_rate < UPGRADE_RATE_FLOOR:
        flagged.append("upgrade_rate")
    if metrics.performance_score < PERFORMANCE_SCORE_FLOOR:
        flagged.append("overall_performance")
    if metrics.consistency_score < CONSISTENCY_FLOOR:
        flagged.append("consistency")

    recent = list(recent_entries)[:RECENT_LIMIT]
    if recent:
        n = len(recent)
        avg_revenue = sum(e.total_upgrade_value for e in recent) / n
        avg_contracts = sum(e.contracts_count for e in recent) / n

        if avg_revenue < UPSELL_REVENUE_FLOOR and avg_contracts > 0:
            flagged.append("upselling")

        success = sum(
            e.upgrades_count / e.contracts_count if e.contracts_count > 0 else 0
            for e in recent
        ) / n
        if success < UPGRADE_SUCCESS_FLOOR:
            flagged.append("objection_handling")

    weaknesses = _dedupe(flagged, MAX_WEAKNESSES)
    recs = [line for w in weaknesses for line in RECOMMENDATIONS.get(w, ())]

    return WeaknessReport(
        weaknesses=weaknesses,
        recommendations=_dedupe(recs, MAX_RECOMMENDATIONS),
    )

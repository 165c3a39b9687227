# salesup/core/insights.py
from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional, Sequence

from salesup.core.entries import EntryRecord
from salesup.core.metrics import MetricsBundle, round_half_up


class InsightType(str, enum.Enum):
    SUCCESS = "success"
    WARNING = "warning"
    IMPROVEMENT = "improvement"
    GOAL = "goal"


class InsightCategory(str, enum.Enum):
    CONTRACTS = "contracts"
    INSURANCE = "insurance"
    UPGRADES = "upgrades"
    CONSISTENCY = "consistency"
    REVENUE = "revenue"


class Priority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Trend(str, enum.Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


PRIORITY_WEIGHT: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


@dataclass(frozen=True)
class Benchmarks:
    insurance_rate: float = 75
    upgrade_rate: float = 40
    consistency_score: float = 80
    avg_upgrade_price: float = 150
    revenue_per_contract: float = 200


BENCHMARKS = Benchmarks()

# overall_score weights
OVERALL_WEIGHTS = {
    "insurance": 0.30,
    "upgrade": 0.25,
    "consistency": 0.20,
    "revenue": 0.25,
}

# Revenue assumptions used in impact statements
AVG_INSURANCE_VALUE = 50
UPGRADE_VALUE_STEP = 20

CONSISTENCY_LOW = 70
CONSISTENCY_MEDIUM = 85
CONSISTENCY_GOAL = 90
MAX_GOALS = 3

# contracts trend: 5 most recent vs the next (up to) 5, +-20%
TREND_INSIGHT_WINDOW = 5
TREND_INSIGHT_MIN_SLICE = 3
TREND_INSIGHT_THRESHOLD = 20.0

# headline trend: 3 most recent vs prior 3 by upgrade revenue, +-15%
TREND_WINDOW = 3
TREND_THRESHOLD = 0.15

AREA_INSURANCE = "Insurance Sales"
AREA_UPGRADE = "Upgrade Sales"
AREA_CONSISTENCY = "Consistency"
AREA_REVENUE = "Revenue Optimization"


@dataclass(frozen=True)
class Insight:
    id: str
    type: InsightType
    category: InsightCategory
    title: str
    description: str
    action_items: tuple[str, ...]
    priority: Priority
    impact: str
    confidence: int

    def as_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["type"] = self.type.value
        d["category"] = self.category.value
        d["priority"] = self.priority.value
        d["action_items"] = list(self.action_items)
        return d


@dataclass(frozen=True)
class Analysis:
    overall_score: int
    trend: Trend
    insights: tuple[Insight, ...]
    recommendations: tuple[str, ...]
    next_goals: tuple[str, ...]
    weakest_area: str
    strongest_area: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "trend": self.trend.value,
            "insights": [i.as_dict() for i in self.insights],
            "recommendations": list(self.recommendations),
            "next_goals": list(self.next_goals),
            "weakest_area": self.weakest_area,
            "strongest_area": self.strongest_area,
        }


# =========================================================
# Per-dimension rules
# =========================================================

def potential_insurance_increase(metrics: MetricsBundle, b: Benchmarks = BENCHMARKS) -> int:
    current = metrics.insurance_rate / 100 * metrics.total_contracts
    target = b.insurance_rate / 100 * metrics.total_contracts
    return int(round_half_up((target - current) * AVG_INSURANCE_VALUE))


def insurance_insights(metrics: MetricsBundle, b: Benchmarks = BENCHMARKS) -> list[Insight]:
    rate = metrics.insurance_rate

    if rate >= b.insurance_rate:
        return [
            Insight(
                id="insurance-excellent",
                type=InsightType.SUCCESS,
                category=InsightCategory.INSURANCE,
                title="🔥 Excellent Insurance Rate!",
                description=(
                    f"Your {rate:.1f}% insurance rate is outstanding - well above "
                    f"the industry benchmark of {b.insurance_rate:g}%"
                ),
                action_items=(
                    "Maintain this excellent momentum",
                    "Share your techniques with the team",
                    "Focus on upgrading your existing customers",
                ),
                priority=Priority.LOW,
                impact="Continue your great work to maintain high revenue",
                confidence=95,
            )
        ]

    if rate >= b.insurance_rate * 0.8:
        return [
            Insight(
                id="insurance-good",
                type=InsightType.IMPROVEMENT,
                category=InsightCategory.INSURANCE,
                title="📈 Good Insurance Rate - Room for Growth",
                description=(
                    f"Your {rate:.1f}% insurance rate is solid, but you can reach "
                    f"the {b.insurance_rate:g}% benchmark"
                ),
                action_items=(
                    "Ask about insurance needs during initial contact",
                    "Explain benefits of each package clearly",
                    "Use success stories from other clients",
                    "Follow up on pending insurance decisions",
                ),
                priority=Priority.MEDIUM,
                impact=(
                    f"Reaching {b.insurance_rate:g}% could increase revenue by "
                    f"{potential_insurance_increase(metrics, b)}€"
                ),
                confidence=85,
            )
        ]

    return [
        Insight(
            id="insurance-needs-work",
            type=InsightType.WARNING,
            category=InsightCategory.INSURANCE,
            title="⚠️ Insurance Rate Needs Attention",
            description=(
                f"Your {rate:.1f}% insurance rate is below average. "
                "This is a key revenue opportunity."
            ),
            action_items=(
                "Review your insurance presentation technique",
                "Practice objection handling for insurance",
                "Schedule training on insurance benefits",
                "Start every call mentioning insurance options",
                "Create a simple comparison chart for customers",
            ),
            priority=Priority.HIGH,
            impact=(
                "Improving to benchmark could increase monthly revenue by "
                f"{potential_insurance_increase(metrics, b)}€"
            ),
            confidence=90,
        )
    ]


def upgrade_insights(metrics: MetricsBundle, b: Benchmarks = BENCHMARKS) -> list[Insight]:
    insights: list[Insight] = []
    rate = metrics.upgrade_rate

    if rate >= b.upgrade_rate:
        insights.append(
            Insight(
                id="upgrade-rate-excellent",
                type=InsightType.SUCCESS,
                category=InsightCategory.UPGRADES,
                title="🚀 Upgrade Master!",
                description=f"Your {rate:.1f}% upgrade rate is phenomenal!",
                action_items=(
                    "Document your upgrade techniques",
                    "Mentor other team members",
                    "Focus on increasing upgrade values",
                ),
                priority=Priority.LOW,
                impact="Your upgrade skills are driving excellent revenue",
                confidence=95,
            )
        )
    else:
        gap = b.upgrade_rate - rate
        per_step = metrics.total_contracts * 0.05 * 100
        insights.append(
            Insight(
                id="upgrade-rate-improve",
                type=InsightType.IMPROVEMENT,
                category=InsightCategory.UPGRADES,
                title="📊 Upgrade Opportunity Detected",
                description=f"You're {gap:.1f}% away from the benchmark upgrade rate",
                action_items=(
                    "Present upgrade options during every call",
                    "Highlight upgrade benefits early",
                    'Use "assumptive close" technique',
                    "Create urgency with limited-time offers",
                ),
                priority=Priority.MEDIUM,
                impact=f"Each 5% improvement could add {per_step:.0f}€ monthly",
                confidence=80,
            )
        )

    # Upgrade value is judged independently of the rate
    price = metrics.average_upgrade_price
    if price < b.avg_upgrade_price:
        insights.append(
            Insight(
                id="upgrade-value-low",
                type=InsightType.IMPROVEMENT,
                category=InsightCategory.UPGRADES,
                title="💰 Upgrade Value Optimization",
                description=(
                    f"Your average upgrade value is {price:.0f}€. "
                    f"Industry leaders average {b.avg_upgrade_price:g}€"
                ),
                action_items=(
                    "Suggest premium upgrade packages first",
                    "Bundle multiple upgrades together",
                    "Explain long-term value, not just monthly cost",
                    "Use anchoring: start with highest package",
                ),
                priority=Priority.MEDIUM,
                impact=(
                    f"Increasing average by {UPGRADE_VALUE_STEP}€ = "
                    f"{metrics.total_upgrades * UPGRADE_VALUE_STEP:.0f}€ extra monthly"
                ),
                confidence=75,
            )
        )

    return insights


def consistency_insights(metrics: MetricsBundle) -> list[Insight]:
    score = metrics.consistency_score

    if score < CONSISTENCY_LOW:
        return [
            Insight(
                id="consistency-low",
                type=InsightType.WARNING,
                category=InsightCategory.CONSISTENCY,
                title="📅 Consistency is Key to Success",
                description=(
                    f"Your {score:g}% consistency score indicates irregular tracking. "
                    "Consistent performers earn 40% more."
                ),
                action_items=(
                    "Set daily reminders to fill your metrics",
                    "Fill your daily entry every morning",
                    "Track even zero-performance days",
                    "Use the mobile app for easy access",
                ),
                priority=Priority.HIGH,
                impact="Consistent tracking leads to consistent improvement",
                confidence=95,
            )
        ]

    if score < CONSISTENCY_MEDIUM:
        return [
            Insight(
                id="consistency-medium",
                type=InsightType.IMPROVEMENT,
                category=InsightCategory.CONSISTENCY,
                title="⏰ Build Your Daily Habit",
                description=(
                    f"Your {score:g}% consistency is good, but daily tracking "
                    "creates breakthrough results"
                ),
                action_items=(
                    "Set a specific time each day for data entry",
                    "Link tracking to an existing habit (coffee, lunch)",
                    "Aim for 7 days in a row to build momentum",
                ),
                priority=Priority.MEDIUM,
                impact="Perfect consistency correlates with 25% higher performance",
                confidence=80,
            )
        ]

    return []


def revenue_insights(metrics: MetricsBundle, b: Benchmarks = BENCHMARKS) -> list[Insight]:
    rpc = metrics.revenue_per_contract
    if rpc >= b.revenue_per_contract:
        return []

    gain = (b.revenue_per_contract - rpc) * metrics.total_contracts
    return [
        Insight(
            id="revenue-per-contract-low",
            type=InsightType.IMPROVEMENT,
            category=InsightCategory.REVENUE,
            title="💡 Revenue Per Contract Opportunity",
            description=(
                f"At {rpc:.0f}€ per contract, you're below the "
                f"{b.revenue_per_contract:g}€ benchmark"
            ),
            action_items=(
                "Always mention insurance options",
                "Suggest multiple upgrade tiers",
                "Create package deals for maximum value",
                "Follow up on pending decisions",
            ),
            priority=Priority.HIGH,
            impact=f"Reaching benchmark = {gain:.0f}€ extra monthly",
            confidence=85,
        )
    ]


def _average_contracts(entries: Sequence[EntryRecord]) -> float:
    return sum(e.contracts_count for e in entries) / len(entries)


def contract_trend_insights(recent_first: Sequence[EntryRecord]) -> list[Insight]:
    """
    Compares the 5 most recent entries with the next (up to) 5 by average
    contracts. Needs at least 5 entries and 3 in each slice.
    """
    if len(recent_first) < TREND_INSIGHT_WINDOW:
        return []

    recent = recent_first[:TREND_INSIGHT_WINDOW]
    older = recent_first[TREND_INSIGHT_WINDOW:TREND_INSIGHT_WINDOW * 2]
    if len(recent) < TREND_INSIGHT_MIN_SLICE or len(older) < TREND_INSIGHT_MIN_SLICE:
        return []

    older_avg = _average_contracts(older)
    if older_avg == 0:
        # no baseline to compare against
        return []

    change = (_average_contracts(recent) - older_avg) / older_avg * 100

    if change > TREND_INSIGHT_THRESHOLD:
        return [
            Insight(
                id="trend-improving",
                type=InsightType.SUCCESS,
                category=InsightCategory.CONTRACTS,
                title="📈 You're on Fire!",
                description=f"Your performance is up {change:.0f}% compared to last week!",
                action_items=(
                    "Keep doing what you're doing!",
                    "Document what changed in your approach",
                    "Share your success with the team",
                ),
                priority=Priority.LOW,
                impact="Momentum is building - maintain this energy!",
                confidence=90,
            )
        ]

    if change < -TREND_INSIGHT_THRESHOLD:
        return [
            Insight(
                id="trend-declining",
                type=InsightType.WARNING,
                category=InsightCategory.CONTRACTS,
                title="📉 Performance Dip Detected",
                description=f"Your recent performance is down {abs(change):.0f}% from last week",
                action_items=(
                    "Review what changed in your routine",
                    "Check if you need more leads",
                    "Talk to your manager about support",
                    "Revisit your successful strategies",
                ),
                priority=Priority.HIGH,
                impact="Quick action can reverse this trend",
                confidence=85,
            )
        ]

    return []


# =========================================================
# Aggregate views
# =========================================================

def overall_score(metrics: MetricsBundle, b: Benchmarks = BENCHMARKS) -> int:
    insurance = min(metrics.insurance_rate / b.insurance_rate, 1) * 100
    upgrade = min(metrics.upgrade_rate / b.upgrade_rate, 1) * 100
    consistency = metrics.consistency_score
    revenue = min(metrics.revenue_per_contract / b.revenue_per_contract, 1) * 100

    return int(
        round_half_up(
            insurance * OVERALL_WEIGHTS["insurance"]
            + upgrade * OVERALL_WEIGHTS["upgrade"]
            + consistency * OVERALL_WEIGHTS["consistency"]
            + revenue * OVERALL_WEIGHTS["revenue"]
        )
    )


def revenue_trend(recent_first: Sequence[EntryRecord]) -> Trend:
    if len(recent_first) < TREND_WINDOW * 2:
        return Trend.STABLE

    recent_total = sum(e.total_upgrade_value for e in recent_first[:TREND_WINDOW])
    older_total = sum(e.total_upgrade_value for e in recent_first[TREND_WINDOW:TREND_WINDOW * 2])
    change = (recent_total - older_total) / max(older_total, 1)

    if change > TREND_THRESHOLD:
        return Trend.IMPROVING
    if change < -TREND_THRESHOLD:
        return Trend.DECLINING
    return Trend.STABLE


def strengths_and_weaknesses(metrics: MetricsBundle, b: Benchmarks = BENCHMARKS) -> tuple[str, str]:
    """Returns (strongest_area, weakest_area)."""
    areas = [
        (AREA_INSURANCE, metrics.insurance_rate / b.insurance_rate),
        (AREA_UPGRADE, metrics.upgrade_rate / b.upgrade_rate),
        (AREA_CONSISTENCY, metrics.consistency_score / 100),
        (AREA_REVENUE, metrics.revenue_per_contract / b.revenue_per_contract),
    ]
    ranked = sorted(areas, key=lambda a: a[1], reverse=True)
    return ranked[0][0], ranked[-1][0]


def recommendations(metrics: MetricsBundle, insights: Sequence[Insight], b: Benchmarks = BENCHMARKS) -> list[str]:
    recs: list[str] = []
    high = [i for i in insights if i.priority is Priority.HIGH]

    if not high:
        recs.append("🌟 You're performing well! Focus on consistency and small optimizations")
        recs.append("📚 Consider mentoring newer team members to share your expertise")
    else:
        recs.append(f"🎯 Priority focus: {high[0].category.value}")
        recs.append("📅 Implement one improvement action per week for sustainable growth")

    if metrics.consistency_score < b.consistency_score:
        recs.append("⏰ Make daily tracking your #1 habit - it drives all other improvements")

    recs.append("🤝 Schedule weekly check-ins with your manager for personalized coaching")
    return recs


def next_goals(metrics: MetricsBundle, b: Benchmarks = BENCHMARKS) -> list[str]:
    goals: list[str] = []

    if metrics.insurance_rate < b.insurance_rate:
        goals.append(f"Reach {b.insurance_rate:g}% insurance rate within 2 weeks")
    if metrics.upgrade_rate < b.upgrade_rate:
        goals.append(f"Increase upgrade rate to {b.upgrade_rate:g}% this month")
    if metrics.consistency_score < CONSISTENCY_GOAL:
        goals.append("Achieve 100% tracking consistency for 2 weeks straight")

    goals.append("Beat your personal best revenue day within 1 week")
    return goals[:MAX_GOALS]


def rank_insights(insights: Iterable[Insight]) -> list[Insight]:
    # sorted() is stable: equal priorities keep emission order
    return sorted(insights, key=lambda i: PRIORITY_WEIGHT[i.priority], reverse=True)


def analyze(
    metrics: Optional[MetricsBundle],
    recent_entries: Iterable[EntryRecord],
    *,
    focus_area: Optional[InsightCategory | str] = None,
) -> Analysis:
    """
    Coaching analysis for one agent.

    `metrics` must be a real snapshot bundle; callers check for the "no data"
    sentinel before calling. `recent_entries` is usually the last 14 days and
    is re-sorted most-recent-first on a copy. `focus_area` narrows the
    returned insight list to one category; scores, goals and recommendations
    still use every insight.
    """
    if metrics is None:
        raise ValueError("analyze() requires a metrics bundle; check for missing snapshot first")

    recent_first = sorted(recent_entries, key=lambda e: e.date, reverse=True)

    emitted: list[Insight] = []
    emitted += insurance_insights(metrics)
    emitted += upgrade_insights(metrics)
    emitted += consistency_insights(metrics)
    emitted += revenue_insights(metrics)
    emitted += contract_trend_insights(recent_first)

    ranked = rank_insights(emitted)
    strongest, weakest = strengths_and_weaknesses(metrics)

    visible = ranked
    if focus_area:
        category = InsightCategory(focus_area)
        visible = [i for i in ranked if i.category is category]

    return Analysis(
        overall_score=overall_score(metrics),
        trend=revenue_trend(recent_first),
        insights=tuple(visible),
        recommendations=tuple(recommendations(metrics, emitted)),
        next_goals=tuple(next_goals(metrics)),
        weakest_area=weakest,
        strongest_area=strongest,
    )

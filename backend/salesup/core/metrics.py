# salesup/core/metrics.py
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Optional

from salesup.core.entries import EntryRecord

DEFAULT_WINDOW_DAYS = 30
PERIOD_MONTHLY = "monthly"

# Composite performance score: (cap value, weight) per dimension.
# Each term is min(value / cap, 1) * weight, so weights sum to the max score.
SCORE_INSURANCE = (80.0, 35)
SCORE_UPGRADE = (50.0, 25)
SCORE_AVG_UPGRADE_PRICE = (100.0, 20)
SCORE_REVENUE_PER_CONTRACT = (500.0, 10)
SCORE_CONSISTENCY_WEIGHT = 10


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like JS Math.round (ties go up), not banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _ratio(numerator: float, denominator: float) -> float:
    # Zero denominators resolve to 0, never NaN/inf
    if denominator == 0:
        return 0.0
    return numerator / denominator


@dataclass(frozen=True)
class MetricsBundle:
    total_contracts: int
    total_upgrades: int
    total_revenue: float
    insurance_rate: float
    upgrade_rate: float
    average_upgrade_price: float
    revenue_per_contract: float
    consistency_score: int
    performance_score: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_model(cls, row: Any) -> "MetricsBundle":
        return cls(
            total_contracts=int(row.total_contracts),
            total_upgrades=int(row.total_upgrades),
            total_revenue=float(row.total_revenue),
            insurance_rate=float(row.insurance_rate),
            upgrade_rate=float(row.upgrade_rate),
            average_upgrade_price=float(row.average_upgrade_price),
            revenue_per_contract=float(row.revenue_per_contract),
            consistency_score=int(row.consistency_score),
            performance_score=int(row.performance_score),
        )


@dataclass(frozen=True)
class PerformanceSnapshot:
    agent_id: str
    period: str
    start_date: date
    end_date: date
    metrics: MetricsBundle


def performance_score(
    *,
    insurance_rate: float,
    upgrade_rate: float,
    average_upgrade_price: float,
    revenue_per_contract: float,
    consistency_score: float,
) -> int:
    total = (
        min(insurance_rate / SCORE_INSURANCE[0], 1) * SCORE_INSURANCE[1]
        + min(upgrade_rate / SCORE_UPGRADE[0], 1) * SCORE_UPGRADE[1]
        + min(average_upgrade_price / SCORE_AVG_UPGRADE_PRICE[0], 1) * SCORE_AVG_UPGRADE_PRICE[1]
        + min(revenue_per_contract / SCORE_REVENUE_PER_CONTRACT[0], 1) * SCORE_REVENUE_PER_CONTRACT[1]
        + consistency_score / 100 * SCORE_CONSISTENCY_WEIGHT
    )
    return int(round_half_up(total))


def aggregate(entries: Iterable[EntryRecord], window_days: int = DEFAULT_WINDOW_DAYS) -> Optional[MetricsBundle]:
    """
    Single pass over an already-windowed entry set. Returns None when empty.
    """
    total_contracts = 0
    total_upgrades = 0
    total_revenue = 0.0
    total_insurance = 0
    count = 0

    for e in entries:
        e.check_valid()
        total_contracts += e.contracts_count
        total_upgrades += e.upgrades_count
        total_revenue += e.total_upgrade_value
        total_insurance += e.insurance_units
        count += 1

    if count == 0:
        return None

    insurance_rate = _ratio(total_insurance, total_contracts) * 100
    upgrade_rate = _ratio(total_upgrades, total_contracts) * 100
    average_upgrade_price = _ratio(total_revenue, total_upgrades)
    revenue_per_contract = _ratio(total_revenue, total_contracts)
    consistency = min(count / window_days, 1) * 100

    return MetricsBundle(
        total_contracts=total_contracts,
        total_upgrades=total_upgrades,
        total_revenue=round_half_up(total_revenue, 2),
        insurance_rate=round_half_up(insurance_rate, 1),
        upgrade_rate=round_half_up(upgrade_rate, 1),
        average_upgrade_price=round_half_up(average_upgrade_price, 2),
        revenue_per_contract=round_half_up(revenue_per_contract, 2),
        consistency_score=int(round_half_up(consistency)),
        performance_score=performance_score(
            insurance_rate=insurance_rate,
            upgrade_rate=upgrade_rate,
            average_upgrade_price=average_upgrade_price,
            revenue_per_contract=revenue_per_contract,
            consistency_score=consistency,
        ),
    )


def compute_snapshot(
    agent_id: str,
    entries: Iterable[EntryRecord],
    window_days: int = DEFAULT_WINDOW_DAYS,
    *,
    end_date: Optional[date] = None,
) -> Optional[PerformanceSnapshot]:
    """
    Rolling-window KPIs for one agent.

    Entries outside [end_date - window_days, end_date] are ignored; the input
    is never mutated. Returns None (the "no data" sentinel) when nothing falls
    inside the window. Raises ValueError on entries from another agent or with
    negative values.
    """
    if window_days <= 0:
        raise ValueError("window_days must be positive")

    agent_key = str(agent_id)
    end = end_date or datetime.now(timezone.utc).date()
    start = end - timedelta(days=window_days)

    in_window: list[EntryRecord] = []
    for e in entries:
        if e.agent_id != agent_key:
            raise ValueError(f"entry for agent {e.agent_id} passed to snapshot of {agent_key}")
        if start <= e.date <= end:
            in_window.append(e)

    metrics = aggregate(in_window, window_days)
    if metrics is None:
        return None

    return PerformanceSnapshot(
        agent_id=agent_key,
        period=PERIOD_MONTHLY,
        start_date=start,
        end_date=end,
        metrics=metrics,
    )

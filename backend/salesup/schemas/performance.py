# backend/salesup/schemas/performance.py
from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel

from salesup.core.clock import as_utc
from salesup.core.metrics import MetricsBundle, PerformanceSnapshot


class MetricsOut(BaseModel):
    total_contracts: int
    total_upgrades: int
    total_revenue: float
    insurance_rate: float
    upgrade_rate: float
    average_upgrade_price: float
    revenue_per_contract: float
    consistency_score: int
    performance_score: int


class PerformanceSnapshotOut(BaseModel):
    agent_id: str
    period: str
    start_date: dt.date
    end_date: dt.date
    calculated_at: Optional[dt.datetime] = None
    metrics: MetricsOut


class PerformanceResponse(BaseModel):
    snapshot: Optional[PerformanceSnapshotOut] = None
    message: Optional[str] = None


class WeaknessMetricsOut(BaseModel):
    insurance_rate: float
    upgrade_rate: float
    performance_score: int
    consistency_score: int


class WeaknessesResponse(BaseModel):
    weaknesses: List[str] = []
    recommendations: List[str] = []
    metrics: Optional[WeaknessMetricsOut] = None
    message: Optional[str] = None


def metrics_out(bundle: MetricsBundle) -> MetricsOut:
    return MetricsOut(**bundle.as_dict())


def snapshot_out_from_row(row) -> PerformanceSnapshotOut:
    return PerformanceSnapshotOut(
        agent_id=str(row.agent_id),
        period=row.period,
        start_date=row.start_date,
        end_date=row.end_date,
        calculated_at=as_utc(row.calculated_at),
        metrics=metrics_out(MetricsBundle.from_model(row)),
    )


def snapshot_out(snapshot: PerformanceSnapshot) -> PerformanceSnapshotOut:
    """For snapshots computed on the fly and not yet persisted."""
    return PerformanceSnapshotOut(
        agent_id=snapshot.agent_id,
        period=snapshot.period,
        start_date=snapshot.start_date,
        end_date=snapshot.end_date,
        metrics=metrics_out(snapshot.metrics),
    )

# salesup/crud/performance_snapshot.py
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.core import metrics as core_metrics
from salesup.core.clock import utcnow
from salesup.models.performance_snapshot import PerformanceSnapshot


async def get_snapshot(
    db: AsyncSession,
    agent_id: uuid.UUID,
    period: str = core_metrics.PERIOD_MONTHLY,
) -> Optional[PerformanceSnapshot]:
    stmt = (
        select(PerformanceSnapshot)
        .where(PerformanceSnapshot.agent_id == agent_id)
        .where(PerformanceSnapshot.period == period)
    )
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


async def get_snapshots_for_agents(
    db: AsyncSession,
    agent_ids: list[uuid.UUID],
    period: str = core_metrics.PERIOD_MONTHLY,
) -> dict[uuid.UUID, PerformanceSnapshot]:
    if not agent_ids:
        return {}
    stmt = (
        select(PerformanceSnapshot)
        .where(PerformanceSnapshot.agent_id.in_(agent_ids))
        .where(PerformanceSnapshot.period == period)
    )
    res = await db.execute(stmt)
    return {row.agent_id: row for row in res.scalars().all()}


async def save_snapshot(db: AsyncSession, snapshot: core_metrics.PerformanceSnapshot) -> PerformanceSnapshot:
    """
    Upsert keyed on (agent_id, period). Flushes; the caller commits.
    """
    agent_id = uuid.UUID(snapshot.agent_id)
    row = await get_snapshot(db, agent_id, snapshot.period)
    if row is None:
        row = PerformanceSnapshot(agent_id=agent_id, period=snapshot.period)
        db.add(row)

    m = snapshot.metrics
    row.start_date = snapshot.start_date
    row.end_date = snapshot.end_date
    row.total_contracts = m.total_contracts
    row.total_upgrades = m.total_upgrades
    row.total_revenue = Decimal(str(m.total_revenue))
    row.insurance_rate = m.insurance_rate
    row.upgrade_rate = m.upgrade_rate
    row.average_upgrade_price = Decimal(str(m.average_upgrade_price))
    row.revenue_per_contract = Decimal(str(m.revenue_per_contract))
    row.consistency_score = m.consistency_score
    row.performance_score = m.performance_score
    row.calculated_at = utcnow()

    await db.flush()
    return row

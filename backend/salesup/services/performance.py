# salesup/services/performance.py
from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from salesup.core.clock import today
from salesup.core.entries import to_records
from salesup.core.insights import Analysis, InsightCategory, analyze
from salesup.core.metrics import DEFAULT_WINDOW_DAYS, MetricsBundle, PerformanceSnapshot, compute_snapshot
from salesup.core.weaknesses import RECENT_LIMIT, WeaknessReport, identify_weaknesses
from salesup.crud import daily_entry as entry_crud
from salesup.crud import performance_snapshot as snapshot_crud
from salesup.models.performance_snapshot import PerformanceSnapshot as SnapshotRow

logger = logging.getLogger(__name__)

ANALYSIS_DAYS = 14


async def compute_current_snapshot(
    db: AsyncSession,
    agent_id: uuid.UUID,
    *,
    end_date: Optional[date] = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> Optional[PerformanceSnapshot]:
    """Computes without persisting."""
    end = end_date or today()
    rows = await entry_crud.load_entries_in_range(db, agent_id, end - timedelta(days=window_days), end)
    return compute_snapshot(str(agent_id), to_records(rows), window_days, end_date=end)


async def recalculate_performance(
    db: AsyncSession,
    agent_id: uuid.UUID,
    *,
    end_date: Optional[date] = None,
) -> Optional[SnapshotRow]:
    """
    Recompute the rolling window and upsert it. Must run in the same session
    as the entry write so the new entry is visible. Returns None (and leaves
    any stored snapshot alone) when the window is empty.
    """
    snapshot = await compute_current_snapshot(db, agent_id, end_date=end_date)
    if snapshot is None:
        logger.info("No entries in window for agent %s; snapshot not updated", agent_id)
        return None

    row = await snapshot_crud.save_snapshot(db, snapshot)
    logger.info(
        "Recalculated snapshot for agent %s: score=%s contracts=%s",
        agent_id,
        snapshot.metrics.performance_score,
        snapshot.metrics.total_contracts,
    )
    return row


async def build_analysis(
    db: AsyncSession,
    agent_id: uuid.UUID,
    *,
    days: int = ANALYSIS_DAYS,
    focus_area: Optional[InsightCategory] = None,
) -> Optional[Analysis]:
    """
    None means "not enough data yet"; analyze() is never called without a snapshot.
    The snapshot window ends at the agent's last entry write, so it does not
    roll forward on days the agent logs nothing.
    """
    row = await snapshot_crud.get_snapshot(db, agent_id)
    if row is None:
        return None

    recent = await entry_crud.load_recent_entries(db, agent_id, limit=days)
    return analyze(MetricsBundle.from_model(row), to_records(recent), focus_area=focus_area)


async def build_weakness_report(db: AsyncSession, agent_id: uuid.UUID) -> Optional[tuple[MetricsBundle, WeaknessReport]]:
    row = await snapshot_crud.get_snapshot(db, agent_id)
    if row is None:
        return None

    metrics = MetricsBundle.from_model(row)
    recent = await entry_crud.load_recent_entries(db, agent_id, limit=RECENT_LIMIT)
    return metrics, identify_weaknesses(metrics, to_records(recent))

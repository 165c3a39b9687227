# backend/salesup/api/v1/performance.py
from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.api.deps.roles import resolve_target_agent
from salesup.api.v1.auth import get_current_user
from salesup.crud import performance_snapshot as snapshot_crud
from salesup.db.session import get_db
from salesup.models.user import User
from salesup.schemas.performance import (
    PerformanceResponse,
    WeaknessMetricsOut,
    WeaknessesResponse,
    snapshot_out,
    snapshot_out_from_row,
)
from salesup.services.performance import (
    build_weakness_report,
    compute_current_snapshot,
    recalculate_performance,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/performance", tags=["performance"])

NO_DATA_MESSAGE = "No performance data available yet"


@router.get("", response_model=PerformanceResponse)
async def get_performance(
    agent_id: Optional[uuid.UUID] = Query(None, description="Managers: one of your agents"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PerformanceResponse:
    """
    Stored snapshot if there is one, otherwise computed from the current
    window without being saved.
    """
    agent = await resolve_target_agent(db, user, agent_id)

    row = await snapshot_crud.get_snapshot(db, agent.id)
    if row is not None:
        return PerformanceResponse(snapshot=snapshot_out_from_row(row))

    computed = await compute_current_snapshot(db, agent.id)
    if computed is None:
        return PerformanceResponse(message=NO_DATA_MESSAGE)
    return PerformanceResponse(snapshot=snapshot_out(computed))


@router.post("/recalculate", response_model=PerformanceResponse)
async def recalculate(
    agent_id: Optional[uuid.UUID] = Query(None, description="Managers: one of your agents"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PerformanceResponse:
    agent = await resolve_target_agent(db, user, agent_id)

    row = await recalculate_performance(db, agent.id)
    await db.commit()

    if row is None:
        return PerformanceResponse(message=NO_DATA_MESSAGE)
    return PerformanceResponse(snapshot=snapshot_out_from_row(row))


@router.get("/weaknesses", response_model=WeaknessesResponse)
async def get_weaknesses(
    agent_id: Optional[uuid.UUID] = Query(None, description="Managers: one of your agents"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> WeaknessesResponse:
    agent = await resolve_target_agent(db, user, agent_id)

    result = await build_weakness_report(db, agent.id)
    if result is None:
        return WeaknessesResponse(message=NO_DATA_MESSAGE)

    metrics, report = result
    return WeaknessesResponse(
        weaknesses=list(report.weaknesses),
        recommendations=list(report.recommendations),
        metrics=WeaknessMetricsOut(
            insurance_rate=metrics.insurance_rate,
            upgrade_rate=metrics.upgrade_rate,
            performance_score=metrics.performance_score,
            consistency_score=metrics.consistency_score,
        ),
    )

# backend/salesup/api/v1/analysis.py
from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.api.deps.roles import resolve_target_agent
from salesup.api.v1.auth import get_current_user
from salesup.core.insights import Analysis, InsightCategory
from salesup.db.session import get_db
from salesup.models.user import User
from salesup.schemas.analysis import AnalysisOut, AnalysisRequest, AnalysisResponse
from salesup.services.performance import ANALYSIS_DAYS, build_analysis

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["analysis"])

NOT_ENOUGH_DATA = "Not enough data for analysis yet. Fill in a few daily entries first."


def _to_response(analysis: Optional[Analysis]) -> AnalysisResponse:
    if analysis is None:
        return AnalysisResponse(message=NOT_ENOUGH_DATA)
    return AnalysisResponse(analysis=AnalysisOut(**analysis.as_dict()))


@router.get("", response_model=AnalysisResponse)
async def get_analysis(
    agent_id: Optional[uuid.UUID] = Query(None, description="Managers: one of your agents"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> AnalysisResponse:
    agent = await resolve_target_agent(db, user, agent_id)
    return _to_response(await build_analysis(db, agent.id, days=ANALYSIS_DAYS))


@router.post("", response_model=AnalysisResponse)
async def run_analysis(
    payload: AnalysisRequest,
    agent_id: Optional[uuid.UUID] = Query(None, description="Managers: one of your agents"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> AnalysisResponse:
    """
    Same analysis over a custom number of recent entries, optionally
    narrowed to a single insight category.
    """
    agent = await resolve_target_agent(db, user, agent_id)

    focus: Optional[InsightCategory] = payload.focus_area
    analysis = await build_analysis(db, agent.id, days=payload.days, focus_area=focus)
    if analysis is not None:
        logger.info(
            "Analysis for agent %s: score=%s trend=%s focus=%s",
            agent.id,
            analysis.overall_score,
            analysis.trend.value,
            focus.value if focus else None,
        )
    return _to_response(analysis)

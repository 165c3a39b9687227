# backend/salesup/api/v1/daily_entries.py
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.api.deps.roles import require_agent
from salesup.core.clock import today
from salesup.crud import daily_entry as entry_crud
from salesup.db.session import get_db
from salesup.models.daily_entry import DailyEntry
from salesup.models.user import User
from salesup.schemas.daily_entry import (
    DailyEntryCreate,
    DailyEntryOut,
    DailyEntryUpdate,
    TodayEntryOut,
    entry_out,
)
from salesup.services.performance import recalculate_performance

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/daily-entries", tags=["daily-entries"])


@router.get("", response_model=List[DailyEntryOut])
async def list_entries(
    limit: int = Query(30, ge=1, le=366),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
    agent: User = Depends(require_agent),
) -> List[DailyEntryOut]:
    """
    Most recent first. Pass start_date and end_date together for a range,
    otherwise the latest `limit` entries are returned.
    """
    if (start_date is None) != (end_date is None):
        raise HTTPException(status_code=400, detail="start_date and end_date must be provided together")

    if start_date is not None and end_date is not None:
        if start_date > end_date:
            raise HTTPException(status_code=400, detail="start_date must be on or before end_date")
        rows = await entry_crud.load_entries_in_range(db, agent.id, start_date, end_date)
    else:
        rows = await entry_crud.load_recent_entries(db, agent.id, limit=limit)

    return [entry_out(r) for r in rows]


@router.get("/today", response_model=TodayEntryOut)
async def get_today_entry(
    db: AsyncSession = Depends(get_db),
    agent: User = Depends(require_agent),
) -> TodayEntryOut:
    day = today()
    row = await entry_crud.get_entry_for_date(db, agent.id, day)
    return TodayEntryOut(date=day, has_filled_today=row is not None, entry=entry_out(row) if row else None)


@router.post("", response_model=DailyEntryOut, status_code=status.HTTP_201_CREATED)
async def create_entry(
    payload: DailyEntryCreate,
    db: AsyncSession = Depends(get_db),
    agent: User = Depends(require_agent),
) -> DailyEntryOut:
    existing = await entry_crud.get_entry_for_date(db, agent.id, payload.date)
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "entry_exists", "message": "An entry already exists for this date", "entry_id": str(existing.id)},
        )

    try:
        entry = await entry_crud.create_entry(db, agent.id, payload)
    except IntegrityError:
        # concurrent insert for the same day
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "entry_exists", "message": "An entry already exists for this date"},
        )

    await recalculate_performance(db, agent.id)
    await db.commit()

    logger.info("Daily entry %s created for agent %s on %s", entry.id, agent.id, entry.date)
    return entry_out(entry)


@router.put("/{entry_id}", response_model=DailyEntryOut)
async def update_entry(
    entry_id: uuid.UUID,
    payload: DailyEntryUpdate,
    db: AsyncSession = Depends(get_db),
    agent: User = Depends(require_agent),
) -> DailyEntryOut:
    entry = await db.get(DailyEntry, entry_id)
    if entry is None or entry.agent_id != agent.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")

    await entry_crud.update_entry(db, entry, payload)
    await recalculate_performance(db, agent.id)
    await db.commit()

    logger.info("Daily entry %s updated for agent %s", entry.id, agent.id)
    return entry_out(entry)

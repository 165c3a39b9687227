# salesup/crud/daily_entry.py
from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.models.daily_entry import DailyEntry
from salesup.schemas.daily_entry import DailyEntryCreate, DailyEntryFields


async def load_recent_entries(db: AsyncSession, agent_id: uuid.UUID, limit: int = 30) -> list[DailyEntry]:
    """Most recent first."""
    stmt = (
        select(DailyEntry)
        .where(DailyEntry.agent_id == agent_id)
        .order_by(DailyEntry.date.desc())
        .limit(limit)
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def load_entries_in_range(db: AsyncSession, agent_id: uuid.UUID, start: date, end: date) -> list[DailyEntry]:
    """Inclusive on both ends, most recent first."""
    stmt = (
        select(DailyEntry)
        .where(DailyEntry.agent_id == agent_id)
        .where(DailyEntry.date >= start)
        .where(DailyEntry.date <= end)
        .order_by(DailyEntry.date.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def get_entry_for_date(db: AsyncSession, agent_id: uuid.UUID, day: date) -> Optional[DailyEntry]:
    stmt = select(DailyEntry).where(DailyEntry.agent_id == agent_id).where(DailyEntry.date == day)
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


async def create_entry(db: AsyncSession, agent_id: uuid.UUID, payload: DailyEntryCreate) -> DailyEntry:
    """
    Adds and flushes; the caller commits. A duplicate (agent_id, date)
    surfaces as IntegrityError on flush.
    """
    entry = DailyEntry(
        agent_id=agent_id,
        date=payload.date,
        contracts_count=payload.contracts_count,
        upgrades_count=payload.upgrades_count,
        total_upgrade_value=payload.total_upgrade_value,
        insurance_packages=payload.packages_as_json(),
        notes=payload.notes,
    )
    db.add(entry)
    await db.flush()
    return entry


async def update_entry(db: AsyncSession, entry: DailyEntry, payload: DailyEntryFields) -> DailyEntry:
    # Overwrite in place; id, agent and date never change
    entry.contracts_count = payload.contracts_count
    entry.upgrades_count = payload.upgrades_count
    entry.total_upgrade_value = payload.total_upgrade_value
    entry.insurance_packages = payload.packages_as_json()
    entry.notes = payload.notes

    db.add(entry)
    await db.flush()
    return entry

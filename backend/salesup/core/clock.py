# salesup/core/clock.py
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today() -> date:
    return utcnow().date()


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    SQLite hands back naive datetimes even for timezone-aware columns;
    treat those as UTC so comparisons against utcnow() never raise.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

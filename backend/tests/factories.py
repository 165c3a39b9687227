# tests/factories.py
from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from salesup.core.clock import today
from salesup.core.roles import UserRole
from salesup.core.security import create_access_token
from salesup.models.daily_entry import DailyEntry
from salesup.models.user import User


async def create_user(
    db,
    email: str,
    role: UserRole = UserRole.AGENT,
    *,
    first_name: str = "Test",
    last_name: str = "User",
    invited_by: User | None = None,
    is_active: bool = True,
) -> User:
    user = User(
        email=email.lower().strip(),
        first_name=first_name,
        last_name=last_name,
        role=role.value,
        invited_by_user_id=invited_by.id if invited_by else None,
        is_active=is_active,
    )
    db.add(user)
    await db.flush()
    return user


async def create_entry(
    db,
    agent: User,
    day: date,
    *,
    contracts: int = 10,
    upgrades: int = 4,
    upgrade_value: float = 600,
    insurance: int = 8,
) -> DailyEntry:
    entry = DailyEntry(
        agent_id=agent.id,
        date=day,
        contracts_count=contracts,
        upgrades_count=upgrades,
        total_upgrade_value=Decimal(str(upgrade_value)),
        insurance_packages=[{"package_type": "Smart", "count": insurance, "value": 0.0}] if insurance else [],
    )
    db.add(entry)
    await db.flush()
    return entry


async def create_history(db, agent: User, days: int, **kwargs) -> list[DailyEntry]:
    """One entry per day ending today."""
    start = today()
    return [await create_entry(db, agent, start - timedelta(days=i), **kwargs) for i in range(days)]


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), role=user.role)}"}

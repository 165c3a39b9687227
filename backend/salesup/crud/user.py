# salesup/crud/user.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.core.roles import UserRole
from salesup.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.email == normalize_email(email)))
    return res.scalar_one_or_none()


async def list_agents_invited_by(db: AsyncSession, manager_id: uuid.UUID) -> list[User]:
    stmt = (
        select(User)
        .where(User.invited_by_user_id == manager_id)
        .where(User.role == UserRole.AGENT.value)
        .order_by(User.created_at.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())

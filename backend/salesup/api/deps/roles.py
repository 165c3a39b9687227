from __future__ import annotations

import uuid
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.api.v1.auth import get_current_user
from salesup.core.roles import UserRole
from salesup.models.user import User


def require_role(*roles: UserRole) -> Callable:
    """
    Dependency factory: the caller must hold one of `roles`.
    """
    allowed = {r.value for r in roles}

    async def _checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "code": "role_forbidden",
                    "message": "You do not have access to this resource.",
                    "required": sorted(allowed),
                    "role": user.role,
                },
            )
        return user

    return _checker


require_agent = require_role(UserRole.AGENT)
require_manager = require_role(UserRole.MANAGER)


async def resolve_target_agent(db: AsyncSession, viewer: User, agent_id: Optional[uuid.UUID]) -> User:
    """
    Agents only ever see themselves. Managers may look at an agent they
    invited; with no agent_id a manager gets a 400.
    """
    if agent_id is None or agent_id == viewer.id:
        if viewer.role != UserRole.AGENT.value:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="agent_id is required for managers")
        return viewer

    if viewer.role != UserRole.MANAGER.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Agents can only view their own performance")

    agent = await db.get(User, agent_id)
    if agent is None or agent.role != UserRole.AGENT.value:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agent not found")
    if agent.invited_by_user_id != viewer.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Agent is not on your team")

    return agent

# backend/salesup/api/v1/dashboard.py
from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.api.v1.auth import get_current_user, to_me_response
from salesup.core.clock import as_utc, today
from salesup.core.metrics import MetricsBundle
from salesup.core.roles import InvitationStatus, UserRole
from salesup.crud import daily_entry as entry_crud
from salesup.crud import performance_snapshot as snapshot_crud
from salesup.crud.user import list_agents_invited_by
from salesup.db.session import get_db
from salesup.models.invitation import Invitation
from salesup.models.user import User
from salesup.schemas.daily_entry import entry_out
from salesup.schemas.dashboard import (
    AgentDashboardData,
    AgentDashboardResponse,
    ManagerDashboardData,
    ManagerDashboardResponse,
    TeamMemberOut,
    TeamStats,
)
from salesup.schemas.invitation import InvitationOut
from salesup.schemas.performance import metrics_out, snapshot_out_from_row

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RECENT_ENTRIES = 7


async def _agent_dashboard(db: AsyncSession, user: User) -> AgentDashboardResponse:
    recent = await entry_crud.load_recent_entries(db, user.id, limit=RECENT_ENTRIES)
    snapshot = await snapshot_crud.get_snapshot(db, user.id)
    todays = await entry_crud.get_entry_for_date(db, user.id, today())

    return AgentDashboardResponse(
        data=AgentDashboardData(
            user=to_me_response(user),
            recent_entries=[entry_out(r) for r in recent],
            snapshot=snapshot_out_from_row(snapshot) if snapshot else None,
            today_entry=entry_out(todays) if todays else None,
            has_filled_today=todays is not None,
        )
    )


async def _manager_dashboard(db: AsyncSession, manager: User) -> ManagerDashboardResponse:
    agents = await list_agents_invited_by(db, manager.id)
    snapshots = await snapshot_crud.get_snapshots_for_agents(db, [a.id for a in agents])

    pending_stmt = (
        select(Invitation)
        .where(Invitation.invited_by_user_id == manager.id)
        .where(Invitation.status == InvitationStatus.PENDING.value)
        .order_by(Invitation.created_at.desc())
    )
    pending = list((await db.execute(pending_stmt)).scalars().all())

    members = []
    for a in agents:
        snap = snapshots.get(a.id)
        members.append(
            TeamMemberOut(
                id=str(a.id),
                email=a.email,
                first_name=a.first_name,
                last_name=a.last_name,
                is_active=a.is_active,
                last_login_at=as_utc(a.last_login_at),
                created_at=as_utc(a.created_at),
                metrics=metrics_out(MetricsBundle.from_model(snap)) if snap else None,
            )
        )

    return ManagerDashboardResponse(
        data=ManagerDashboardData(
            manager=to_me_response(manager),
            agents=members,
            pending_invitations=[InvitationOut.model_validate(i) for i in pending],
            team_stats=TeamStats(
                total_agents=len(agents),
                active_agents=sum(1 for a in agents if a.is_active),
                pending_invitations=len(pending),
            ),
        )
    )


@router.get("", response_model=Union[AgentDashboardResponse, ManagerDashboardResponse])
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Role-dependent landing data: {"type": "agent" | "manager", "data": {...}}."""
    if user.role == UserRole.AGENT.value:
        return await _agent_dashboard(db, user)
    if user.role == UserRole.MANAGER.value:
        return await _manager_dashboard(db, user)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid user role")

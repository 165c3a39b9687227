# backend/salesup/schemas/dashboard.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

from salesup.schemas.auth import MeResponse
from salesup.schemas.daily_entry import DailyEntryOut
from salesup.schemas.invitation import InvitationOut
from salesup.schemas.performance import MetricsOut, PerformanceSnapshotOut


class AgentDashboardData(BaseModel):
    user: MeResponse
    recent_entries: List[DailyEntryOut]
    snapshot: Optional[PerformanceSnapshotOut] = None
    today_entry: Optional[DailyEntryOut] = None
    has_filled_today: bool


class TeamMemberOut(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    metrics: Optional[MetricsOut] = None


class TeamStats(BaseModel):
    total_agents: int
    active_agents: int
    pending_invitations: int


class ManagerDashboardData(BaseModel):
    manager: MeResponse
    agents: List[TeamMemberOut]
    pending_invitations: List[InvitationOut]
    team_stats: TeamStats


class AgentDashboardResponse(BaseModel):
    type: Literal["agent"] = "agent"
    data: AgentDashboardData


class ManagerDashboardResponse(BaseModel):
    type: Literal["manager"] = "manager"
    data: ManagerDashboardData

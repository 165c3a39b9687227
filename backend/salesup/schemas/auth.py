# backend/salesup/schemas/auth.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _normalize_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = " ".join(value.strip().split())
    if not v:
        raise ValueError("Must not be blank.")
    return v


class MagicCodeRequest(BaseModel):
    email: EmailStr


class MagicCodeVerify(BaseModel):
    email: EmailStr
    code: str = Field(min_length=4, max_length=64)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)

    daily_reminders: Optional[bool] = None
    weekly_reports: Optional[bool] = None
    goal_alerts: Optional[bool] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_name(v)


class NotificationPreferences(BaseModel):
    daily_reminders: bool
    weekly_reports: bool
    goal_alerts: bool


class MeResponse(BaseModel):
    id: str
    email: EmailStr
    first_name: str
    last_name: str
    role: str
    is_active: bool

    invited_by_user_id: Optional[str] = None
    last_login_at: Optional[datetime] = None
    notifications: NotificationPreferences

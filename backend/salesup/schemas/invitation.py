# backend/salesup/schemas/invitation.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from salesup.schemas.auth import _normalize_name


class InvitationCreate(BaseModel):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _normalize_name(v)


class InvitationOut(BaseModel):
    id: UUID
    email: EmailStr
    first_name: str
    last_name: str
    status: str
    invited_by_name: str
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvitationCreatedOut(BaseModel):
    invitation: InvitationOut
    invite_url: str
    email_queued: bool


class InvitationLookupOut(BaseModel):
    email: EmailStr
    first_name: str
    last_name: str
    invited_by_name: str
    expires_at: datetime


class InvitationAccept(BaseModel):
    token: str = Field(..., min_length=16, description="Invitation token")
    # Optional corrections to the name the manager typed
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_name(v)


class InvitationAcceptOut(BaseModel):
    ok: bool
    user_id: str
    role: str
    access_token: str
    token_type: str = "bearer"

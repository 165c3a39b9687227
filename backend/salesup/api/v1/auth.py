# backend/salesup/api/v1/auth.py
from __future__ import annotations

import logging
import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.core.clock import as_utc, utcnow
from salesup.core.config import settings
from salesup.core.security import (
    MAGIC_CODE_EXPIRY_MINUTES,
    bearer_scheme,
    create_access_token,
    decode_access_token,
    generate_magic_code,
)
from salesup.crud.user import get_user_by_email
from salesup.db.session import get_db
from salesup.models.user import User
from salesup.schemas.auth import (
    MagicCodeRequest,
    MagicCodeVerify,
    MeResponse,
    NotificationPreferences,
    ProfileUpdateRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _should_return_magic_code_in_response() -> bool:
    # Never echo the code in production, whatever the flag says
    if settings.is_production:
        return False
    return settings.RETURN_MAGIC_CODE_IN_RESPONSE


async def purge_expired_magic_codes(db: AsyncSession) -> None:
    stmt = (
        update(User)
        .where(User.magic_code_expires_at.is_not(None))
        .where(User.magic_code_expires_at < utcnow())
        .values(magic_code=None, magic_code_expires_at=None)
    )
    await db.execute(stmt)


@router.post("/request-code")
async def request_code(payload: MagicCodeRequest, db: AsyncSession = Depends(get_db)):
    """
    Body: {"email": "agent@example.com"}
    Accounts are only created through invitations (or the bootstrap script),
    so unknown emails get a 404 instead of a fresh user.
    """
    await purge_expired_magic_codes(db)

    user = await get_user_by_email(db, payload.email)
    if user is None or not user.is_active:
        await db.commit()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active account for this email")

    code = generate_magic_code()
    user.magic_code = code
    user.magic_code_expires_at = utcnow() + timedelta(minutes=MAGIC_CODE_EXPIRY_MINUTES)
    await db.commit()

    logger.info("Magic code issued for user %s", user.id)

    resp = {"status": "ok", "expires_in_minutes": MAGIC_CODE_EXPIRY_MINUTES}
    if _should_return_magic_code_in_response():
        resp["code"] = code
    return resp


@router.post("/verify-code", response_model=TokenResponse)
async def verify_code(payload: MagicCodeVerify, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    code = payload.code.strip()
    if not code:
        raise HTTPException(status_code=400, detail="code is required")

    user = await get_user_by_email(db, payload.email)

    if not user or not user.magic_code or not user.magic_code_expires_at:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid code")

    if user.magic_code != code:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid code")

    if as_utc(user.magic_code_expires_at) < utcnow():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Code expired")

    # One-time use
    user.magic_code = None
    user.magic_code_expires_at = None
    user.last_login_at = utcnow()
    await db.commit()

    logger.info("User %s signed in", user.id)
    return TokenResponse(access_token=create_access_token(subject=str(user.id), role=user.role))


async def get_current_user(
    credentials=Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency for protected endpoints.
    """
    claims = decode_access_token(credentials.credentials)

    try:
        user_uuid = uuid.UUID(claims.sub)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    user = await db.get(User, user_uuid)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User inactive")

    return user


def to_me_response(user: User) -> MeResponse:
    return MeResponse(
        id=str(user.id),
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        is_active=user.is_active,
        invited_by_user_id=str(user.invited_by_user_id) if user.invited_by_user_id else None,
        last_login_at=as_utc(user.last_login_at),
        notifications=NotificationPreferences(
            daily_reminders=user.daily_reminders,
            weekly_reports=user.weekly_reports,
            goal_alerts=user.goal_alerts,
        ),
    )


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)) -> MeResponse:
    return to_me_response(user)


@router.patch("/me", response_model=MeResponse)
async def update_me(
    payload: ProfileUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MeResponse:
    """
    Updates names and notification preferences. Role and email are not editable here.
    """
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")

    for field in ("first_name", "last_name"):
        if field in data:
            if data[field] is None:
                raise HTTPException(status_code=422, detail=f"{field} cannot be cleared")
            setattr(user, field, data[field])

    for flag in ("daily_reminders", "weekly_reports", "goal_alerts"):
        if data.get(flag) is not None:
            setattr(user, flag, data[flag])

    db.add(user)
    await db.commit()
    await db.refresh(user)

    return to_me_response(user)

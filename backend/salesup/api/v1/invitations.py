# backend/salesup/api/v1/invitations.py
from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salesup.api.deps.roles import require_manager
from salesup.core.clock import as_utc, utcnow
from salesup.core.roles import InvitationStatus, UserRole
from salesup.core.security import create_access_token, generate_invite_token
from salesup.crud.user import get_user_by_email, normalize_email
from salesup.db.session import get_db
from salesup.models.invitation import Invitation
from salesup.models.user import User
from salesup.schemas.invitation import (
    InvitationAccept,
    InvitationAcceptOut,
    InvitationCreate,
    InvitationCreatedOut,
    InvitationLookupOut,
    InvitationOut,
)
from salesup.services.email import INVITE_EXPIRY_DAYS, EmailService, get_email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invitations", tags=["invitations"])


def _is_expired(inv: Invitation) -> bool:
    return as_utc(inv.expires_at) < utcnow()


async def _get_pending_by_token(db: AsyncSession, token: str) -> Invitation | None:
    stmt = (
        select(Invitation)
        .where(Invitation.token == token)
        .where(Invitation.status == InvitationStatus.PENDING.value)
    )
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


def _mark_accepted(inv: Invitation, user_id: uuid.UUID) -> None:
    inv.status = InvitationStatus.ACCEPTED.value
    inv.accepted_at = utcnow()
    inv.accepted_user_id = user_id


# =========================================================
# Manager endpoints
# =========================================================

@router.post("", response_model=InvitationCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    payload: InvitationCreate,
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
    mailer: EmailService = Depends(get_email_service),
) -> InvitationCreatedOut:
    """
    Invite an agent by email. The invite link is emailed in the background
    and also returned so the manager can share it directly.
    """
    email = normalize_email(payload.email)

    if await get_user_by_email(db, email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A user with this email already exists")

    pending_stmt = (
        select(Invitation)
        .where(Invitation.email == email)
        .where(Invitation.status == InvitationStatus.PENDING.value)
    )
    for existing in (await db.execute(pending_stmt)).scalars().all():
        if _is_expired(existing):
            existing.status = InvitationStatus.EXPIRED.value
            continue
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="An invitation has already been sent to this email")

    inv = Invitation(
        email=email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        status=InvitationStatus.PENDING.value,
        token=generate_invite_token(),
        expires_at=utcnow() + timedelta(days=INVITE_EXPIRY_DAYS),
        invited_by_user_id=manager.id,
        invited_by_name=manager.full_name,
    )
    db.add(inv)
    await db.commit()
    await db.refresh(inv)

    logger.info("Invitation %s created by manager %s for %s", inv.id, manager.id, email)

    background.add_task(
        mailer.send_invitation_email,
        email=inv.email,
        first_name=inv.first_name,
        invited_by_name=inv.invited_by_name,
        token=inv.token,
    )

    return InvitationCreatedOut(
        invitation=InvitationOut.model_validate(inv),
        invite_url=mailer.invite_url(inv.token),
        email_queued=mailer.is_configured,
    )


@router.get("", response_model=List[InvitationOut])
async def list_invitations(
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
):
    """Invitations sent by the current manager, newest first."""
    stmt = (
        select(Invitation)
        .where(Invitation.invited_by_user_id == manager.id)
        .order_by(Invitation.created_at.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


@router.delete("/{invitation_id}", response_model=InvitationOut)
async def cancel_invitation(
    invitation_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
):
    inv = await db.get(Invitation, invitation_id)
    if (
        inv is None
        or inv.invited_by_user_id != manager.id
        or inv.status != InvitationStatus.PENDING.value
    ):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found or already processed")

    inv.status = InvitationStatus.CANCELLED.value
    inv.cancelled_at = utcnow()
    await db.commit()
    await db.refresh(inv)

    logger.info("Invitation %s cancelled by manager %s", inv.id, manager.id)
    return inv


# =========================================================
# Public endpoints (invitee)
# =========================================================

@router.get("/lookup/{token}", response_model=InvitationLookupOut)
async def lookup_invitation(token: str, db: AsyncSession = Depends(get_db)) -> InvitationLookupOut:
    """
    Validates an invite link before the signup form is shown. Never returns the token.
    """
    inv = await _get_pending_by_token(db, token)
    if inv is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found or expired")

    if _is_expired(inv):
        inv.status = InvitationStatus.EXPIRED.value
        await db.commit()
        logger.info("Invitation %s expired on lookup", inv.id)
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Invitation has expired")

    existing = await get_user_by_email(db, inv.email)
    if existing is not None:
        _mark_accepted(inv, existing.id)
        await db.commit()
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="User account already exists for this email")

    return InvitationLookupOut(
        email=inv.email,
        first_name=inv.first_name,
        last_name=inv.last_name,
        invited_by_name=inv.invited_by_name,
        expires_at=as_utc(inv.expires_at),
    )


@router.post("/accept", response_model=InvitationAcceptOut, status_code=status.HTTP_201_CREATED)
async def accept_invitation(
    payload: InvitationAccept,
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
) -> InvitationAcceptOut:
    """
    Creates the agent account and signs it in. Later logins use the
    email magic-code flow.
    """
    inv = await _get_pending_by_token(db, payload.token.strip())
    if inv is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid or expired invitation")

    if _is_expired(inv):
        inv.status = InvitationStatus.EXPIRED.value
        await db.commit()
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Invitation has expired")

    if await get_user_by_email(db, inv.email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="An account with this email already exists")

    user = User(
        email=inv.email,
        first_name=payload.first_name or inv.first_name,
        last_name=payload.last_name or inv.last_name,
        role=UserRole.AGENT.value,
        invited_by_user_id=inv.invited_by_user_id,
        is_active=True,
        last_login_at=utcnow(),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="An account with this email already exists")

    _mark_accepted(inv, user.id)
    await db.commit()

    logger.info("Invitation %s accepted; agent %s created", inv.id, user.id)

    background.add_task(mailer.send_welcome_email, email=user.email, first_name=user.first_name)

    return InvitationAcceptOut(
        ok=True,
        user_id=str(user.id),
        role=user.role,
        access_token=create_access_token(subject=str(user.id), role=user.role),
    )

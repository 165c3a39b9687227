from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from jose import JWTError, jwt

from salesup.core.clock import utcnow
from salesup.core.config import settings

bearer_scheme = HTTPBearer(auto_error=True)

MAGIC_CODE_EXPIRY_MINUTES = 10
INVITE_TOKEN_BYTES = 48


@dataclass(frozen=True)
class TokenClaims:
    sub: str
    role: Optional[str] = None


def _normalize_token(token: str) -> str:
    """
    Make token decoding resilient to common Swagger / copy-paste issues:
    - Leading/trailing whitespace/newlines
    - Surrounding quotes
    - Accidentally including the 'Bearer ' prefix in the token field
    """
    if token is None:
        return ""

    t = token.strip()
    if (t.startswith('"') and t.endswith('"')) or (t.startswith("'") and t.endswith("'")):
        t = t[1:-1].strip()
    if t.lower().startswith("bearer "):
        t = t[7:].strip()
    return t


def generate_magic_code() -> str:
    return str(secrets.randbelow(900000) + 100000)  # 6 digits


def generate_invite_token() -> str:
    return secrets.token_urlsafe(INVITE_TOKEN_BYTES)


def create_access_token(subject: str, role: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    now = utcnow()
    expire_dt = now + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "exp": int(expire_dt.timestamp()),
        "iat": int(now.timestamp()),
    }
    # Informational only; authorization always re-reads the role from the DB
    if role:
        to_encode["role"] = role

    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    token = _normalize_token(token)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_sub": True, "require_exp": True},
        )
    except JWTError:
        # expired, malformed, bad signature, wrong algorithm
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return TokenClaims(sub=str(sub), role=payload.get("role"))

"""
Password hashing (bcrypt through passlib) and JWT handling (python-jose).

Access and refresh tokens are signed with separate secrets and carry a
"type" claim, so one can never be replayed as the other. Only the SHA-256
digest of the current refresh token is stored on the user row.
"""
from __future__ import annotations

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def validate_password_strength(password: str) -> str:
    """
    At least 8 characters, one letter and one digit.
    Returns the password unchanged; raises ValueError for pydantic to report.
    """
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not any(c.isalpha() for c in password):
        raise ValueError("Password must contain at least one letter")
    if not any(c.isdigit() for c in password):
        raise ValueError("Password must contain at least one digit")
    return password


# ── JWT ───────────────────────────────────────────────────────────────────────

class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


def _secret(kind: TokenKind) -> str:
    return settings.SECRET_KEY if kind is TokenKind.ACCESS else settings.REFRESH_SECRET_KEY


def _lifetime(kind: TokenKind) -> timedelta:
    if kind is TokenKind.ACCESS:
        return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)


def create_token(user_id: str, kind: TokenKind, **claims: Any) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "type": kind.value,
        "iat": now,
        "exp": now + _lifetime(kind),
        # unique per token so a rotated refresh token never hashes the same
        "jti": secrets.token_hex(16),
        **{k: v for k, v in claims.items() if v is not None},
    }
    return jwt.encode(payload, _secret(kind), algorithm=settings.ALGORITHM)


def create_access_token(user_id: str, email: str | None = None) -> str:
    return create_token(user_id, TokenKind.ACCESS, email=email)


def create_refresh_token(user_id: str) -> str:
    return create_token(user_id, TokenKind.REFRESH)


def decode_token(token: str, kind: TokenKind) -> dict[str, Any]:
    """Verify signature, expiry and token type. Raises JWTError on any failure."""
    payload = jwt.decode(token, _secret(kind), algorithms=[settings.ALGORITHM])
    if payload.get("type") != kind.value:
        raise JWTError("Invalid token type")
    return payload


def token_subject(payload: dict[str, Any]) -> uuid.UUID:
    """The user id a decoded token was issued for. Raises JWTError if malformed."""
    try:
        return uuid.UUID(str(payload["sub"]))
    except (KeyError, ValueError) as exc:
        raise JWTError("Malformed token subject") from exc


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()

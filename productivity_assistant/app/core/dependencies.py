"""
FastAPI dependency injection functions.
Provides get_db and get_current_user plus the Annotated aliases routes use.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidTokenException, UnauthorizedException
from app.core.security import TokenKind, decode_token, token_subject
from app.crud.user import crud_user
from app.db.session import get_db
from app.models.user import User

# Re-export get_db so routes can import from one place
__all__ = ["get_db", "get_current_user", "DBSession", "CurrentUser"]

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> User:
    """
    Extract and validate the JWT access token from the Authorization header.
    Returns the authenticated User with its profile loaded.
    """
    if credentials is None:
        raise UnauthorizedException("Missing authentication token")

    try:
        user_id = token_subject(decode_token(credentials.credentials, TokenKind.ACCESS))
    except JWTError:
        raise InvalidTokenException("Invalid or expired access token")

    user = await crud_user.get(db, user_id)
    if user is None:
        raise UnauthorizedException("User not found")
    if not user.is_active:
        raise UnauthorizedException("User account is deactivated")

    return user


# Convenience type aliases for route signatures
DBSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[User, Depends(get_current_user)]

"""
Authentication service.
Handles registration, login, token refresh, and logout.
Business logic lives here; routes only call these methods.
"""
from __future__ import annotations

import logging

from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ConflictException,
    InvalidTokenException,
    UnauthorizedException,
)
from app.core.security import (
    TokenKind,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    token_subject,
    verify_password,
)
from app.crud.user import crud_user
from app.models.user import User
from app.schemas.user import Token, UserCreate

logger = logging.getLogger(__name__)


class AuthService:

    async def register_user(
        self, db: AsyncSession, *, user_in: UserCreate
    ) -> User:
        """
        Register a new user.
        Validates email uniqueness, hashes the password and creates the
        identity together with its profile row.
        """
        if await crud_user.get_by_email(db, user_in.email) is not None:
            raise ConflictException("A user with this email already exists")

        user = await crud_user.create_with_profile(
            db,
            email=user_in.email,
            hashed_password=hash_password(user_in.password),
            full_name=user_in.full_name,
        )
        logger.info("User %s registered", user.id)
        return user

    async def authenticate_user(
        self, db: AsyncSession, *, email: str, password: str
    ) -> Token:
        """
        Verify credentials and issue an access + refresh token pair.
        Stores the refresh token hash in the DB for rotation/revocation.
        """
        user = await crud_user.get_active_by_email(db, email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("Failed login for %s", email)
            raise UnauthorizedException("Invalid email or password")

        return await self._issue_tokens(db, user=user)

    async def refresh_access_token(
        self, db: AsyncSession, *, refresh_token: str
    ) -> Token:
        """
        Validate the refresh token, issue a new access token,
        and rotate the refresh token.
        """
        try:
            user_id = token_subject(decode_token(refresh_token, TokenKind.REFRESH))
        except JWTError:
            raise InvalidTokenException("Invalid or expired refresh token")

        user = await crud_user.get(db, user_id)
        if user is None or not user.is_active:
            raise UnauthorizedException("User not found or inactive")

        # Validate stored hash
        if user.refresh_token_hash != hash_token(refresh_token):
            raise InvalidTokenException("Refresh token has been revoked")

        return await self._issue_tokens(db, user=user)

    async def logout(self, db: AsyncSession, *, user: User) -> None:
        """Invalidate the stored refresh token hash."""
        await crud_user.set_refresh_token_hash(db, user=user, token_hash=None)

    async def _issue_tokens(self, db: AsyncSession, *, user: User) -> Token:
        access_token = create_access_token(str(user.id), user.email)
        refresh_token = create_refresh_token(str(user.id))
        await crud_user.set_refresh_token_hash(
            db, user=user, token_hash=hash_token(refresh_token)
        )
        return Token(access_token=access_token, refresh_token=refresh_token)


auth_service = AuthService()

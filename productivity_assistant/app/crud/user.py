"""
User and Profile CRUD operations.
Extends CRUDBase with identity lookups, profile search and account deletion.
"""
from __future__ import annotations

import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.base import CRUDBase
from app.models.user import Profile, User
from app.schemas.user import ProfileUpdate, UserCreate


class CRUDUser(CRUDBase[User, UserCreate, UserCreate]):

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_active_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(
            select(User).where(User.email == email.lower(), User.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def create_with_profile(
        self,
        db: AsyncSession,
        *,
        email: str,
        hashed_password: str,
        full_name: str | None = None,
    ) -> User:
        """Create the auth identity and its profile row in one flush."""
        user = User(email=email.lower(), hashed_password=hashed_password)
        user.profile = Profile(email=user.email, full_name=full_name)
        db.add(user)
        await db.flush()
        return user

    async def set_refresh_token_hash(
        self, db: AsyncSession, *, user: User, token_hash: str | None
    ) -> User:
        user.refresh_token_hash = token_hash
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    async def delete_identity(self, db: AsyncSession, *, user_id: uuid.UUID) -> None:
        """Delete the identity row; the profile and owned rows cascade in the DB."""
        await db.execute(delete(User).where(User.id == user_id))
        await db.flush()


class CRUDProfile(CRUDBase[Profile, ProfileUpdate, ProfileUpdate]):

    async def search_by_email(
        self,
        db: AsyncSession,
        *,
        query: str,
        exclude_id: uuid.UUID,
        limit: int = 10,
    ) -> list[Profile]:
        result = await db.execute(
            select(Profile)
            .where(Profile.email.ilike(f"%{query}%"), Profile.id != exclude_id)
            .order_by(Profile.email.asc())
            .limit(limit)
        )
        return list(result.scalars().all())


crud_user = CRUDUser(User)
crud_profile = CRUDProfile(Profile)

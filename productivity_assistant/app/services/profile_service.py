"""
Profile service.
Reads and edits the caller's profile, manages the avatar object and
deletes the whole account.
"""
from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BadRequestException, FileTooLargeException, NotFoundException
from app.crud.user import crud_profile, crud_user
from app.models.user import Profile, User
from app.schemas.user import AvatarUploadResult, ProfileUpdate
from app.services.storage_service import AvatarStorage

logger = logging.getLogger(__name__)


class ProfileService:

    async def get_profile(self, db: AsyncSession, *, user_id: uuid.UUID) -> Profile:
        return await crud_profile.get_or_404(db, user_id)

    async def update_profile(
        self,
        db: AsyncSession,
        *,
        profile_in: ProfileUpdate,
        current_user: User,
    ) -> Profile:
        profile = await self.get_profile(db, user_id=current_user.id)
        return await crud_profile.update(db, db_obj=profile, obj_in=profile_in)

    async def upload_avatar(
        self,
        db: AsyncSession,
        *,
        content: bytes,
        content_type: str | None,
        filename: str | None,
        current_user: User,
        storage: AvatarStorage,
    ) -> AvatarUploadResult:
        """
        Store a new avatar image and point the profile at it.
        The previous avatar object, if any, is removed.
        """
        if not content_type or not content_type.startswith("image/"):
            raise BadRequestException("Only image files are allowed")
        if not content:
            raise BadRequestException("Uploaded file is empty")
        if len(content) > settings.max_avatar_size_bytes:
            raise FileTooLargeException(settings.MAX_AVATAR_SIZE_MB)

        profile = await self.get_profile(db, user_id=current_user.id)
        if profile.avatar_url:
            self._delete_object(storage, profile.avatar_url)

        path = storage.object_path(current_user.id, content_type, filename)
        avatar_url = storage.save(path, content)
        await crud_profile.update(db, db_obj=profile, obj_in={"avatar_url": avatar_url})
        logger.info("Avatar updated for %s", current_user.id)
        return AvatarUploadResult(avatar_url=avatar_url, path=path)

    async def delete_avatar(
        self,
        db: AsyncSession,
        *,
        current_user: User,
        storage: AvatarStorage,
    ) -> None:
        profile = await self.get_profile(db, user_id=current_user.id)
        if not profile.avatar_url:
            raise NotFoundException("Avatar")
        self._delete_object(storage, profile.avatar_url)
        await crud_profile.update(db, db_obj=profile, obj_in={"avatar_url": None})

    async def delete_account(
        self,
        db: AsyncSession,
        *,
        current_user: User,
        storage: AvatarStorage,
    ) -> None:
        """Remove the avatar object, then the identity; owned rows cascade."""
        profile = await crud_profile.get(db, current_user.id)
        if profile is not None and profile.avatar_url:
            self._delete_object(storage, profile.avatar_url)

        user_id = current_user.id
        await crud_user.delete_identity(db, user_id=user_id)
        db.expunge_all()
        logger.info("Account %s deleted", user_id)

    async def search_users(
        self, db: AsyncSession, *, email: str, current_user: User
    ) -> list[Profile]:
        query = email.strip()
        if not query:
            raise BadRequestException("Email query is required")
        return await crud_profile.search_by_email(db, query=query, exclude_id=current_user.id)

    def _delete_object(self, storage: AvatarStorage, avatar_url: str) -> None:
        path = storage.path_from_url(avatar_url)
        if path is None:
            logger.warning("Avatar URL %s is not managed by storage; leaving it", avatar_url)
            return
        storage.delete(path)


profile_service = ProfileService()

"""
Profile routes for the authenticated user, including avatar upload.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from app.core.dependencies import CurrentUser, DBSession
from app.schemas.response import ApiResponse
from app.schemas.user import AvatarUploadResult, ProfileRead, ProfileUpdate
from app.services.profile_service import profile_service
from app.services.storage_service import AvatarStorage, get_avatar_storage

router = APIRouter(prefix="/profile", tags=["Profile"])

Storage = Annotated[AvatarStorage, Depends(get_avatar_storage)]


@router.get(
    "",
    response_model=ApiResponse[ProfileRead],
    summary="Get my profile",
)
async def get_profile(
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[ProfileRead]:
    profile = await profile_service.get_profile(db, user_id=current_user.id)
    return ApiResponse(data=ProfileRead.model_validate(profile))


@router.put(
    "",
    response_model=ApiResponse[ProfileRead],
    summary="Update my profile",
)
async def update_profile(
    profile_in: ProfileUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[ProfileRead]:
    profile = await profile_service.update_profile(
        db, profile_in=profile_in, current_user=current_user
    )
    return ApiResponse(data=ProfileRead.model_validate(profile), message="Profile updated successfully")


@router.delete(
    "",
    response_model=ApiResponse[None],
    summary="Delete my account and everything I own",
)
async def delete_profile(
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
) -> ApiResponse[None]:
    await profile_service.delete_account(db, current_user=current_user, storage=storage)
    return ApiResponse(message="Account deleted successfully")


@router.post(
    "/avatar",
    response_model=ApiResponse[AvatarUploadResult],
    summary="Upload a new avatar image",
)
async def upload_avatar(
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
    file: UploadFile = File(...),
) -> ApiResponse[AvatarUploadResult]:
    content = await file.read()
    result = await profile_service.upload_avatar(
        db,
        content=content,
        content_type=file.content_type,
        filename=file.filename,
        current_user=current_user,
        storage=storage,
    )
    return ApiResponse(data=result, message="Avatar uploaded successfully")


@router.delete(
    "/avatar",
    response_model=ApiResponse[None],
    summary="Remove my avatar",
)
async def delete_avatar(
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
) -> ApiResponse[None]:
    await profile_service.delete_avatar(db, current_user=current_user, storage=storage)
    return ApiResponse(message="Avatar deleted successfully")

"""
User directory routes: search by e-mail and public profiles.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from app.core.dependencies import CurrentUser, DBSession
from app.schemas.response import ApiResponse
from app.schemas.user import ProfilePublic
from app.services.profile_service import profile_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/search",
    response_model=ApiResponse[list[ProfilePublic]],
    summary="Find users by e-mail (partial, case-insensitive)",
)
async def search_users(
    current_user: CurrentUser,
    db: DBSession,
    email: str = Query(min_length=1, max_length=255),
) -> ApiResponse[list[ProfilePublic]]:
    profiles = await profile_service.search_users(db, email=email, current_user=current_user)
    return ApiResponse(data=[ProfilePublic.model_validate(p) for p in profiles])


@router.get(
    "/{user_id}",
    response_model=ApiResponse[ProfilePublic],
    summary="Get a user's public profile",
)
async def get_user(
    user_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[ProfilePublic]:
    profile = await profile_service.get_profile(db, user_id=user_id)
    return ApiResponse(data=ProfilePublic.model_validate(profile))

"""
Team meeting routes.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Query, status

from app.core.dependencies import CurrentUser, DBSession
from app.schemas.meeting import MeetingCreate, MeetingRead, MeetingUpdate
from app.schemas.response import ApiResponse, PaginatedResponse, PaginationMeta
from app.services.meeting_service import meeting_service

router = APIRouter(prefix="/meetings", tags=["Meetings"])


@router.get(
    "",
    response_model=PaginatedResponse[MeetingRead],
    summary="Meetings of all my teams, soonest first",
)
async def list_meetings(
    current_user: CurrentUser,
    db: DBSession,
    team_id: uuid.UUID | None = Query(default=None),
    scheduled_after: datetime | None = Query(default=None),
    scheduled_before: datetime | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> PaginatedResponse[MeetingRead]:
    meetings, total = await meeting_service.list_meetings(
        db,
        current_user=current_user,
        team_id=team_id,
        scheduled_after=scheduled_after,
        scheduled_before=scheduled_before,
        skip=offset,
        limit=limit,
    )
    return PaginatedResponse(
        data=[MeetingRead.model_validate(m) for m in meetings],
        pagination=PaginationMeta(total=total, limit=limit, offset=offset),
    )


@router.post(
    "",
    response_model=ApiResponse[MeetingRead],
    status_code=status.HTTP_201_CREATED,
    summary="Schedule a team meeting",
)
async def create_meeting(
    meeting_in: MeetingCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[MeetingRead]:
    meeting = await meeting_service.create_meeting(
        db, meeting_in=meeting_in, current_user=current_user
    )
    return ApiResponse(data=MeetingRead.model_validate(meeting), message="Meeting scheduled successfully")


@router.get(
    "/{meeting_id}",
    response_model=ApiResponse[MeetingRead],
    summary="Get a meeting",
)
async def get_meeting(
    meeting_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[MeetingRead]:
    meeting = await meeting_service.get_meeting(db, meeting_id=meeting_id, current_user=current_user)
    return ApiResponse(data=MeetingRead.model_validate(meeting))


@router.patch(
    "/{meeting_id}",
    response_model=ApiResponse[MeetingRead],
    summary="Update a meeting",
)
async def update_meeting(
    meeting_id: uuid.UUID,
    meeting_in: MeetingUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[MeetingRead]:
    meeting = await meeting_service.update_meeting(
        db, meeting_id=meeting_id, meeting_in=meeting_in, current_user=current_user
    )
    return ApiResponse(data=MeetingRead.model_validate(meeting), message="Meeting updated successfully")


@router.delete(
    "/{meeting_id}",
    response_model=ApiResponse[None],
    summary="Cancel a meeting",
)
async def delete_meeting(
    meeting_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[None]:
    await meeting_service.delete_meeting(db, meeting_id=meeting_id, current_user=current_user)
    return ApiResponse(message="Meeting deleted successfully")

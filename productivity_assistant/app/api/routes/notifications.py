"""
Notification routes.
Every lookup is scoped to the caller; another user's notification is a 404.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import CurrentUser, DBSession
from app.core.exceptions import NotFoundException
from app.crud.notification import crud_notification
from app.models.notification import Notification
from app.schemas.notification import MarkedCount, NotificationRead, NotificationUpdate, UnreadCount
from app.schemas.response import ApiResponse, PaginatedResponse, PaginationMeta

router = APIRouter(prefix="/notifications", tags=["Notifications"])


async def _get_own(db: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID) -> Notification:
    notification = await crud_notification.get_for_user(
        db, notification_id=notification_id, user_id=user_id
    )
    if notification is None:
        raise NotFoundException("Notification", str(notification_id))
    return notification


@router.get(
    "",
    response_model=PaginatedResponse[NotificationRead],
    summary="List my notifications, newest first",
)
async def list_notifications(
    current_user: CurrentUser,
    db: DBSession,
    read: bool | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> PaginatedResponse[NotificationRead]:
    notifications, total = await crud_notification.list_by_user(
        db, user_id=current_user.id, skip=offset, limit=limit, read=read
    )
    return PaginatedResponse(
        data=[NotificationRead.model_validate(n) for n in notifications],
        pagination=PaginationMeta(total=total, limit=limit, offset=offset),
    )


@router.get(
    "/unread-count",
    response_model=ApiResponse[UnreadCount],
    summary="Number of unread notifications",
)
async def unread_count(
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[UnreadCount]:
    count = await crud_notification.count_unread(db, user_id=current_user.id)
    return ApiResponse(data=UnreadCount(count=count))


@router.post(
    "/mark-all-read",
    response_model=ApiResponse[MarkedCount],
    summary="Mark all notifications as read",
)
async def mark_all_read(
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[MarkedCount]:
    updated = await crud_notification.mark_all_read(db, user_id=current_user.id)
    return ApiResponse(data=MarkedCount(updated=updated), message="All notifications marked as read")


@router.get(
    "/{notification_id}",
    response_model=ApiResponse[NotificationRead],
    summary="Get one of my notifications",
)
async def get_notification(
    notification_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[NotificationRead]:
    notification = await _get_own(db, notification_id, current_user.id)
    return ApiResponse(data=NotificationRead.model_validate(notification))


@router.patch(
    "/{notification_id}",
    response_model=ApiResponse[NotificationRead],
    summary="Mark a notification read or unread",
)
async def update_notification(
    notification_id: uuid.UUID,
    body: NotificationUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[NotificationRead]:
    notification = await _get_own(db, notification_id, current_user.id)
    notification = await crud_notification.update(db, db_obj=notification, obj_in=body)
    return ApiResponse(data=NotificationRead.model_validate(notification))


@router.delete(
    "/{notification_id}",
    response_model=ApiResponse[None],
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[None]:
    notification = await _get_own(db, notification_id, current_user.id)
    await crud_notification.delete(db, db_obj=notification)
    return ApiResponse(message="Notification deleted successfully")

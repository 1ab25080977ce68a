"""
Comment routes.
Listing and posting are nested under /tasks/{task_id}/comments; edits and
deletes address the comment directly.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from app.core.dependencies import CurrentUser, DBSession
from app.schemas.comment import CommentCreate, CommentRead, CommentUpdate
from app.schemas.response import ApiResponse
from app.services.task_service import task_service

router = APIRouter(tags=["Comments"])


@router.get(
    "/tasks/{task_id}/comments",
    response_model=ApiResponse[list[CommentRead]],
    summary="List comments on a task",
)
async def list_comments(
    task_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[list[CommentRead]]:
    comments = await task_service.list_comments(db, task_id=task_id, current_user=current_user)
    return ApiResponse(data=[CommentRead.model_validate(c) for c in comments])


@router.post(
    "/tasks/{task_id}/comments",
    response_model=ApiResponse[CommentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a task",
)
async def create_comment(
    task_id: uuid.UUID,
    comment_in: CommentCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[CommentRead]:
    comment = await task_service.add_comment(
        db, task_id=task_id, comment_in=comment_in, current_user=current_user
    )
    return ApiResponse(data=CommentRead.model_validate(comment), message="Comment added successfully")


@router.patch(
    "/comments/{comment_id}",
    response_model=ApiResponse[CommentRead],
    summary="Edit my comment",
)
async def update_comment(
    comment_id: uuid.UUID,
    comment_in: CommentUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[CommentRead]:
    comment = await task_service.update_comment(
        db, comment_id=comment_id, comment_in=comment_in, current_user=current_user
    )
    return ApiResponse(data=CommentRead.model_validate(comment), message="Comment updated successfully")


@router.delete(
    "/comments/{comment_id}",
    response_model=ApiResponse[None],
    summary="Delete my comment",
)
async def delete_comment(
    comment_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[None]:
    await task_service.delete_comment(db, comment_id=comment_id, current_user=current_user)
    return ApiResponse(message="Comment deleted successfully")

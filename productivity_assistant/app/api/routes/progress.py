"""
Task progress log routes.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from app.core.dependencies import CurrentUser, DBSession
from app.schemas.response import ApiResponse
from app.schemas.task import TaskProgressCreate, TaskProgressRead
from app.services.task_service import task_service

router = APIRouter(prefix="/tasks/{task_id}/progress", tags=["Progress"])


@router.get(
    "",
    response_model=ApiResponse[list[TaskProgressRead]],
    summary="Progress history of a task, newest first",
)
async def list_progress(
    task_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[list[TaskProgressRead]]:
    entries = await task_service.list_progress(db, task_id=task_id, current_user=current_user)
    return ApiResponse(data=[TaskProgressRead.model_validate(e) for e in entries])


@router.post(
    "",
    response_model=ApiResponse[TaskProgressRead],
    status_code=status.HTTP_201_CREATED,
    summary="Log progress on a task",
)
async def add_progress(
    task_id: uuid.UUID,
    progress_in: TaskProgressCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TaskProgressRead]:
    entry = await task_service.add_progress(
        db, task_id=task_id, progress_in=progress_in, current_user=current_user
    )
    return ApiResponse(data=TaskProgressRead.model_validate(entry), message="Progress update added")

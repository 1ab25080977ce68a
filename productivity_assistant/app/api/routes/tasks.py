"""
Task routes.
Workspace-scoped listing with filters and pagination, CRUD and statistics.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import CurrentUser, DBSession
from app.schemas.response import ApiResponse, PaginationMeta
from app.schemas.task import (
    OrderDirection,
    TaskCreate,
    TaskFilter,
    TaskListResponse,
    TaskOrderBy,
    TaskPriority,
    TaskRead,
    TaskStats,
    TaskStatus,
    TaskUpdate,
    Workspace,
)
from app.services.task_service import task_service

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def _task_filter_params(
    workspace: Workspace = Query(default="personal"),
    team_id: uuid.UUID | None = Query(default=None),
    status: TaskStatus | None = Query(default=None),
    priority: TaskPriority | None = Query(default=None),
    category: str | None = Query(default=None, max_length=50),
    due_before: datetime | None = Query(default=None),
    due_after: datetime | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
    order_by: TaskOrderBy = Query(default="created_at"),
    order_direction: OrderDirection = Query(default="desc"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> TaskFilter:
    return TaskFilter(
        workspace=workspace,
        team_id=team_id,
        status=status,
        priority=priority,
        category=category,
        due_before=due_before,
        due_after=due_after,
        search=search,
        order_by=order_by,
        order_direction=order_direction,
        limit=limit,
        offset=offset,
    )


@router.get(
    "",
    response_model=TaskListResponse,
    summary="List tasks in the personal or a team workspace",
)
async def list_tasks(
    current_user: CurrentUser,
    db: DBSession,
    filters: Annotated[TaskFilter, Depends(_task_filter_params)],
) -> TaskListResponse:
    tasks, total = await task_service.list_tasks(
        db, filters=filters, current_user=current_user
    )
    return TaskListResponse(
        data=[TaskRead.model_validate(t) for t in tasks],
        pagination=PaginationMeta(total=total, limit=filters.limit, offset=filters.offset),
        workspace=filters.workspace,
    )


@router.get(
    "/stats",
    response_model=ApiResponse[TaskStats],
    summary="Totals for my personal tasks",
)
async def task_stats(
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TaskStats]:
    stats = await task_service.personal_stats(db, current_user=current_user)
    return ApiResponse(data=stats)


@router.post(
    "",
    response_model=ApiResponse[TaskRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create a personal or team task",
)
async def create_task(
    task_in: TaskCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TaskRead]:
    task = await task_service.create_task(db, task_in=task_in, current_user=current_user)
    return ApiResponse(data=TaskRead.model_validate(task), message="Task created successfully")


@router.get(
    "/{task_id}",
    response_model=ApiResponse[TaskRead],
    summary="Get a single task",
)
async def get_task(
    task_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TaskRead]:
    task = await task_service.get_task(db, task_id=task_id, current_user=current_user)
    return ApiResponse(data=TaskRead.model_validate(task))


@router.put(
    "/{task_id}",
    response_model=ApiResponse[TaskRead],
    summary="Update a task",
)
async def update_task(
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TaskRead]:
    task = await task_service.update_task(
        db, task_id=task_id, task_in=task_in, current_user=current_user
    )
    return ApiResponse(data=TaskRead.model_validate(task), message="Task updated successfully")


@router.delete(
    "/{task_id}",
    response_model=ApiResponse[None],
    summary="Delete a task",
)
async def delete_task(
    task_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[None]:
    await task_service.delete_task(db, task_id=task_id, current_user=current_user)
    return ApiResponse(message="Task deleted successfully")

"""
Task Pydantic schemas.
Includes create/update/read variants, the list filter, statistics and the
progress-log schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.response import PaginatedResponse
from app.schemas.user import ProfilePublic

TaskStatus = Literal["todo", "in_progress", "completed", "archived"]
TaskPriority = Literal["low", "medium", "high", "urgent"]
Workspace = Literal["personal", "team"]
TaskOrderBy = Literal["created_at", "updated_at", "due_date", "priority"]
OrderDirection = Literal["asc", "desc"]


# ── Create ────────────────────────────────────────────────────────────────────

class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    category: str | None = Field(default=None, max_length=50)
    due_date: datetime | None = None
    team_id: uuid.UUID | None = None
    assigned_to: uuid.UUID | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


# ── Update ────────────────────────────────────────────────────────────────────

class TaskUpdate(BaseModel):
    """
    Partial update. Only the keys present in the request body are applied,
    and those keys are what the access policy inspects.
    """

    model_config = {"extra": "forbid"}

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    category: str | None = Field(default=None, max_length=50)
    due_date: datetime | None = None
    assigned_to: uuid.UUID | None = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "TaskUpdate":
        for field in ("title", "status", "priority"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


# ── Read ──────────────────────────────────────────────────────────────────────

class TaskRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    team_id: uuid.UUID | None
    title: str
    description: str | None
    status: str
    priority: str
    category: str | None
    due_date: datetime | None
    assigned_to: uuid.UUID | None
    assigned_by: uuid.UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskListResponse(PaginatedResponse[TaskRead]):
    workspace: Workspace


# ── Filter ────────────────────────────────────────────────────────────────────

class TaskFilter(BaseModel):
    """Query parameters for the task list endpoint."""

    workspace: Workspace = "personal"
    team_id: uuid.UUID | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    category: str | None = Field(default=None, max_length=50)
    due_before: datetime | None = None
    due_after: datetime | None = None
    search: str | None = Field(default=None, max_length=200)
    order_by: TaskOrderBy = "created_at"
    order_direction: OrderDirection = "desc"
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


# ── Statistics ────────────────────────────────────────────────────────────────

class TaskStats(BaseModel):
    total: int = 0
    completed: int = 0
    todo: int = 0
    in_progress: int = 0
    overdue: int = 0


class TeamTaskStats(TaskStats):
    members_with_tasks: int = 0


# ── Progress ──────────────────────────────────────────────────────────────────

class TaskProgressCreate(BaseModel):
    status: str = Field(min_length=1, max_length=50)
    progress_percentage: int = Field(default=0, ge=0, le=100)
    blocker: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=2000)


class TaskProgressRead(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    user_id: uuid.UUID
    status: str
    progress_percentage: int
    blocker: str | None
    notes: str | None
    created_at: datetime
    author: ProfilePublic | None = None

    model_config = {"from_attributes": True}

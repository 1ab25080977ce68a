"""
Task and TaskProgress CRUD operations.
Extends CRUDBase with workspace-scoped filtering, ordering, pagination and
status statistics.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import and_, case, distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.base import CRUDBase
from app.models.task import TASK_PRIORITIES, Task, TaskProgress
from app.schemas.task import TaskCreate, TaskFilter, TaskProgressCreate, TaskUpdate

# Rank priorities by urgency rather than alphabetically
_PRIORITY_RANK = case(
    {name: rank for rank, name in enumerate(TASK_PRIORITIES)},
    value=Task.priority,
)


class CRUDTask(CRUDBase[Task, TaskCreate, TaskUpdate]):

    async def create_task(
        self,
        db: AsyncSession,
        *,
        obj_in: TaskCreate,
        user_id: uuid.UUID,
        assigned_by: uuid.UUID | None = None,
    ) -> Task:
        task = Task(
            user_id=user_id,
            team_id=obj_in.team_id,
            title=obj_in.title,
            description=obj_in.description,
            status=obj_in.status,
            priority=obj_in.priority,
            category=obj_in.category,
            due_date=obj_in.due_date,
            assigned_to=obj_in.assigned_to,
            assigned_by=assigned_by,
        )
        db.add(task)
        await db.flush()
        await db.refresh(task)
        return task

    def _workspace_conditions(
        self, *, filters: TaskFilter, user_id: uuid.UUID
    ) -> list[Any]:
        if filters.workspace == "team":
            conditions: list[Any] = [Task.team_id == filters.team_id]
        else:
            conditions = [Task.user_id == user_id, Task.team_id.is_(None)]

        if filters.status is not None:
            conditions.append(Task.status == filters.status)
        if filters.priority is not None:
            conditions.append(Task.priority == filters.priority)
        if filters.category is not None:
            conditions.append(Task.category == filters.category)
        if filters.due_before is not None:
            conditions.append(Task.due_date <= filters.due_before)
        if filters.due_after is not None:
            conditions.append(Task.due_date >= filters.due_after)
        if filters.search:
            search_term = f"%{filters.search}%"
            conditions.append(
                or_(Task.title.ilike(search_term), Task.description.ilike(search_term))
            )
        return conditions

    async def list_for_workspace(
        self,
        db: AsyncSession,
        *,
        filters: TaskFilter,
        user_id: uuid.UUID,
    ) -> tuple[list[Task], int]:
        """
        Return (tasks, total) for one workspace.
        Personal: the caller's own tasks without a team.
        Team: every task of filters.team_id (membership is checked by the caller).
        """
        conditions = self._workspace_conditions(filters=filters, user_id=user_id)

        total_result = await db.execute(
            select(func.count()).select_from(Task).where(*conditions)
        )
        total = total_result.scalar_one()

        if filters.order_by == "priority":
            order_column: Any = _PRIORITY_RANK
        else:
            order_column = getattr(Task, filters.order_by)
        ordering = order_column.asc() if filters.order_direction == "asc" else order_column.desc()

        result = await db.execute(
            select(Task)
            .where(*conditions)
            .order_by(ordering, Task.id)
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return list(result.scalars().all()), total

    async def stats(
        self,
        db: AsyncSession,
        *,
        user_id: uuid.UUID | None = None,
        team_id: uuid.UUID | None = None,
    ) -> dict[str, int]:
        """
        Status counts for a personal workspace (user_id) or a team (team_id).
        Overdue means a due date in the past on a task that is not completed.
        """
        if team_id is not None:
            scope = Task.team_id == team_id
        else:
            scope = and_(Task.user_id == user_id, Task.team_id.is_(None))

        now = datetime.now(timezone.utc)
        overdue = and_(Task.due_date.is_not(None), Task.due_date < now, Task.status != "completed")
        result = await db.execute(
            select(
                func.count(Task.id),
                func.count(case((Task.status == "completed", 1))),
                func.count(case((Task.status == "todo", 1))),
                func.count(case((Task.status == "in_progress", 1))),
                func.count(case((overdue, 1))),
                func.count(distinct(Task.assigned_to)),
            ).where(scope)
        )
        total, completed, todo, in_progress, overdue_count, assignees = result.one()
        return {
            "total": total,
            "completed": completed,
            "todo": todo,
            "in_progress": in_progress,
            "overdue": overdue_count,
            "members_with_tasks": assignees,
        }


class CRUDTaskProgress(CRUDBase[TaskProgress, TaskProgressCreate, TaskProgressCreate]):

    async def list_by_task(
        self, db: AsyncSession, *, task_id: uuid.UUID
    ) -> list[TaskProgress]:
        result = await db.execute(
            select(TaskProgress)
            .where(TaskProgress.task_id == task_id)
            .order_by(TaskProgress.created_at.desc())
        )
        return list(result.scalars().all())


crud_task = CRUDTask(Task)
crud_task_progress = CRUDTaskProgress(TaskProgress, "Progress update")

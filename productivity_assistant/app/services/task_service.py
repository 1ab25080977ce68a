"""
Task business logic service.
Every operation resolves the task, asks the access policy with the caller's
current team role, then applies the change and fires notifications.
Comments and progress entries are handled here as task sub-resources.
"""
from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException
from app.core.permissions import Action, ResourceKind, ResourceRef, task_ref
from app.crud.comment import crud_comment
from app.crud.task import crud_task, crud_task_progress
from app.crud.team import crud_team, crud_team_member
from app.models.comment import Comment
from app.models.task import Task, TaskProgress
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentUpdate
from app.schemas.task import (
    TaskCreate,
    TaskFilter,
    TaskProgressCreate,
    TaskStats,
    TaskUpdate,
    TeamTaskStats,
)
from app.services.access_service import access_service
from app.services.notification_service import display_name, notification_service

logger = logging.getLogger(__name__)


class TaskService:

    async def create_task(
        self,
        db: AsyncSession,
        *,
        task_in: TaskCreate,
        current_user: User,
    ) -> Task:
        """
        Create a personal task, or a team task when team_id is given.
        Team tasks require the leader role and an assignee who is a member.
        """
        assigned_by: uuid.UUID | None = None

        if task_in.team_id is None:
            if task_in.assigned_to is not None:
                raise BadRequestException("Personal tasks cannot be assigned to other users")
        else:
            await crud_team.get_or_404(db, task_in.team_id)
            await access_service.authorize(
                db,
                caller_id=current_user.id,
                resource=ResourceRef(
                    kind=ResourceKind.TASK,
                    owner_id=current_user.id,
                    team_id=task_in.team_id,
                ),
                action=Action.CREATE,
            )
            if task_in.assigned_to is not None:
                await self._assert_assignable(
                    db, team_id=task_in.team_id, user_id=task_in.assigned_to
                )
                assigned_by = current_user.id

        task = await crud_task.create_task(
            db, obj_in=task_in, user_id=current_user.id, assigned_by=assigned_by
        )
        logger.info("Task %s created by %s (team=%s)", task.id, current_user.id, task.team_id)

        if task.assigned_to is not None and task.assigned_to != current_user.id:
            await notification_service.notify_task_assigned(
                db,
                assignee_id=task.assigned_to,
                task_id=task.id,
                task_title=task.title,
                assigner_name=display_name(current_user),
                team_id=task.team_id,
            )

        return task

    async def get_task(
        self,
        db: AsyncSession,
        *,
        task_id: uuid.UUID,
        current_user: User,
        action: Action = Action.READ,
    ) -> Task:
        """Fetch a task the caller may act on."""
        task = await crud_task.get_or_404(db, task_id)
        await access_service.authorize(
            db, caller_id=current_user.id, resource=task_ref(task), action=action
        )
        return task

    async def list_tasks(
        self,
        db: AsyncSession,
        *,
        filters: TaskFilter,
        current_user: User,
    ) -> tuple[list[Task], int]:
        """List one workspace: the caller's personal tasks or a team's tasks."""
        if filters.workspace == "team":
            if filters.team_id is None:
                raise BadRequestException("team_id is required for the team workspace")
            await access_service.authorize(
                db,
                caller_id=current_user.id,
                resource=ResourceRef(kind=ResourceKind.TEAM, team_id=filters.team_id),
                action=Action.READ,
            )
        return await crud_task.list_for_workspace(db, filters=filters, user_id=current_user.id)

    async def update_task(
        self,
        db: AsyncSession,
        *,
        task_id: uuid.UUID,
        task_in: TaskUpdate,
        current_user: User,
    ) -> Task:
        """
        Apply a partial update. The set of keys in the request body is checked
        as a whole: a team member sending anything besides status is rejected
        without applying any of it.
        """
        task = await crud_task.get_or_404(db, task_id)

        changes = task_in.model_dump(exclude_unset=True)
        await access_service.authorize(
            db,
            caller_id=current_user.id,
            resource=task_ref(task),
            action=Action.UPDATE,
            changed_fields=changes.keys(),
        )

        new_assignee = changes.get("assigned_to")
        if "assigned_to" in changes and new_assignee != task.assigned_to:
            if task.team_id is None:
                if new_assignee is not None:
                    raise BadRequestException("Personal tasks cannot be assigned to other users")
            elif new_assignee is not None:
                await self._assert_assignable(db, team_id=task.team_id, user_id=new_assignee)
                changes["assigned_by"] = current_user.id
        else:
            new_assignee = None

        was_completed = task.status == "completed"
        updated = await crud_task.update(db, db_obj=task, obj_in=changes)
        actor = display_name(current_user)

        if new_assignee is not None and new_assignee != current_user.id:
            await notification_service.notify_task_assigned(
                db,
                assignee_id=new_assignee,
                task_id=updated.id,
                task_title=updated.title,
                assigner_name=actor,
                team_id=updated.team_id,
            )

        if (
            not was_completed
            and updated.status == "completed"
            and updated.user_id != current_user.id
        ):
            await notification_service.notify_task_completed(
                db,
                task_owner_id=updated.user_id,
                task_id=updated.id,
                task_title=updated.title,
                completer_name=actor,
            )

        return updated

    async def delete_task(
        self,
        db: AsyncSession,
        *,
        task_id: uuid.UUID,
        current_user: User,
    ) -> None:
        """Hard-delete a task; its comments and progress entries cascade."""
        task = await self.get_task(
            db, task_id=task_id, current_user=current_user, action=Action.DELETE
        )
        await crud_task.delete(db, db_obj=task)
        logger.info("Task %s deleted by %s", task_id, current_user.id)

    async def personal_stats(self, db: AsyncSession, *, current_user: User) -> TaskStats:
        counts = await crud_task.stats(db, user_id=current_user.id)
        return TaskStats(**counts)

    async def team_stats(
        self, db: AsyncSession, *, team_id: uuid.UUID, current_user: User
    ) -> TeamTaskStats:
        await crud_team.get_or_404(db, team_id)
        await access_service.authorize(
            db,
            caller_id=current_user.id,
            resource=ResourceRef(kind=ResourceKind.TEAM, team_id=team_id),
            action=Action.READ,
        )
        counts = await crud_task.stats(db, team_id=team_id)
        return TeamTaskStats(**counts)

    # ── Comments ──────────────────────────────────────────────────────────────

    async def list_comments(
        self, db: AsyncSession, *, task_id: uuid.UUID, current_user: User
    ) -> list[Comment]:
        await self.get_task(db, task_id=task_id, current_user=current_user)
        return await crud_comment.list_by_task(db, task_id=task_id)

    async def add_comment(
        self,
        db: AsyncSession,
        *,
        task_id: uuid.UUID,
        comment_in: CommentCreate,
        current_user: User,
    ) -> Comment:
        task = await self.get_task(
            db, task_id=task_id, current_user=current_user, action=Action.COMMENT
        )
        comment = await crud_comment.create_comment(
            db, content=comment_in.content, task_id=task.id, user_id=current_user.id
        )

        if task.user_id != current_user.id:
            await notification_service.notify_task_comment(
                db,
                task_owner_id=task.user_id,
                task_id=task.id,
                task_title=task.title,
                commenter_name=display_name(current_user),
            )
        return comment

    async def update_comment(
        self,
        db: AsyncSession,
        *,
        comment_id: uuid.UUID,
        comment_in: CommentUpdate,
        current_user: User,
    ) -> Comment:
        comment = await self._get_own_comment(
            db, comment_id=comment_id, current_user=current_user, action=Action.UPDATE
        )
        return await crud_comment.update(db, db_obj=comment, obj_in=comment_in)

    async def delete_comment(
        self, db: AsyncSession, *, comment_id: uuid.UUID, current_user: User
    ) -> None:
        comment = await self._get_own_comment(
            db, comment_id=comment_id, current_user=current_user, action=Action.DELETE
        )
        await crud_comment.delete(db, db_obj=comment)

    # ── Progress ──────────────────────────────────────────────────────────────

    async def list_progress(
        self, db: AsyncSession, *, task_id: uuid.UUID, current_user: User
    ) -> list[TaskProgress]:
        await self.get_task(db, task_id=task_id, current_user=current_user)
        return await crud_task_progress.list_by_task(db, task_id=task_id)

    async def add_progress(
        self,
        db: AsyncSession,
        *,
        task_id: uuid.UUID,
        progress_in: TaskProgressCreate,
        current_user: User,
    ) -> TaskProgress:
        task = await self.get_task(
            db, task_id=task_id, current_user=current_user, action=Action.ADD_PROGRESS
        )
        return await crud_task_progress.create_from_dict(
            db,
            obj_in={
                "task_id": task.id,
                "user_id": current_user.id,
                **progress_in.model_dump(),
            },
        )

    # ── Private helpers ───────────────────────────────────────────────────────

    async def _assert_assignable(
        self, db: AsyncSession, *, team_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        member = await crud_team_member.get_membership(db, team_id=team_id, user_id=user_id)
        if member is None:
            raise BadRequestException("Assignee must be a member of the team")

    async def _get_own_comment(
        self,
        db: AsyncSession,
        *,
        comment_id: uuid.UUID,
        current_user: User,
        action: Action,
    ) -> Comment:
        comment = await crud_comment.get_or_404(db, comment_id)
        await access_service.authorize(
            db,
            caller_id=current_user.id,
            resource=ResourceRef(kind=ResourceKind.COMMENT, owner_id=comment.user_id),
            action=action,
        )
        return comment


task_service = TaskService()

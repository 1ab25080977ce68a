"""
Notification fan-out service.
Creates in-app notification rows inside the current request transaction.
"""
from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.notification import crud_notification
from app.models.notification import Notification
from app.models.user import User


def display_name(user: User) -> str:
    """Profile name when set, otherwise the account e-mail. Expects user.profile loaded."""
    if user.profile is not None and user.profile.full_name:
        return user.profile.full_name
    return user.email


class NotificationService:

    async def notify_user(
        self,
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        type: str,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        """Persist a notification for one recipient."""
        return await crud_notification.create_notification(
            db,
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            data=data,
        )

    async def notify_team_invitation(
        self,
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        team_id: uuid.UUID,
        team_name: str,
        inviter_id: uuid.UUID,
        inviter_name: str,
        role: str,
    ) -> Notification:
        return await self.notify_user(
            db,
            user_id=user_id,
            type="team_invitation",
            title=f"You've been invited to {team_name}!",
            message=f"{inviter_name} has invited you to join {team_name} as a {role}.",
            data={
                "team_id": str(team_id),
                "team_name": team_name,
                "inviter_id": str(inviter_id),
                "inviter_name": inviter_name,
                "role": role,
            },
        )

    async def notify_task_assigned(
        self,
        db: AsyncSession,
        *,
        assignee_id: uuid.UUID,
        task_id: uuid.UUID,
        task_title: str,
        assigner_name: str,
        team_id: uuid.UUID | None = None,
    ) -> Notification:
        return await self.notify_user(
            db,
            user_id=assignee_id,
            type="task_assigned",
            title="New Task Assigned",
            message=f"{assigner_name} assigned you: {task_title}",
            data={
                "task_id": str(task_id),
                "team_id": str(team_id) if team_id else None,
            },
        )

    async def notify_task_comment(
        self,
        db: AsyncSession,
        *,
        task_owner_id: uuid.UUID,
        task_id: uuid.UUID,
        task_title: str,
        commenter_name: str,
    ) -> Notification:
        return await self.notify_user(
            db,
            user_id=task_owner_id,
            type="task_comment",
            title="New Comment",
            message=f"{commenter_name} commented on: {task_title}",
            data={"task_id": str(task_id)},
        )

    async def notify_task_completed(
        self,
        db: AsyncSession,
        *,
        task_owner_id: uuid.UUID,
        task_id: uuid.UUID,
        task_title: str,
        completer_name: str,
    ) -> Notification:
        return await self.notify_user(
            db,
            user_id=task_owner_id,
            type="task_completed",
            title="Task Completed",
            message=f"{completer_name} completed: {task_title}",
            data={"task_id": str(task_id)},
        )

    async def notify_meeting_scheduled(
        self,
        db: AsyncSession,
        *,
        recipient_ids: Iterable[uuid.UUID],
        meeting_id: uuid.UUID,
        team_id: uuid.UUID,
        title: str,
        scheduled_at: datetime,
    ) -> int:
        """Notify every recipient; returns how many rows were written."""
        count = 0
        for recipient_id in recipient_ids:
            await self.notify_user(
                db,
                user_id=recipient_id,
                type="meeting_scheduled",
                title="Meeting Scheduled",
                message=f"{title} on {scheduled_at.isoformat()}",
                data={
                    "meeting_id": str(meeting_id),
                    "team_id": str(team_id),
                    "scheduled_at": scheduled_at.isoformat(),
                },
            )
            count += 1
        return count


notification_service = NotificationService()

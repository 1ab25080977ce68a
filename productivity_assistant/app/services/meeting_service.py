"""
Team meeting service.
Any member of the meeting's team can read it; only leaders schedule,
edit or cancel. Scheduling notifies the rest of the team.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import Action, ResourceKind, ResourceRef
from app.crud.meeting import crud_meeting
from app.crud.team import crud_team, crud_team_member
from app.models.meeting import Meeting
from app.models.user import User
from app.schemas.meeting import MeetingCreate, MeetingUpdate
from app.services.access_service import access_service
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def _meeting_ref(team_id: uuid.UUID) -> ResourceRef:
    return ResourceRef(kind=ResourceKind.MEETING, team_id=team_id)


class MeetingService:

    async def list_meetings(
        self,
        db: AsyncSession,
        *,
        current_user: User,
        team_id: uuid.UUID | None = None,
        scheduled_after: datetime | None = None,
        scheduled_before: datetime | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Meeting], int]:
        """Meetings across every team the caller belongs to, optionally narrowed to one."""
        team_ids = await crud_team_member.list_team_ids_for_user(db, user_id=current_user.id)
        if team_id is not None:
            team_ids = [tid for tid in team_ids if tid == team_id]
        if not team_ids:
            return [], 0

        return await crud_meeting.list_for_teams(
            db,
            team_ids=team_ids,
            scheduled_after=scheduled_after,
            scheduled_before=scheduled_before,
            skip=skip,
            limit=limit,
        )

    async def get_meeting(
        self,
        db: AsyncSession,
        *,
        meeting_id: uuid.UUID,
        current_user: User,
        action: Action = Action.READ,
    ) -> Meeting:
        meeting = await crud_meeting.get_or_404(db, meeting_id)
        await access_service.authorize(
            db,
            caller_id=current_user.id,
            resource=_meeting_ref(meeting.team_id),
            action=action,
        )
        return meeting

    async def create_meeting(
        self,
        db: AsyncSession,
        *,
        meeting_in: MeetingCreate,
        current_user: User,
    ) -> Meeting:
        await crud_team.get_or_404(db, meeting_in.team_id)
        await access_service.authorize(
            db,
            caller_id=current_user.id,
            resource=_meeting_ref(meeting_in.team_id),
            action=Action.CREATE,
        )

        meeting = await crud_meeting.create_from_dict(
            db, obj_in={**meeting_in.model_dump(), "created_by": current_user.id}
        )

        member_ids = await crud_team_member.list_user_ids(db, team_id=meeting.team_id)
        notified = await notification_service.notify_meeting_scheduled(
            db,
            recipient_ids=[uid for uid in member_ids if uid != current_user.id],
            meeting_id=meeting.id,
            team_id=meeting.team_id,
            title=meeting.title,
            scheduled_at=meeting.scheduled_at,
        )
        logger.info("Meeting %s scheduled in team %s, %d notified", meeting.id, meeting.team_id, notified)
        return meeting

    async def update_meeting(
        self,
        db: AsyncSession,
        *,
        meeting_id: uuid.UUID,
        meeting_in: MeetingUpdate,
        current_user: User,
    ) -> Meeting:
        meeting = await self.get_meeting(
            db, meeting_id=meeting_id, current_user=current_user, action=Action.UPDATE
        )
        return await crud_meeting.update(db, db_obj=meeting, obj_in=meeting_in)

    async def delete_meeting(
        self,
        db: AsyncSession,
        *,
        meeting_id: uuid.UUID,
        current_user: User,
    ) -> None:
        meeting = await self.get_meeting(
            db, meeting_id=meeting_id, current_user=current_user, action=Action.DELETE
        )
        await crud_meeting.delete(db, db_obj=meeting)


meeting_service = MeetingService()

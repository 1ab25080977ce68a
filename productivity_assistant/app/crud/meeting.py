"""
Meeting CRUD operations.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.base import CRUDBase
from app.models.meeting import Meeting
from app.schemas.meeting import MeetingCreate, MeetingUpdate


class CRUDMeeting(CRUDBase[Meeting, MeetingCreate, MeetingUpdate]):

    async def list_for_teams(
        self,
        db: AsyncSession,
        *,
        team_ids: list[uuid.UUID],
        scheduled_after: datetime | None = None,
        scheduled_before: datetime | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Meeting], int]:
        """Meetings of the given teams, soonest first."""
        conditions = [Meeting.team_id.in_(team_ids)]
        if scheduled_after is not None:
            conditions.append(Meeting.scheduled_at >= scheduled_after)
        if scheduled_before is not None:
            conditions.append(Meeting.scheduled_at <= scheduled_before)

        total_result = await db.execute(
            select(func.count()).select_from(Meeting).where(*conditions)
        )
        total = total_result.scalar_one()

        result = await db.execute(
            select(Meeting)
            .where(*conditions)
            .order_by(Meeting.scheduled_at.asc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total


crud_meeting = CRUDMeeting(Meeting)

"""
Team and TeamMember CRUD operations.
"""
from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.crud.base import CRUDBase
from app.models.team import Team, TeamMember
from app.schemas.team import TeamCreate, TeamUpdate


class CRUDTeam(CRUDBase[Team, TeamCreate, TeamUpdate]):

    async def create_team(
        self,
        db: AsyncSession,
        *,
        obj_in: TeamCreate,
        created_by: uuid.UUID,
    ) -> Team:
        team = Team(
            name=obj_in.name,
            description=obj_in.description,
            created_by=created_by,
        )
        db.add(team)
        await db.flush()
        await db.refresh(team)
        return team

    async def get_with_members(
        self, db: AsyncSession, team_id: uuid.UUID
    ) -> Team | None:
        result = await db.execute(
            select(Team)
            .options(selectinload(Team.members))
            .where(Team.id == team_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self, db: AsyncSession, *, user_id: uuid.UUID
    ) -> list[tuple[Team, str]]:
        """Return (team, caller_role) pairs for every team the user belongs to."""
        result = await db.execute(
            select(Team, TeamMember.role)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .where(TeamMember.user_id == user_id)
            .order_by(Team.created_at.desc())
        )
        return [(row[0], row[1]) for row in result.all()]


class CRUDTeamMember(CRUDBase[TeamMember, TeamCreate, TeamUpdate]):

    async def get_membership(
        self, db: AsyncSession, *, team_id: uuid.UUID, user_id: uuid.UUID
    ) -> TeamMember | None:
        result = await db.execute(
            select(TeamMember).where(
                TeamMember.team_id == team_id,
                TeamMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_in_team(
        self, db: AsyncSession, *, team_id: uuid.UUID, member_id: uuid.UUID
    ) -> TeamMember | None:
        result = await db.execute(
            select(TeamMember).where(
                TeamMember.id == member_id,
                TeamMember.team_id == team_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_member(
        self,
        db: AsyncSession,
        *,
        team_id: uuid.UUID,
        user_id: uuid.UUID,
        role: str = "member",
    ) -> TeamMember:
        member = TeamMember(team_id=team_id, user_id=user_id, role=role)
        db.add(member)
        await db.flush()
        await db.refresh(member)
        return member

    async def list_by_team(
        self, db: AsyncSession, *, team_id: uuid.UUID
    ) -> list[TeamMember]:
        result = await db.execute(
            select(TeamMember)
            .where(TeamMember.team_id == team_id)
            .order_by(TeamMember.joined_at.asc())
        )
        return list(result.scalars().all())

    async def list_user_ids(
        self, db: AsyncSession, *, team_id: uuid.UUID
    ) -> list[uuid.UUID]:
        result = await db.execute(
            select(TeamMember.user_id).where(TeamMember.team_id == team_id)
        )
        return [row[0] for row in result.all()]

    async def list_team_ids_for_user(
        self, db: AsyncSession, *, user_id: uuid.UUID
    ) -> list[uuid.UUID]:
        result = await db.execute(
            select(TeamMember.team_id).where(TeamMember.user_id == user_id)
        )
        return [row[0] for row in result.all()]


crud_team = CRUDTeam(Team)
crud_team_member = CRUDTeamMember(TeamMember, "Team member")

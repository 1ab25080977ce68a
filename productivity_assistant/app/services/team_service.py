"""
Team management service.
Handles team creation, membership invitations, role changes and removal.
Invitations write an in-app notification in the request transaction and
queue the invitation e-mail as a background task.
"""
from __future__ import annotations

import logging
import uuid

from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, NotFoundException
from app.core.permissions import Action, ResourceKind, ResourceRef
from app.crud.team import crud_team, crud_team_member
from app.crud.user import crud_user
from app.models.team import Team, TeamMember
from app.models.user import User
from app.schemas.team import TeamCreate, TeamMemberAdd, TeamUpdate
from app.services.access_service import access_service
from app.services.email_service import SMTPMailer, TeamInvitationEmail, deliver_team_invitation
from app.services.notification_service import display_name, notification_service

logger = logging.getLogger(__name__)


def _team_ref(team_id: uuid.UUID, subject_user_id: uuid.UUID | None = None) -> ResourceRef:
    return ResourceRef(kind=ResourceKind.TEAM, team_id=team_id, subject_user_id=subject_user_id)


class TeamService:

    async def create_team(
        self,
        db: AsyncSession,
        *,
        team_in: TeamCreate,
        current_user: User,
    ) -> Team:
        """Create a team; the creator becomes its first leader."""
        team = await crud_team.create_team(db, obj_in=team_in, created_by=current_user.id)
        await crud_team_member.add_member(
            db, team_id=team.id, user_id=current_user.id, role="leader"
        )
        logger.info("Team %s created by %s", team.id, current_user.id)
        return team

    async def list_teams(
        self, db: AsyncSession, *, current_user: User
    ) -> list[tuple[Team, str]]:
        return await crud_team.list_for_user(db, user_id=current_user.id)

    async def get_team(
        self,
        db: AsyncSession,
        *,
        team_id: uuid.UUID,
        current_user: User,
    ) -> Team:
        await self._authorize(db, team_id=team_id, current_user=current_user, action=Action.READ)
        team = await crud_team.get_with_members(db, team_id)
        if team is None:
            raise NotFoundException("Team", str(team_id))
        return team

    async def update_team(
        self,
        db: AsyncSession,
        *,
        team_id: uuid.UUID,
        team_in: TeamUpdate,
        current_user: User,
    ) -> Team:
        team = await self._authorize(
            db, team_id=team_id, current_user=current_user, action=Action.UPDATE
        )
        return await crud_team.update(db, db_obj=team, obj_in=team_in)

    async def delete_team(
        self,
        db: AsyncSession,
        *,
        team_id: uuid.UUID,
        current_user: User,
    ) -> None:
        """Delete the team; members, meetings and team tasks cascade."""
        team = await self._authorize(
            db, team_id=team_id, current_user=current_user, action=Action.DELETE
        )
        await crud_team.delete(db, db_obj=team)
        logger.info("Team %s deleted by %s", team_id, current_user.id)

    async def list_members(
        self,
        db: AsyncSession,
        *,
        team_id: uuid.UUID,
        current_user: User,
    ) -> list[TeamMember]:
        await self._authorize(db, team_id=team_id, current_user=current_user, action=Action.READ)
        return await crud_team_member.list_by_team(db, team_id=team_id)

    async def add_member(
        self,
        db: AsyncSession,
        *,
        team_id: uuid.UUID,
        member_in: TeamMemberAdd,
        current_user: User,
        background_tasks: BackgroundTasks,
        mailer: SMTPMailer,
    ) -> TeamMember:
        """
        Add an existing user to the team.
        Side effects: a team_invitation notification for the invitee, and an
        invitation e-mail sent after the response.
        """
        team = await self._authorize(
            db, team_id=team_id, current_user=current_user, action=Action.MANAGE_MEMBERS
        )

        if member_in.user_id is not None:
            invitee = await crud_user.get_or_404(db, member_in.user_id)
        else:
            invitee = await crud_user.get_by_email(db, str(member_in.email))
            if invitee is None:
                raise NotFoundException("User")

        existing = await crud_team_member.get_membership(db, team_id=team_id, user_id=invitee.id)
        if existing is not None:
            raise ConflictException("User is already a team member")

        member = await crud_team_member.add_member(
            db, team_id=team_id, user_id=invitee.id, role=member_in.role
        )

        inviter_name = display_name(current_user)
        await notification_service.notify_team_invitation(
            db,
            user_id=invitee.id,
            team_id=team.id,
            team_name=team.name,
            inviter_id=current_user.id,
            inviter_name=inviter_name,
            role=member_in.role,
        )

        background_tasks.add_task(
            deliver_team_invitation,
            mailer,
            TeamInvitationEmail(
                recipient_email=invitee.email,
                recipient_name=display_name(invitee),
                team_name=team.name,
                inviter_name=inviter_name,
                role=member_in.role,
            ),
        )
        logger.info("User %s added to team %s as %s", invitee.id, team_id, member_in.role)
        return member

    async def update_member_role(
        self,
        db: AsyncSession,
        *,
        team_id: uuid.UUID,
        member_id: uuid.UUID,
        role: str,
        current_user: User,
    ) -> TeamMember:
        await self._authorize(
            db, team_id=team_id, current_user=current_user, action=Action.MANAGE_MEMBERS
        )
        member = await crud_team_member.get_in_team(db, team_id=team_id, member_id=member_id)
        if member is None:
            raise NotFoundException("Team member", str(member_id))
        return await crud_team_member.update(db, db_obj=member, obj_in={"role": role})

    async def remove_member(
        self,
        db: AsyncSession,
        *,
        team_id: uuid.UUID,
        member_id: uuid.UUID,
        current_user: User,
    ) -> None:
        """Leaders may remove anyone; any member may remove themselves."""
        await crud_team.get_or_404(db, team_id)
        member = await crud_team_member.get_in_team(db, team_id=team_id, member_id=member_id)
        if member is None:
            raise NotFoundException("Team member", str(member_id))

        await access_service.authorize(
            db,
            caller_id=current_user.id,
            resource=_team_ref(team_id, subject_user_id=member.user_id),
            action=Action.REMOVE_MEMBER,
        )
        await crud_team_member.delete(db, db_obj=member)
        logger.info("Member %s removed from team %s by %s", member.user_id, team_id, current_user.id)

    # ── Private helpers ───────────────────────────────────────────────────────

    async def _authorize(
        self,
        db: AsyncSession,
        *,
        team_id: uuid.UUID,
        current_user: User,
        action: Action,
    ) -> Team:
        team = await crud_team.get_or_404(db, team_id)
        await access_service.authorize(
            db, caller_id=current_user.id, resource=_team_ref(team_id), action=action
        )
        return team


team_service = TeamService()

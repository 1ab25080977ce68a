"""
Team management routes.
Teams, their membership and team task statistics.
"""
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, status

from app.core.dependencies import CurrentUser, DBSession
from app.schemas.response import ApiResponse
from app.schemas.task import TeamTaskStats
from app.schemas.team import (
    TeamCreate,
    TeamMemberAdd,
    TeamMemberRead,
    TeamMemberUpdateRole,
    TeamRead,
    TeamReadWithMembers,
    TeamSummary,
    TeamUpdate,
)
from app.services.email_service import SMTPMailer, get_mailer
from app.services.task_service import task_service
from app.services.team_service import team_service

router = APIRouter(prefix="/teams", tags=["Teams"])


@router.get(
    "",
    response_model=ApiResponse[list[TeamSummary]],
    summary="List teams I belong to",
)
async def list_my_teams(
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[list[TeamSummary]]:
    rows = await team_service.list_teams(db, current_user=current_user)
    return ApiResponse(
        data=[
            TeamSummary(**TeamRead.model_validate(team).model_dump(), role=role)
            for team, role in rows
        ]
    )


@router.post(
    "",
    response_model=ApiResponse[TeamRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new team",
)
async def create_team(
    team_in: TeamCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TeamRead]:
    team = await team_service.create_team(db, team_in=team_in, current_user=current_user)
    return ApiResponse(data=TeamRead.model_validate(team), message="Team created successfully")


@router.get(
    "/{team_id}",
    response_model=ApiResponse[TeamReadWithMembers],
    summary="Get team details with members",
)
async def get_team(
    team_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TeamReadWithMembers]:
    team = await team_service.get_team(db, team_id=team_id, current_user=current_user)
    return ApiResponse(data=TeamReadWithMembers.model_validate(team))


@router.patch(
    "/{team_id}",
    response_model=ApiResponse[TeamRead],
    summary="Update team details (leaders only)",
)
async def update_team(
    team_id: uuid.UUID,
    team_in: TeamUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TeamRead]:
    team = await team_service.update_team(
        db, team_id=team_id, team_in=team_in, current_user=current_user
    )
    return ApiResponse(data=TeamRead.model_validate(team), message="Team updated successfully")


@router.delete(
    "/{team_id}",
    response_model=ApiResponse[None],
    summary="Delete a team (leaders only)",
)
async def delete_team(
    team_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[None]:
    await team_service.delete_team(db, team_id=team_id, current_user=current_user)
    return ApiResponse(message="Team deleted successfully")


@router.get(
    "/{team_id}/stats",
    response_model=ApiResponse[TeamTaskStats],
    summary="Task totals for a team",
)
async def team_stats(
    team_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TeamTaskStats]:
    stats = await task_service.team_stats(db, team_id=team_id, current_user=current_user)
    return ApiResponse(data=stats)


# ── Members ───────────────────────────────────────────────────────────────────

@router.get(
    "/{team_id}/members",
    response_model=ApiResponse[list[TeamMemberRead]],
    summary="List team members",
)
async def list_members(
    team_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[list[TeamMemberRead]]:
    members = await team_service.list_members(db, team_id=team_id, current_user=current_user)
    return ApiResponse(data=[TeamMemberRead.model_validate(m) for m in members])


@router.post(
    "/{team_id}/members",
    response_model=ApiResponse[TeamMemberRead],
    status_code=status.HTTP_201_CREATED,
    summary="Add a member to a team (leaders only)",
)
async def add_member(
    team_id: uuid.UUID,
    member_in: TeamMemberAdd,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser,
    db: DBSession,
    mailer: Annotated[SMTPMailer, Depends(get_mailer)],
) -> ApiResponse[TeamMemberRead]:
    member = await team_service.add_member(
        db,
        team_id=team_id,
        member_in=member_in,
        current_user=current_user,
        background_tasks=background_tasks,
        mailer=mailer,
    )
    return ApiResponse(data=TeamMemberRead.model_validate(member), message="Member added successfully")


@router.patch(
    "/{team_id}/members/{member_id}",
    response_model=ApiResponse[TeamMemberRead],
    summary="Change a member's role (leaders only)",
)
async def update_member_role(
    team_id: uuid.UUID,
    member_id: uuid.UUID,
    body: TeamMemberUpdateRole,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[TeamMemberRead]:
    member = await team_service.update_member_role(
        db, team_id=team_id, member_id=member_id, role=body.role, current_user=current_user
    )
    return ApiResponse(data=TeamMemberRead.model_validate(member), message="Member role updated")


@router.delete(
    "/{team_id}/members/{member_id}",
    response_model=ApiResponse[None],
    summary="Remove a member, or leave the team",
)
async def remove_member(
    team_id: uuid.UUID,
    member_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[None]:
    await team_service.remove_member(
        db, team_id=team_id, member_id=member_id, current_user=current_user
    )
    return ApiResponse(message="Member removed successfully")

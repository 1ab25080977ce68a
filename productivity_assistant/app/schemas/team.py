"""
Team and TeamMember Pydantic schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, computed_field, model_validator

from app.schemas.user import ProfilePublic

TeamRole = Literal["leader", "member"]


# ── Team Create / Update / Read ───────────────────────────────────────────────

class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class TeamUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def reject_null_name(self) -> "TeamUpdate":
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("name cannot be null")
        return self


class TeamRead(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    created_by: uuid.UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TeamSummary(TeamRead):
    """Team as listed for the caller, with the caller's own role."""

    role: TeamRole


class TeamReadWithMembers(TeamRead):
    members: list["TeamMemberRead"] = []

    @computed_field  # type: ignore[misc]
    @property
    def member_count(self) -> int:
        return len(self.members)


# ── TeamMember schemas ────────────────────────────────────────────────────────

class TeamMemberAdd(BaseModel):
    """Invite by user id or by e-mail address of an existing account."""

    user_id: uuid.UUID | None = None
    email: EmailStr | None = None
    role: TeamRole = "member"

    @model_validator(mode="after")
    def require_target(self) -> "TeamMemberAdd":
        if self.user_id is None and self.email is None:
            raise ValueError("Either user_id or email is required")
        return self


class TeamMemberUpdateRole(BaseModel):
    role: TeamRole


class TeamMemberRead(BaseModel):
    id: uuid.UUID
    team_id: uuid.UUID
    user_id: uuid.UUID
    role: str
    joined_at: datetime
    profile: ProfilePublic | None = None

    model_config = {"from_attributes": True}


TeamReadWithMembers.model_rebuild()

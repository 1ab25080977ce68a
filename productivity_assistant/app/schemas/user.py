"""
User and Profile Pydantic schemas.
Covers registration, login, token responses, profile reads/updates and
avatar upload results.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.security import validate_password_strength


# ── Registration / login ──────────────────────────────────────────────────────

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    full_name: str | None = Field(default=None, min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


# ── Profile ───────────────────────────────────────────────────────────────────

class ProfileUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    phone: str | None = Field(default=None, max_length=20)
    location: str | None = Field(default=None, max_length=100)


class ProfileRead(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str | None
    bio: str | None
    avatar_url: str | None
    phone: str | None
    location: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfilePublic(BaseModel):
    """Minimal public profile, embedded in task, comment and member responses."""

    id: uuid.UUID
    email: str
    full_name: str | None
    avatar_url: str | None

    model_config = {"from_attributes": True}


class AvatarUploadResult(BaseModel):
    avatar_url: str
    path: str

"""
Notification Pydantic schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class NotificationRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    title: str
    message: str
    data: dict[str, Any] | None
    read: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NotificationUpdate(BaseModel):
    read: bool


class UnreadCount(BaseModel):
    count: int


class MarkedCount(BaseModel):
    updated: int

"""
Aggregates all API routers into a single APIRouter.
"""
from __future__ import annotations

from fastapi import APIRouter

from app.api.routes import (
    ai,
    auth,
    comments,
    meetings,
    notifications,
    profile,
    progress,
    tasks,
    teams,
    users,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(tasks.router)
api_router.include_router(comments.router)
api_router.include_router(progress.router)
api_router.include_router(meetings.router)
api_router.include_router(notifications.router)
api_router.include_router(teams.router)
api_router.include_router(profile.router)
api_router.include_router(users.router)
api_router.include_router(ai.router)

"""
Shared slowapi limiter.
Route modules decorate endpoints with it; main.py attaches it to app.state.
"""
from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

"""
Access enforcement service.
Looks up the caller's current team membership and runs the workspace
policy; a denied decision becomes a ForbiddenException.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenException
from app.core.permissions import Action, ResourceRef, evaluate
from app.crud.team import crud_team_member

logger = logging.getLogger(__name__)


class AccessService:

    async def membership_role(
        self, db: AsyncSession, *, team_id: uuid.UUID | None, user_id: uuid.UUID
    ) -> str | None:
        """Current role of user_id in team_id, or None when not a member."""
        if team_id is None:
            return None
        member = await crud_team_member.get_membership(db, team_id=team_id, user_id=user_id)
        return member.role if member is not None else None

    async def authorize(
        self,
        db: AsyncSession,
        *,
        caller_id: uuid.UUID,
        resource: ResourceRef,
        action: Action,
        changed_fields: Iterable[str] = (),
    ) -> str | None:
        """
        Raise ForbiddenException unless the policy allows the action.
        Returns the caller's membership role so callers need not query it twice.
        """
        role = await self.membership_role(db, team_id=resource.team_id, user_id=caller_id)
        decision = evaluate(caller_id, resource, action, role, changed_fields)
        if not decision.allowed:
            logger.info(
                "Denied %s on %s for user %s: %s",
                action.value,
                resource.kind.value,
                caller_id,
                decision.reason,
            )
            raise ForbiddenException(decision.reason)
        return role


access_service = AccessService()

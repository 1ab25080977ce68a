"""
Comment CRUD operations.
"""
from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.base import CRUDBase
from app.models.comment import Comment
from app.schemas.comment import CommentCreate, CommentUpdate


class CRUDComment(CRUDBase[Comment, CommentCreate, CommentUpdate]):

    async def create_comment(
        self,
        db: AsyncSession,
        *,
        content: str,
        task_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Comment:
        comment = Comment(content=content, task_id=task_id, user_id=user_id)
        db.add(comment)
        await db.flush()
        await db.refresh(comment)
        return comment

    async def list_by_task(
        self, db: AsyncSession, *, task_id: uuid.UUID
    ) -> list[Comment]:
        result = await db.execute(
            select(Comment)
            .where(Comment.task_id == task_id)
            .order_by(Comment.created_at.asc())
        )
        return list(result.scalars().all())


crud_comment = CRUDComment(Comment)

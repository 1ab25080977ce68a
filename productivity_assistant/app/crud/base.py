"""
Generic async CRUD base class.
Domain CRUD classes extend CRUDBase and add their own queries. Nothing here
commits; the request-scoped session commits once the route returns.
"""
from __future__ import annotations

import uuid
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException
from app.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Primary-key lookups, creation, partial updates and deletes for one model.

    resource_name is what 404 responses call the row ("Task not found");
    it defaults to the model class name.
    """

    def __init__(self, model: type[ModelType], resource_name: str | None = None) -> None:
        self.model = model
        self.resource_name = resource_name or model.__name__

    async def get(self, db: AsyncSession, id: uuid.UUID) -> ModelType | None:
        result = await db.execute(select(self.model).where(self.model.id == id))  # type: ignore[attr-defined]
        return result.scalar_one_or_none()

    async def get_or_404(self, db: AsyncSession, id: uuid.UUID) -> ModelType:
        obj = await self.get(db, id)
        if obj is None:
            raise NotFoundException(self.resource_name, str(id))
        return obj

    async def create_from_dict(
        self, db: AsyncSession, *, obj_in: dict[str, Any]
    ) -> ModelType:
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | dict[str, Any],
    ) -> ModelType:
        """
        Apply a partial update. Schemas contribute only the fields the client
        actually sent, so an explicit null clears a column and an omitted
        field is left alone.
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            setattr(db_obj, field, value)

        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, db_obj: ModelType) -> None:
        """Hard-delete a loaded record; dependent rows go via FK cascades."""
        await db.delete(db_obj)
        await db.flush()

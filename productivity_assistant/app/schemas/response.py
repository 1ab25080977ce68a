"""
Response envelope schemas.
Every endpoint answers with {success, data?, message?}; list endpoints add
offset pagination metadata.
"""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, computed_field

T = TypeVar("T")


class PaginationMeta(BaseModel):
    total: int
    limit: int
    offset: int

    @computed_field  # type: ignore[misc]
    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


class ApiResponse(BaseModel, Generic[T]):
    """Uniform success envelope."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class PaginatedResponse(BaseModel, Generic[T]):
    """Success envelope for list endpoints."""

    success: bool = True
    data: list[T]
    pagination: PaginationMeta
    message: str | None = None

"""
Envelopes shared by several routers.
"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

ItemT = TypeVar("ItemT")


class ErrorResponse(BaseModel):
    """Body of every DomainError response."""

    detail: str
    code: Optional[str] = None
    request_id: Optional[str] = None


class SuccessResponse(BaseModel):
    message: str
    data: Optional[Any] = None


class PaginatedResponse(BaseModel, Generic[ItemT]):
    """One page of a list endpoint plus the size of the whole result."""

    items: List[ItemT]
    total: int = Field(ge=0)
    limit: int = 20
    offset: int = 0
    has_more: bool = False

    @classmethod
    def create(cls, items: List[ItemT], total: int, limit: int = 20, offset: int = 0):
        return cls(
            items=items,
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(items) < total,
        )


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    database: str = "connected"

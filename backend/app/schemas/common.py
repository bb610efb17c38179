"""Response envelopes shared by several routers."""

from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a listing plus the numbers a client needs to fetch the next."""

    items: list[T]
    total: int = Field(..., description="Rows matching the query across all pages")
    skip: int = Field(..., description="Offset of the first item")
    limit: int = Field(..., description="Page size requested")
    has_more: bool = Field(..., description="True when another page follows")

    @classmethod
    def page(cls, items: Sequence[T], total: int, skip: int, limit: int) -> "PaginatedResponse[T]":
        return cls(
            items=list(items),
            total=total,
            skip=skip,
            limit=limit,
            has_more=skip + len(items) < total,
        )


class MessageResponse(BaseModel):
    """Body of endpoints that only report what happened."""

    message: str

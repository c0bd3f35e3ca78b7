"""Response envelopes and paging shared by every router."""

from datetime import datetime
from math import ceil
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from ...core.utils import utc_now

T = TypeVar("T")


class BaseResponse(BaseModel, Generic[T]):
    """Envelope returned by every endpoint.

    Errors use the same shape, see RentLineException.to_payload.
    """

    success: bool = True
    message: str | None = None
    data: T | None = None
    error: Any | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class PaginationParams(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return self.page_size * (self.page - 1)


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    total_pages: int = 0

    @classmethod
    def from_items(cls, items: list[T], total: int, page: int, page_size: int):
        pages = ceil(total / page_size) if page_size else 0
        return cls(
            items=items, total=total, page=page, page_size=page_size, total_pages=pages
        )

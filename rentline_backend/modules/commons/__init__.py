"""Common schemas and utilities shared across modules."""

from typing import Annotated

from fastapi import Depends

from .schemas import (
    BaseResponse,
    PaginatedResponse,
    PaginationParams,
)

# Query-string pagination for list endpoints
Pagination = Annotated[PaginationParams, Depends()]

__all__ = [
    "BaseResponse",
    "PaginatedResponse",
    "PaginationParams",
    "Pagination",
]

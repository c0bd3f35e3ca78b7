"""Core infrastructure for RentLine backend."""

from .base_crud import BaseCRUD
from .database_types import UUID
from .exceptions import (
    AuthenticationError,
    BusinessLogicError,
    PermissionError,
    RentLineException,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError,
)

__all__ = [
    "BaseCRUD",
    "UUID",
    "RentLineException",
    "ResourceNotFoundError",
    "ResourceAlreadyExistsError",
    "ValidationError",
    "BusinessLogicError",
    "PermissionError",
    "AuthenticationError",
]

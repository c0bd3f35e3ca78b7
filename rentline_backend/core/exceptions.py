"""
RentLine error types.

Services raise these; the API layer turns them into the standard error
envelope with the class's ``status_code``.
"""

from typing import Any


class RentLineException(Exception):
    """Base class for every expected RentLine failure."""

    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        """Error envelope sent to API clients."""
        return {
            "success": False,
            "message": self.message,
            "error": self.details or self.message,
            "data": None,
        }


class ResourceNotFoundError(RentLineException):
    """A row the caller asked for does not exist."""

    status_code = 404

    def __init__(self, resource_type: str, identifier: Any = None):
        if identifier is None:
            message = f"{resource_type} not found"
        else:
            message = f"{resource_type} {identifier} not found"
        super().__init__(message, {"resource": resource_type, "id": identifier})
        self.resource_type = resource_type
        self.identifier = identifier


class ResourceAlreadyExistsError(RentLineException):
    """A unique value (email, unit number) is already taken."""

    status_code = 409

    def __init__(self, resource_type: str, identifier: Any):
        super().__init__(
            f"{resource_type} '{identifier}' already exists",
            {"resource": resource_type, "id": identifier},
        )
        self.resource_type = resource_type
        self.identifier = identifier


class ValidationError(RentLineException):
    """Input that passed schema checks but breaks a domain rule."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        if field:
            details = {"field": field, **(details or {})}
            message = f"{field}: {message}"
        super().__init__(message, details)
        self.field = field
        self.value = value


class BusinessLogicError(RentLineException):
    """The request conflicts with the current state (unit taken, not pending)."""

    status_code = 409


class PermissionError(RentLineException):
    """The row exists but is outside the caller's scope."""

    status_code = 403

    def __init__(self, action: str, resource_type: str):
        super().__init__(f"You are not allowed to {action} this {resource_type}")
        self.action = action
        self.resource_type = resource_type


class AuthenticationError(RentLineException):
    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)

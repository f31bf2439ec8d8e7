"""Domain exceptions for the application.

Every failure the service reports is an ``AppException`` carrying an
``ErrorKind``. Transport code decides what to do by looking at the kind,
so the exception classes stay free of HTTP concerns.
"""

from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any

from pydantic import ValidationError as PydanticValidationError


class ErrorKind(StrEnum):
    """Categories of failure surfaced to callers."""

    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    UNAUTHORIZED = "unauthorized"
    INTERNAL_FAILURE = "internal_failure"


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        kind: Category of the failure
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        details: Additional error details
    """

    kind: ErrorKind = ErrorKind.INTERNAL_FAILURE
    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("User not found", resource="user", resource_id="42")
    """

    kind = ErrorKind.NOT_FOUND
    message = "Resource not found"
    error_code = "not_found"

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data."""

    kind = ErrorKind.DUPLICATE
    message = "Resource conflict"
    error_code = "conflict"


class DuplicateUserError(ConflictError):
    """Raised when a username or email is already taken within a tenant.

    Example:
        raise DuplicateUserError("email")
    """

    error_code = "duplicate_user"

    def __init__(self, field: str, **kwargs: Any) -> None:
        self.field = field
        details = kwargs.pop("details", {})
        details["field"] = field
        super().__init__(
            message=f"{field.capitalize()} already exists",
            details=details,
            **kwargs,
        )


def field_errors(errors: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Flatten pydantic error entries into ``{field, message, type}`` dicts.

    Input values are never copied into the result, so credential fields
    cannot leak through validation messages.
    """
    flattened: list[dict[str, Any]] = []
    for error in errors:
        loc = error.get("loc", ())
        # Skip "body" prefix in field path
        field_parts = [str(part) for part in loc if part != "body"]
        flattened.append(
            {
                "field": ".".join(field_parts) if field_parts else "unknown",
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type"),
            }
        )
    return flattened


class ValidationError(AppException):
    """Raised when request data fails validation.

    Example:
        raise ValidationError(
            "Invalid input data",
            errors=[{"field": "email", "message": "Invalid email format"}]
        )
    """

    kind = ErrorKind.VALIDATION_FAILED
    message = "Validation error"
    error_code = "validation_error"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        self.errors = errors or []
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Build a domain validation error from a pydantic one."""
        return cls("Request validation failed", errors=field_errors(exc.errors()))


class UnauthorizedError(AppException):
    """Raised when the API key is missing or doesn't resolve to an active client.

    Example:
        raise UnauthorizedError("Invalid API Key")
    """

    kind = ErrorKind.UNAUTHORIZED
    message = "Authentication required"
    error_code = "unauthorized"


class InternalFailureError(AppException):
    """Raised when the store or the hashing library fails.

    The message is deliberately generic; the underlying exception is
    chained for the server log and never shown to clients.
    """

    kind = ErrorKind.INTERNAL_FAILURE
    message = "An unexpected error occurred"
    error_code = "internal_error"

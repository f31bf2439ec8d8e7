"""Error handling module with RFC 7807 Problem Details."""

from usermgmt.core.errors.exceptions import (
    AppException,
    ConflictError,
    DuplicateUserError,
    ErrorKind,
    InternalFailureError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from usermgmt.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
    status_for,
)


__all__ = [
    # Exceptions
    "AppException",
    "ConflictError",
    "DuplicateUserError",
    "ErrorKind",
    # Handlers
    "FieldError",
    "InternalFailureError",
    "NotFoundError",
    "ProblemDetail",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
    "status_for",
]

"""Core services and cross-cutting concerns."""

from usermgmt.core.database import Base, get_db
from usermgmt.core.errors import (
    AppException,
    DuplicateUserError,
    ErrorKind,
    InternalFailureError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    register_exception_handlers,
)


__all__ = [
    # Errors
    "AppException",
    # Database
    "Base",
    "DuplicateUserError",
    "ErrorKind",
    "InternalFailureError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
    "get_db",
    "register_exception_handlers",
]

"""RFC 7807 Problem Details exception handlers.

This module provides standardized error responses following the
RFC 7807 "Problem Details for HTTP APIs" specification.

See: https://tools.ietf.org/html/rfc7807
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from usermgmt.config import settings
from usermgmt.core.errors.exceptions import AppException, ErrorKind, field_errors


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


# HTTP status for each error kind
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.DUPLICATE: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class FieldError(BaseModel):
    """Represents a single field validation error."""

    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response schema.

    Attributes:
        type: URI reference identifying the problem type
        title: Short human-readable summary
        status: HTTP status code
        detail: Human-readable explanation specific to this occurrence
        instance: URI reference identifying this specific occurrence
        errors: List of field-level errors (for validation errors)
        trace_id: Request trace ID for debugging
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = None

    model_config = {"extra": "allow"}


def status_for(kind: ErrorKind) -> int:
    """Map an error kind to its HTTP status code."""
    return STATUS_BY_KIND.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def _get_trace_id(request: Request) -> str | None:
    """Extract trace ID from request state if available."""
    return getattr(request.state, "trace_id", None)


def _get_error_type_uri(error_code: str) -> str:
    """Generate a URI for the error type."""
    return f"{settings.api_docs_base_url}/errors/{error_code}"


def _internal_error_response(request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ProblemDetail(
            type=_get_error_type_uri("internal_error"),
            title="Internal Server Error",
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
            instance=str(request.url.path),
            trace_id=_get_trace_id(request),
        ).model_dump(exclude_none=True),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application-specific exceptions.

    Client errors are logged at info level; internal failures are logged
    with their traceback and answered with a generic body.
    """
    if exc.kind is ErrorKind.INTERNAL_FAILURE:
        logger.error(
            "internal_failure",
            error_code=exc.error_code,
            path=str(request.url.path),
            cause=type(exc.__cause__).__name__ if exc.__cause__ else None,
            exc_info=exc,
        )
        return _internal_error_response(request)

    status_code = status_for(exc.kind)
    logger.info(
        "app_exception",
        kind=str(exc.kind),
        error_code=exc.error_code,
        message=exc.message,
        status_code=status_code,
        path=str(request.url.path),
    )

    content: dict[str, Any] = ProblemDetail(
        type=_get_error_type_uri(exc.error_code),
        title=exc.error_code.replace("_", " ").title(),
        status=status_code,
        detail=exc.message,
        instance=str(request.url.path),
        trace_id=_get_trace_id(request),
    ).model_dump(exclude_none=True)

    # Add any additional details from the exception
    if exc.details:
        for key, value in exc.details.items():
            if key not in content:
                content[key] = value

    return JSONResponse(
        status_code=status_code,
        content=content,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Converts FastAPI/Pydantic validation errors to RFC 7807 format
    with detailed field-level error information.
    """
    errors = [FieldError(**error) for error in field_errors(exc.errors())]

    logger.info(
        "validation_error",
        path=str(request.url.path),
        error_count=len(errors),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ProblemDetail(
            type=_get_error_type_uri("validation_error"),
            title="Validation Error",
            status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Request validation failed",
            instance=str(request.url.path),
            errors=errors,
            trace_id=_get_trace_id(request),
        ).model_dump(exclude_none=True),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    Catches all unhandled exceptions and returns a generic 500 error.
    The actual error details are logged but not exposed to clients.
    """
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )
    return _internal_error_response(request)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Call this function during app initialization:

        app = FastAPI()
        register_exception_handlers(app)
    """
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)

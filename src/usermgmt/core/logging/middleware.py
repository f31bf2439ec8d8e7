"""Request logging middleware.

This module provides middleware for tagging every request with an id and
logging all HTTP requests and responses with structured logging via
structlog.
"""

import time
import uuid
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from usermgmt.core.constants import REQUEST_ID_HEADER


logger = structlog.get_logger()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and add request ID."""
        # Get request ID from header or generate new one
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        request.state.request_id = request_id
        request.state.trace_id = request_id  # Alias for error handler

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars(
                "request_id", "tenant_id", "client_name", "method_name"
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs all HTTP requests and responses.

    Logs include:
    - Request method, path, and client IP
    - Response status code
    - Request duration
    - Request ID (if set by RequestIdMiddleware)
    - Tenant ID and client name (if the API key was resolved)

    Request and response bodies are never logged.
    """

    def __init__(
        self,
        app: Any,
        exclude_paths: list[str] | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application
            exclude_paths: Paths to exclude from logging (e.g., health checks)
        """
        super().__init__(app)
        self.exclude_paths = exclude_paths or [
            "/health/live",
            "/health/ready",
            "/docs",
            "/redoc",
            "/openapi.json",
        ]

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and log details."""
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        log_data: dict[str, Any] = {
            "method": method,
            "path": path,
            "client_ip": get_client_ip(request),
        }
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_data["request_id"] = request_id

        logger.info("request_started", **log_data)

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                "request_failed",
                method=method,
                path=path,
                duration_ms=round(duration_ms, 2),
                error_type=type(exc).__name__,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        completion_data: dict[str, Any] = {
            "method": method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }
        if request_id:
            completion_data["request_id"] = request_id

        # Set by the API key dependency
        tenant_id = getattr(request.state, "tenant_id", None)
        client_name = getattr(request.state, "client_name", None)
        if tenant_id is not None:
            completion_data["tenant_id"] = tenant_id
        if client_name:
            completion_data["client_name"] = client_name

        if response.status_code >= 500:
            logger.error("request_completed", **completion_data)
        elif response.status_code >= 400:
            logger.warning("request_completed", **completion_data)
        else:
            logger.info("request_completed", **completion_data)

        return response


def get_client_ip(request: Request) -> str | None:
    """Extract the real client IP from a request.

    Handles X-Forwarded-For header for proxied requests.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs; the first is the original client
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return None

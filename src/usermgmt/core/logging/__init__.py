"""Logging module with structured logging and request tracking."""

from usermgmt.core.logging.middleware import (
    RequestIdMiddleware,
    RequestLoggingMiddleware,
    get_client_ip,
)
from usermgmt.core.logging.setup import add_host, configure_logging, redact_sensitive


__all__ = [
    "RequestIdMiddleware",
    "RequestLoggingMiddleware",
    "add_host",
    "configure_logging",
    "get_client_ip",
    "redact_sensitive",
]

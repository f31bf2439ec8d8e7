"""structlog configuration."""

import logging
import socket
from collections.abc import MutableMapping
from typing import Any

import structlog

from usermgmt.core.constants import REDACTED, SENSITIVE_LOG_KEYS


HOSTNAME = socket.gethostname()


def add_host(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Stamp the event with the name of the machine that wrote it."""
    event_dict.setdefault("host", HOSTNAME)
    return event_dict


def _redact(value: Any) -> Any:
    if isinstance(value, MutableMapping):
        return {
            key: REDACTED if key in SENSITIVE_LOG_KEYS else _redact(item)
            for key, item in value.items()
        }
    return value


def redact_sensitive(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credential material anywhere in the event, including nested dicts."""
    for key, value in list(event_dict.items()):
        if key in SENSITIVE_LOG_KEYS:
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _redact(value)
    return event_dict


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog for the process.

    Args:
        log_level: Minimum level name (e.g. "INFO", "DEBUG")
        json_logs: Render JSON lines instead of the developer console format
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_host,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_sensitive,
            (
                structlog.processors.JSONRenderer()
                if json_logs
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

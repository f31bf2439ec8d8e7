"""Unit tests for the fields every log line is stamped with."""

import json
import socket

import structlog

from usermgmt.core.logging import add_host, configure_logging


def test_add_host_stamps_machine_name():
    """Events get the machine name under ``host``."""
    result = add_host(None, "info", {"event": "user_created"})

    assert result["host"] == socket.gethostname()


def test_add_host_keeps_explicit_value():
    """An event that names its host keeps it."""
    assert add_host(None, "info", {"event": "x", "host": "db-1"})["host"] == "db-1"


def test_configured_pipeline_carries_host_and_handler(capsys):
    """Rendered lines include the host and the bound route handler name."""
    configure_logging("INFO", json_logs=True)
    structlog.contextvars.bind_contextvars(method_name="get_user", tenant_id=1)
    try:
        structlog.get_logger("enrichment-test").info("user_retrieved", user_id=3)
    finally:
        structlog.contextvars.clear_contextvars()
        configure_logging("INFO")

    line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert line["event"] == "user_retrieved"
    assert line["host"] == socket.gethostname()
    assert line["method_name"] == "get_user"
    assert line["tenant_id"] == 1

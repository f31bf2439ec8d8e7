"""Integration tests for health and info endpoints."""

import pytest
from httpx import AsyncClient

from usermgmt import __version__


pytestmark = pytest.mark.integration


async def test_liveness(client: AsyncClient):
    """Liveness needs no API key."""
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


async def test_readiness(client: AsyncClient):
    """Readiness reports the database check."""
    response = await client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "checks": {"database": "ok"}}


async def test_info(client: AsyncClient):
    """Info reports the app name and version."""
    response = await client.get("/info")

    assert response.status_code == 200
    body = response.json()
    assert body["version"] == __version__
    assert "app" in body

"""Health endpoint tests."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from inventorypro.health.router import check_redis, check_scheduler


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """GET /health returns 200 with healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_readiness_without_redis(client: AsyncClient) -> None:
    """Redis is skipped when unconfigured, and the scheduler is off in tests."""
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok"}


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    """GET /version returns version, environment and scheduler mode."""
    response = await client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "0.1.0"
    assert "environment" in data
    assert data["scheduler_mode"] == "off"


@pytest.mark.asyncio
async def test_redis_check_reports_errors() -> None:
    client = MagicMock()
    client.ping = AsyncMock(side_effect=ConnectionError("refused"))
    assert await check_redis(client) == "error: refused"


def test_scheduler_check() -> None:
    assert check_scheduler(None) == "error: not running"
    assert check_scheduler(SimpleNamespace(running=False)) == "error: not running"
    assert check_scheduler(SimpleNamespace(running=True)) == "ok"

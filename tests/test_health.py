"""Probe endpoints used by the deployment platform."""

from unittest.mock import AsyncMock, MagicMock

from httpx import AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError


async def test_liveness(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_ready_without_redis(client: AsyncClient) -> None:
    response = await client.get("/ready")
    assert response.json() == {"status": "ready", "checks": {"database": "ok", "redis": "disabled"}}


async def test_ready_degraded_when_redis_breaks(client: AsyncClient, monkeypatch) -> None:
    broken = MagicMock()
    broken.ping = AsyncMock(side_effect=RedisConnectionError("connection refused"))
    monkeypatch.setattr("loomero.redis_client._client", broken)

    data = (await client.get("/ready")).json()
    assert data["status"] == "degraded"
    assert data["checks"]["database"] == "ok"
    assert data["checks"]["redis"].startswith("error:")


async def test_version_reports_release(client: AsyncClient) -> None:
    data = (await client.get("/version")).json()
    assert data["version"] == "0.1.0"
    assert data["environment"] == "development"

"""Tests for health endpoints."""

from httpx import AsyncClient

import stockledger.api.routes.health as health_routes


async def test_root_health_check(async_client: AsyncClient):
    response = await async_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


async def test_api_health_check(async_client: AsyncClient):
    response = await async_client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["uptime_seconds"] >= 0


async def test_db_health_reports_schema_version(async_client: AsyncClient, pool, monkeypatch):
    async def fake_get_pool():
        return pool

    monkeypatch.setattr(health_routes, "get_pool", fake_get_pool)

    response = await async_client.get("/api/health/db")

    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"]["status"] == "up"
    assert data["schema_version"] == "001"


async def test_db_health_reports_down(async_client: AsyncClient, monkeypatch):
    async def broken_pool():
        raise OSError("unable to open database file")

    monkeypatch.setattr(health_routes, "get_pool", broken_pool)

    response = await async_client.get("/api/health/db")

    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["database"]["status"] == "down"
    assert "unable to open" in data["database"]["detail"]

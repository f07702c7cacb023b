"""API test fixtures: an async client bound to a temporary ledger."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from stockledger.api.dependencies import get_ledger_store
from stockledger.api.main import app


@pytest_asyncio.fixture
async def async_client(store) -> AsyncGenerator[AsyncClient, None]:
    """Async client whose routes use the temporary store."""
    app.dependency_overrides[get_ledger_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_ledger_store, None)


@pytest_asyncio.fixture
async def material_id(async_client: AsyncClient) -> str:
    response = await async_client.post(
        "/api/materials",
        json={
            "name": "Tomatoes",
            "category": "vegetables",
            "unit": "kg",
            "unit_cost": 3.0,
            "min_stock_level": 5,
            "max_stock_level": 100,
        },
    )
    return response.json()["data"]["id"]


@pytest_asyncio.fixture
async def section_id(async_client: AsyncClient) -> str:
    response = await async_client.post("/api/sections", json={"name": "Line", "type": "KITCHEN"})
    return response.json()["data"]["id"]


@pytest_asyncio.fixture
async def entry_id(async_client: AsyncClient, material_id: str) -> str:
    response = await async_client.post(
        "/api/stock/entries",
        json={
            "raw_material_id": material_id,
            "quantity": 40,
            "unit_cost": 3.0,
            "received_by": "alice",
            "supplier": "Green Farm",
        },
    )
    return response.json()["data"]["id"]

"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from stockledger.core.entities import (
    MaterialCategory,
    MeasurementUnit,
    RawMaterial,
    Section,
    SectionType,
)
from stockledger.infrastructure.storage.sqlite import ConnectionPool, SQLiteLedgerStore
from stockledger.infrastructure.storage.sqlite.migrations import run_migrations

BASE_TIME = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Temporary database path."""
    return tmp_path / "ledger.db"


@pytest.fixture
async def pool(db_path: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Connection pool on a freshly migrated database."""
    await run_migrations(db_path, backup=False)
    pool = ConnectionPool(db_path, pool_size=2)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
async def store(pool: ConnectionPool) -> SQLiteLedgerStore:
    return SQLiteLedgerStore(pool)


@pytest.fixture
def received_at():
    """Receipt timestamps spaced a day apart, oldest first."""

    def _at(day: int) -> datetime:
        return BASE_TIME + timedelta(days=day)

    return _at


@pytest.fixture
def flour() -> RawMaterial:
    return RawMaterial(
        name="Flour",
        category=MaterialCategory.GRAINS,
        unit=MeasurementUnit.KG,
        unit_cost=2.0,
        supplier="Mill Co",
        min_stock_level=10,
        max_stock_level=200,
    )


@pytest.fixture
def buns() -> RawMaterial:
    """Burger buns bought in packs of 12."""
    return RawMaterial(
        name="Burger Buns",
        category=MaterialCategory.GRAINS,
        unit=MeasurementUnit.PACKS,
        unit_cost=24.0,
        min_stock_level=24,
        max_stock_level=240,
        units_per_pack=12,
        base_unit=MeasurementUnit.PIECES,
    )


@pytest.fixture
async def saved_flour(store: SQLiteLedgerStore, flour: RawMaterial) -> RawMaterial:
    return await store.create_material(flour)


@pytest.fixture
async def saved_buns(store: SQLiteLedgerStore, buns: RawMaterial) -> RawMaterial:
    return await store.create_material(buns)


@pytest.fixture
async def kitchen(store: SQLiteLedgerStore) -> Section:
    return await store.create_section(Section(name="Main Kitchen", type=SectionType.KITCHEN))


@pytest.fixture
async def bar(store: SQLiteLedgerStore) -> Section:
    return await store.create_section(Section(name="Bar", type=SectionType.BAR))


@pytest.fixture
def mock_store() -> AsyncMock:
    """AsyncMock ledger store whose transaction() yields the mock itself."""
    store = AsyncMock()

    @asynccontextmanager
    async def transaction():
        yield store

    store.transaction = transaction
    store.list_entries.return_value = []
    store.list_movements.return_value = []
    store.list_materials.return_value = []
    store.list_section_inventory.return_value = []
    return store

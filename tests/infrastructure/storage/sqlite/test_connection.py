"""Unit tests for SQLite connection pool."""

import asyncio
from pathlib import Path

import aiosqlite
import pytest

from stockledger.infrastructure.storage.sqlite.connection import ConnectionPool


class TestConnectionPoolInit:
    """Tests for ConnectionPool initialization."""

    def test_defaults(self, db_path: Path):
        pool = ConnectionPool(db_path)
        assert pool.db_path == db_path
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool._initialized is False
        assert pool._connections == []


class TestConnectionPoolLifecycle:
    async def test_initialize_creates_directory(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "ledger.db"
        pool = ConnectionPool(db_path, pool_size=1)

        await pool.initialize()
        assert db_path.parent.exists()
        await pool.close()

    async def test_initialize_is_idempotent(self, db_path: Path):
        pool = ConnectionPool(db_path, pool_size=2)
        await pool.initialize()
        await pool.initialize()

        assert len(pool._connections) == 2
        assert pool._pool.qsize() == 2
        await pool.close()

    async def test_acquire_lazily_initializes(self, db_path: Path):
        pool = ConnectionPool(db_path, pool_size=1)
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT 1")
            assert (await cursor.fetchone())[0] == 1
        assert pool._initialized is True
        await pool.close()

    async def test_close_allows_reinitialize(self, db_path: Path):
        pool = ConnectionPool(db_path, pool_size=1)
        await pool.initialize()
        await pool.close()
        assert pool._initialized is False

        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")
        await pool.close()


class TestTransaction:
    @pytest.fixture
    async def pool_with_table(self, db_path: Path):
        pool = ConnectionPool(db_path, pool_size=2)
        async with pool.acquire() as conn:
            await conn.execute("CREATE TABLE t (v INTEGER)")
        yield pool
        await pool.close()

    async def count(self, pool: ConnectionPool) -> int:
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            return (await cursor.fetchone())[0]

    async def test_commits_on_success(self, pool_with_table):
        async with pool_with_table.transaction() as conn:
            await conn.execute("INSERT INTO t VALUES (1)")
            await conn.execute("INSERT INTO t VALUES (2)")

        assert await self.count(pool_with_table) == 2

    async def test_rolls_back_on_error(self, pool_with_table):
        with pytest.raises(RuntimeError):
            async with pool_with_table.transaction() as conn:
                await conn.execute("INSERT INTO t VALUES (1)")
                raise RuntimeError("boom")

        assert await self.count(pool_with_table) == 0

    async def test_rolls_back_on_sql_error(self, pool_with_table):
        with pytest.raises(aiosqlite.Error):
            async with pool_with_table.transaction() as conn:
                await conn.execute("INSERT INTO t VALUES (1)")
                await conn.execute("INSERT INTO missing VALUES (1)")

        assert await self.count(pool_with_table) == 0

    async def test_writers_are_serialised(self, pool_with_table):
        order: list[str] = []

        async def writer(name: str):
            async with pool_with_table.transaction() as conn:
                order.append(f"{name}-start")
                await conn.execute("INSERT INTO t VALUES (1)")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(writer("a"), writer("b"))

        assert order in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )
        assert await self.count(pool_with_table) == 2

"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from stockledger.infrastructure.storage.sqlite.migrations import migrator
from stockledger.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    backup_guard,
    create_backup,
    discover_migrations,
    get_applied_migrations,
    get_current_version,
    get_migration_status,
    restore_backup,
    run_migrations,
    verify_schema_integrity,
)

TRACKING_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT NOT NULL,
    execution_time_ms INTEGER
);
CREATE TABLE notes (body TEXT);
"""


@pytest.fixture
def scratch_migrations(tmp_path: Path, monkeypatch) -> Path:
    """An empty migrations directory in place of the shipped one."""
    directory = tmp_path / "migrations"
    directory.mkdir()
    monkeypatch.setattr(migrator, "MIGRATIONS_DIR", directory)
    return directory


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        migration_file = tmp_path / "v002_add_locations.sql"
        migration_file.write_text("SELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "002"
        assert info.name == "add_locations"
        assert len(info.checksum) == 16

    def test_from_file_invalid_filename_raises(self, tmp_path: Path):
        bad = tmp_path / "initial.sql"
        bad.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(bad)


class TestDiscoverMigrations:
    def test_ships_initial_schema(self):
        migrations = discover_migrations()
        assert migrations[0].version == "001"

    def test_sorted_and_skips_invalid(self, scratch_migrations: Path):
        (scratch_migrations / "v002_second.sql").write_text("SELECT 2;")
        (scratch_migrations / "v001_first.sql").write_text("SELECT 1;")
        (scratch_migrations / "vX_broken.sql").write_text("SELECT 3;")

        assert [m.version for m in discover_migrations()] == ["001", "002"]


class TestRunMigrations:
    async def test_creates_schema(self, db_path: Path):
        results = await run_migrations(db_path, backup=False)

        assert results and all(r.success for r in results)
        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
            assert set(REQUIRED_TABLES) <= tables
            assert await get_current_version(conn) == "001"

    async def test_second_run_applies_nothing(self, db_path: Path):
        await run_migrations(db_path, backup=False)
        assert await run_migrations(db_path, backup=False) == []

    async def test_backup_removed_after_success(self, db_path: Path):
        await run_migrations(db_path, backup=False)
        await run_migrations(db_path)

        assert list(db_path.parent.glob("*.backup_*")) == []

    async def test_changed_checksum_stops_run(self, db_path: Path):
        await run_migrations(db_path, backup=False)
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("UPDATE schema_migrations SET checksum = 'tampered'")
            await conn.commit()

        assert await run_migrations(db_path, backup=False) == []
        async with aiosqlite.connect(db_path) as conn:
            assert await get_applied_migrations(conn) == {"001": "tampered"}

    async def test_failed_migration_restores_backup(self, db_path: Path, scratch_migrations: Path):
        first = scratch_migrations / "v001_tracking.sql"
        first.write_text(TRACKING_TABLE)
        await run_migrations(db_path, backup=False)

        (scratch_migrations / "v002_broken.sql").write_text("CREATE TABLE extra (id TEXT); SELEC nonsense;")
        results = await run_migrations(db_path)

        assert [(r.version, r.success) for r in results] == [("002", False)]
        assert results[0].error
        async with aiosqlite.connect(db_path) as conn:
            assert await get_applied_migrations(conn) == {"001": MigrationInfo.from_file(first).checksum}
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE name = 'extra'")
            assert await cursor.fetchone() is None
        assert list(db_path.parent.glob("*.backup_*"))


class TestBackups:
    def test_backup_and_restore(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        db_path.write_bytes(b"original")

        backup = create_backup(db_path)
        db_path.write_bytes(b"changed")
        restore_backup(db_path, backup)

        assert backup.exists()
        assert db_path.read_bytes() == b"original"

    def test_guard_restores_on_error(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        db_path.write_bytes(b"original")

        with pytest.raises(OSError), backup_guard(db_path):
            db_path.write_bytes(b"half written")
            raise OSError("disk full")

        assert db_path.read_bytes() == b"original"

    def test_guard_skips_missing_file(self, tmp_path: Path):
        db_path = tmp_path / "fresh.db"

        with backup_guard(db_path) as results:
            assert results == []

        assert list(tmp_path.iterdir()) == []


class TestStatusAndIntegrity:
    async def test_status_without_database(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "absent.db")
        assert status["exists"] is False
        assert status["current_version"] is None
        assert "001" in status["pending_migrations"]

    async def test_status_after_migration(self, db_path: Path):
        await run_migrations(db_path, backup=False)
        status = await get_migration_status(db_path)
        assert status["current_version"] == "001"
        assert status["pending_migrations"] == []

    async def test_integrity_passes_on_clean_ledger(self, db_path: Path):
        await run_migrations(db_path, backup=False)

        checks = {c.name: c for c in await verify_schema_integrity(db_path)}

        assert checks["required_tables"].passed
        assert checks["negative_stock"].passed
        assert checks["integrity"].passed
        assert checks["foreign_keys"].details == {"violations": 0}

    async def test_negative_stock_detected(self, db_path: Path):
        await run_migrations(db_path, backup=False)
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute(
                "INSERT INTO raw_materials (id, name, unit, unit_cost, max_stock_level, created_at, updated_at) "
                "VALUES ('m1', 'Flour', 'kg', 2, 100, 'now', 'now')"
            )
            await conn.execute(
                "INSERT INTO stock_entries (id, raw_material_id, quantity, unit_cost, total_cost, "
                "received_date, received_by, created_at, updated_at) "
                "VALUES ('e1', 'm1', 5, 2, 10, 'now', 'x', 'now', 'now')"
            )
            await conn.execute(
                "INSERT INTO stock_movements (id, stock_entry_id, type, quantity, reason, performed_by, created_at) "
                "VALUES ('s1', 'e1', 'out', 8, 'x', 'x', 'now')"
            )
            await conn.commit()

        checks = {c.name: c for c in await verify_schema_integrity(db_path)}

        assert not checks["negative_stock"].passed
        assert checks["negative_stock"].details == {"materials": ["Flour"]}


class TestCommandLine:
    def test_migrate_then_verify(self, db_path: Path, monkeypatch, capsys):
        monkeypatch.setattr("sys.argv", ["stockledger-migrate", "--db-path", str(db_path), "--no-backup"])
        assert migrator.main() == 0

        monkeypatch.setattr("sys.argv", ["stockledger-migrate", "--db-path", str(db_path), "--verify"])
        assert migrator.main() == 0

        output = capsys.readouterr().out
        assert "[SUCCESS] v001" in output
        assert "[PASS] negative_stock" in output

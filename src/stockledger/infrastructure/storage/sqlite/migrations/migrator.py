"""
Versioned schema migrations for the ledger database.

Migration files are named ``vNNN_name.sql`` and live next to this module.
Each applied file is recorded in ``schema_migrations`` with a checksum; a
file that changes after being applied halts the run. An existing database
file is copied aside before migrating and put back if the run fails.
"""

import argparse
import asyncio
import hashlib
import re
import shutil
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from stockledger.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

MIGRATION_NAME = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = (
    "raw_materials",
    "stock_entries",
    "stock_movements",
    "sections",
    "section_inventory",
    "section_consumption",
    "schema_migrations",
)

# Materials whose consuming movements exceed everything received.
NEGATIVE_STOCK_SQL = """
    SELECT m.name FROM raw_materials m
    WHERE (
        SELECT COALESCE(SUM(e.quantity), 0) FROM stock_entries e
        WHERE e.raw_material_id = m.id
    ) < (
        SELECT COALESCE(SUM(sm.quantity), 0) FROM stock_movements sm
        JOIN stock_entries e ON e.id = sm.stock_entry_id
        WHERE e.raw_material_id = m.id AND sm.type IN ('out', 'expired', 'damaged')
    )
    ORDER BY m.name
"""


class MigrationError(Exception):
    """A migration could not be applied."""


@dataclass(frozen=True)
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_NAME.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=checksum)


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class IntegrityCheck:
    name: str
    passed: bool
    details: dict[str, Any] = field(default_factory=dict)


def discover_migrations() -> list[MigrationInfo]:
    """Migration files in version order; misnamed files are logged and skipped."""
    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to their recorded checksums; empty on a fresh file."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations ORDER BY version")
    except aiosqlite.OperationalError:
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


async def apply_migration(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    """
    Run one migration script and record it.

    Foreign keys are checked before the commit; a violation rolls the
    migration back and is reported as a failure.
    """
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.monotonic()

    def elapsed_ms() -> int:
        return int((time.monotonic() - started) * 1000)

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = await cursor.fetchall()
        if violations:
            raise MigrationError(f"{len(violations)} foreign key violations")
        await conn.execute(
            "INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except (aiosqlite.Error, MigrationError) as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, name=migration.name, error=str(e))
        return MigrationResult(migration.version, migration.name, False, elapsed_ms(), str(e))

    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed_ms())
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


def create_backup(db_path: Path) -> Path:
    """Copy the database file next to itself with a UTC timestamp suffix."""
    stamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


@contextmanager
def backup_guard(db_path: Path, enabled: bool = True) -> Iterator[list[MigrationResult]]:
    """
    Keep a copy of an existing database while migrations run.

    The caller appends results to the yielded list. On an exception, or if
    any result failed, the copy is restored; otherwise it is removed.
    """
    results: list[MigrationResult] = []
    backup_path = create_backup(db_path) if enabled and db_path.exists() else None
    try:
        yield results
    except (aiosqlite.Error, OSError) as e:
        logger.error("database_initialization_failed", db_path=str(db_path), error=str(e))
        if backup_path is not None:
            restore_backup(db_path, backup_path)
        raise
    if backup_path is None:
        return
    if all(r.success for r in results):
        backup_path.unlink()
    else:
        restore_backup(db_path, backup_path)


async def run_migrations(db_path: Path | None = None, backup: bool = True) -> list[MigrationResult]:
    """
    Bring the database up to the latest schema version.

    Returns the results of the migrations attempted in this run, which is
    empty when the schema is already current. Stops at the first failure or
    at an applied migration whose file has changed since.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    migrations = discover_migrations()
    if not migrations:
        logger.warning("no_migrations_found", directory=str(MIGRATIONS_DIR))
        return []

    with backup_guard(db_path, enabled=backup) as results:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            applied = await get_applied_migrations(conn)

            for migration in migrations:
                recorded = applied.get(migration.version)
                if recorded is not None:
                    if recorded != migration.checksum:
                        logger.error(
                            "migration_checksum_changed",
                            version=migration.version,
                            applied=recorded,
                            current=migration.checksum,
                        )
                        break
                    continue

                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break

    return results


async def get_migration_status(db_path: Path | None = None) -> dict[str, Any]:
    db_path = db_path or get_settings().storage.db_path
    discovered = [m.version for m in discover_migrations()]

    applied: list[str] = []
    if db_path.exists():
        async with aiosqlite.connect(db_path) as conn:
            applied = list(await get_applied_migrations(conn))

    return {
        "exists": db_path.exists(),
        "current_version": max(applied) if applied else None,
        "applied_migrations": applied,
        "pending_migrations": [v for v in discovered if v not in applied],
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[IntegrityCheck]:
    """SQLite integrity, foreign keys, required tables and no material below zero stock."""
    db_path = db_path or get_settings().storage.db_path
    checks: list[IntegrityCheck] = []

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA integrity_check")
        (result,) = await cursor.fetchone()
        checks.append(IntegrityCheck("integrity", result == "ok", {"result": result}))

        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = len(await cursor.fetchall())
        checks.append(IntegrityCheck("foreign_keys", violations == 0, {"violations": violations}))

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]
        checks.append(IntegrityCheck("required_tables", not missing, {"missing": missing}))

        if not missing:
            cursor = await conn.execute(NEGATIVE_STOCK_SQL)
            negative = [row[0] for row in await cursor.fetchall()]
            checks.append(IntegrityCheck("negative_stock", not negative, {"materials": negative}))

    return checks


def _print_status(status: dict[str, Any]) -> None:
    print(f"Database exists: {status['exists']}")
    print(f"Current version: {status['current_version'] or 'N/A'}")
    print(f"Applied migrations: {status['applied_migrations']}")
    print(f"Pending migrations: {status['pending_migrations']}")


def _print_checks(checks: list[IntegrityCheck]) -> bool:
    for check in checks:
        print(f"[{'PASS' if check.passed else 'FAIL'}] {check.name}")
        if not check.passed:
            for key, value in check.details.items():
                print(f"       {key}: {value}")
    return all(c.passed for c in checks)


def _print_results(results: list[MigrationResult]) -> bool:
    if not results:
        print("Database is up to date")
    for result in results:
        print(f"[{'SUCCESS' if result.success else 'FAILED'}] v{result.version}: {result.name} "
              f"({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    return all(r.success for r in results)


def main() -> int:
    """Entry point for ``stockledger-migrate``."""
    parser = argparse.ArgumentParser(description="Stock ledger database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show applied and pending migrations")
    mode.add_argument("--verify", action="store_true", help="Check schema and ledger integrity")
    mode.add_argument("--backup", action="store_true", help="Only write a backup copy of the database")
    parser.add_argument("--no-backup", action="store_true", help="Do not back up before migrating")
    parser.add_argument("--log-level", default="WARNING", help="Log level for migration events")
    args = parser.parse_args()

    configure_logging(args.log_level)
    db_path = args.db_path or get_settings().storage.db_path

    if args.status:
        _print_status(asyncio.run(get_migration_status(db_path)))
        return 0
    if args.verify:
        return 0 if _print_checks(asyncio.run(verify_schema_integrity(db_path))) else 1
    if args.backup:
        print(f"Backup written to {create_backup(db_path)}")
        return 0
    return 0 if _print_results(asyncio.run(run_migrations(db_path, backup=not args.no_backup))) else 1


if __name__ == "__main__":
    raise SystemExit(main())

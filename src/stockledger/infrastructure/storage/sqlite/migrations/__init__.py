"""Database migrations module."""

from stockledger.infrastructure.storage.sqlite.migrations.migrator import (
    IntegrityCheck,
    MigrationInfo,
    MigrationResult,
    backup_guard,
    create_backup,
    discover_migrations,
    get_current_version,
    get_migration_status,
    restore_backup,
    run_migrations,
    verify_schema_integrity,
)

__all__ = [
    "IntegrityCheck",
    "MigrationInfo",
    "MigrationResult",
    "backup_guard",
    "create_backup",
    "discover_migrations",
    "get_current_version",
    "get_migration_status",
    "restore_backup",
    "run_migrations",
    "verify_schema_integrity",
]

"""Database migrations module."""

from stockcore.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    MigrationResult,
    discover_migrations,
    initialize_database,
    run_migrations,
    verify_ledger,
)

__all__ = [
    "REQUIRED_TABLES",
    "MigrationInfo",
    "MigrationResult",
    "discover_migrations",
    "initialize_database",
    "run_migrations",
    "verify_ledger",
]

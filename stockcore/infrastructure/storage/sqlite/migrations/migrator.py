"""
Versioned schema migrations and ledger consistency checks.

Migration files are named ``v<NNN>_<name>.sql`` and applied in version
order; each applied file is recorded in ``schema_migrations`` with its
checksum so an edited migration is refused instead of silently re-run.
"""

import asyncio
import hashlib
import re
import time
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from stockcore.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

REQUIRED_TABLES = [
    "locations",
    "categories",
    "items",
    "stock_balances",
    "stock_movements",
    "stock_transfers",
    "stock_transfer_lines",
    "inventory_counts",
    "inventory_count_lines",
    "sales",
    "sale_lines",
    "purchase_orders",
    "purchase_order_lines",
    "orders",
    "order_lines",
    "deliveries",
    "delivery_lines",
    "delivery_events",
    "schema_migrations",
]

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")


@dataclass
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest)


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations() -> list[MigrationInfo]:
    """Bundled migration files, oldest first."""
    found = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return found


async def _applied_checksums(conn: aiosqlite.Connection) -> dict[str, str]:
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        # Fresh database, v001 creates the table
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.monotonic()

    def elapsed_ms() -> int:
        return int((time.monotonic() - started) * 1000)

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        cursor = await conn.execute("PRAGMA foreign_key_check")
        if await cursor.fetchall():
            raise aiosqlite.IntegrityError("foreign key violations after migration")
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(migration.version, migration.name, False, elapsed_ms(), str(e))

    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed_ms())
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


async def initialize_database(db_path: Path | None = None) -> list[MigrationResult]:
    """
    Apply every pending migration.

    Stops at the first failure, or at an applied migration whose file has
    changed since.

    Returns:
        Results for the migrations attempted in this run
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        applied = await _applied_checksums(conn)

        for migration in discover_migrations():
            if migration.version in applied:
                if applied[migration.version] != migration.checksum:
                    logger.error("migration_checksum_changed", version=migration.version)
                    break
                continue
            result = await _apply(conn, migration)
            results.append(result)
            if not result.success:
                break

    return results


run_migrations = initialize_database


async def verify_ledger(db_path: Path | None = None) -> list[dict]:
    """
    Check the stored ledger against its invariants.

    Covers SQLite integrity, the expected tables, non-negative balances and
    every balance equalling the sum of its movements.
    """
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]

        cursor = await conn.execute("SELECT COUNT(*) FROM stock_balances WHERE quantity < 0")
        negative = (await cursor.fetchone())[0]

        cursor = await conn.execute(
            """
            SELECT COUNT(*) FROM stock_balances b
            WHERE b.quantity <> COALESCE((
                SELECT SUM(m.qty_delta) FROM stock_movements m
                WHERE m.location_id = b.location_id AND m.item_id = b.item_id
            ), 0)
            """
        )
        drifted = (await cursor.fetchone())[0]

    def outcome(ok: bool) -> str:
        return "PASS" if ok else "FAIL"

    return [
        {"check": "integrity", "status": outcome(integrity == "ok"), "result": integrity},
        {"check": "required_tables", "status": outcome(not missing), "missing": missing},
        {"check": "non_negative_balances", "status": outcome(negative == 0), "violations": negative},
        {"check": "ledger_matches_balances", "status": outcome(drifted == 0), "violations": drifted},
    ]


def main() -> None:
    """``stockcore-migrate`` entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Apply stock engine migrations")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument(
        "--verify", action="store_true", help="Check ledger invariants instead of migrating"
    )
    args = parser.parse_args()

    async def run() -> int:
        if args.verify:
            checks = await verify_ledger(args.db_path)
            for check in checks:
                extra = {k: v for k, v in check.items() if k not in ("check", "status")}
                print(f"[{check['status']}] {check['check']} {extra}")
            return 0 if all(c["status"] == "PASS" for c in checks) else 1

        results = await initialize_database(args.db_path)
        for result in results:
            label = "OK" if result.success else "FAILED"
            print(f"[{label}] v{result.version} {result.name} ({result.execution_time_ms}ms)")
            if result.error:
                print(f"    {result.error}")
        return 0 if all(r.success for r in results) else 1

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()

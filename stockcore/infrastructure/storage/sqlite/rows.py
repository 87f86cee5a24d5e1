"""Column conversion helpers shared by the SQLite stores."""

from datetime import UTC, datetime

import aiosqlite


def to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def parse_datetime(value: str | None) -> datetime | None:
    """Parse a stored ISO timestamp; naive values are taken as UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_unique_violation(error: aiosqlite.IntegrityError, column: str) -> bool:
    """True when an IntegrityError was raised by a UNIQUE constraint on ``column``."""
    message = str(error)
    return "UNIQUE constraint failed" in message and column in message


class SQLiteStore:
    """Base for stores bound to one connection of a unit of work."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def _fetchone(self, sql: str, params: tuple = ()) -> aiosqlite.Row | None:
        cursor = await self._conn.execute(sql, params)
        return await cursor.fetchone()

    async def _fetchall(self, sql: str, params: tuple = ()) -> list[aiosqlite.Row]:
        cursor = await self._conn.execute(sql, params)
        return list(await cursor.fetchall())

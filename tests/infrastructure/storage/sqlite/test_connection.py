"""Unit tests for SQLite connection pool."""

from pathlib import Path

import aiosqlite
import pytest

from stockcore.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)


class TestConnectionPoolInit:
    """Tests for ConnectionPool initialization."""

    def test_defaults(self, tmp_path: Path):
        """Default pool size is 5 and busy timeout 30000ms."""
        pool = ConnectionPool(tmp_path / "t.db")
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool.initialized is False


class TestConnectionPoolInitialize:
    """Tests for ConnectionPool.initialize()."""

    async def test_creates_parent_directory(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "nested" / "t.db", pool_size=1)
        await pool.initialize()
        try:
            assert (tmp_path / "nested").is_dir()
            assert pool.initialized
        finally:
            await pool.close()

    async def test_connection_pragmas(self, tmp_path: Path):
        """Connections run in WAL with foreign keys on and autocommit."""
        pool = ConnectionPool(tmp_path / "t.db", pool_size=1, busy_timeout=1234)
        try:
            async with pool.acquire() as conn:
                cursor = await conn.execute("PRAGMA journal_mode")
                assert (await cursor.fetchone())[0] == "wal"
                cursor = await conn.execute("PRAGMA foreign_keys")
                assert (await cursor.fetchone())[0] == 1
                cursor = await conn.execute("PRAGMA busy_timeout")
                assert (await cursor.fetchone())[0] == 1234
                assert conn.isolation_level is None
        finally:
            await pool.close()

    async def test_close_resets_pool(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "t.db", pool_size=2)
        await pool.initialize()
        await pool.close()
        assert pool.initialized is False
        assert pool._connections == []


class TestTransaction:
    """Tests for ConnectionPool.transaction()."""

    @pytest.fixture
    async def pool(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "t.db", pool_size=1)
        async with pool.acquire() as conn:
            await conn.execute("CREATE TABLE t (v INTEGER)")
        yield pool
        await pool.close()

    async def _count(self, pool: ConnectionPool) -> int:
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            return (await cursor.fetchone())[0]

    async def test_commits_on_success(self, pool):
        async with pool.transaction() as conn:
            await conn.execute("INSERT INTO t VALUES (1)")
        assert await self._count(pool) == 1

    async def test_rolls_back_on_exception(self, pool):
        with pytest.raises(RuntimeError):
            async with pool.transaction() as conn:
                await conn.execute("INSERT INTO t VALUES (1)")
                raise RuntimeError("abort")
        assert await self._count(pool) == 0

    async def test_connection_returned_after_error(self, pool):
        """A pool of one stays usable after a failed transaction."""
        with pytest.raises(aiosqlite.OperationalError):
            async with pool.transaction() as conn:
                await conn.execute("SELECT * FROM missing_table")
        async with pool.transaction() as conn:
            await conn.execute("INSERT INTO t VALUES (2)")
        assert await self._count(pool) == 1


class TestGlobalPool:
    """Tests for the module-level pool helpers."""

    async def test_get_pool_is_singleton(self):
        try:
            first = await get_pool()
            second = await get_pool()
            assert first is second
            assert first.initialized
        finally:
            await close_pool()

    async def test_get_connection_and_transaction(self):
        try:
            async with get_connection() as conn:
                cursor = await conn.execute("SELECT 1")
                assert (await cursor.fetchone())[0] == 1
            async with get_transaction() as conn:
                await conn.execute("CREATE TABLE IF NOT EXISTS g (v INTEGER)")
        finally:
            await close_pool()

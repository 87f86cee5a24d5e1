"""Tests for SQLiteUnitOfWork atomicity and error mapping."""

import asyncio
from unittest.mock import patch

import aiosqlite
import pytest

from stockcore.core.entities import MovementKind, ReferenceKind
from stockcore.core.exceptions import DatabaseError, InsufficientQuantityError
from stockcore.core.services import MovementLedger
from stockcore.infrastructure.storage.sqlite import SQLiteUnitOfWork


class TestCommitAndRollback:
    async def test_changes_commit_on_exit(self, uow_factory, transit, catalog, balance_of):
        async with uow_factory() as uow:
            await MovementLedger(uow, transit).apply_movement(
                MovementKind.IN, catalog.depot.id, catalog.bolt.id, 5, ReferenceKind.MANUAL
            )
        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 5

    async def test_exception_rolls_back_every_store(self, uow_factory, transit, catalog, balance_of):
        """Balance and movement written before the failure are both discarded."""
        with pytest.raises(RuntimeError):
            async with uow_factory() as uow:
                await MovementLedger(uow, transit).apply_movement(
                    MovementKind.IN, catalog.depot.id, catalog.bolt.id, 5, ReferenceKind.MANUAL
                )
                raise RuntimeError("abort")

        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 0
        async with uow_factory() as uow:
            assert await uow.stock.list_movements(catalog.depot.id) == []

    async def test_domain_error_propagates_unchanged(self, uow_factory, transit, catalog, stock_in, balance_of):
        await stock_in(catalog.depot.id, catalog.bolt.id, 3)
        with pytest.raises(InsufficientQuantityError):
            async with uow_factory() as uow:
                ledger = MovementLedger(uow, transit)
                await ledger.apply_movement(
                    MovementKind.IN, catalog.depot.id, catalog.nut.id, 2, ReferenceKind.MANUAL
                )
                await ledger.apply_movement(
                    MovementKind.OUT, catalog.depot.id, catalog.bolt.id, -4, ReferenceKind.SALE
                )
        assert await balance_of(catalog.depot.id, catalog.nut.id) == 0
        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 3


class TestDatabaseErrors:
    async def test_driver_error_becomes_database_error(self, uow_factory, catalog):
        with pytest.raises(DatabaseError) as exc_info:
            async with uow_factory() as uow:
                await uow.stock._conn.execute("SELECT * FROM no_such_table")
        assert exc_info.value.details["operation"] == "transaction"

    async def test_begin_failure(self, pool):
        uow = SQLiteUnitOfWork(pool)
        with patch.object(pool, "transaction", side_effect=aiosqlite.OperationalError("locked")):
            with pytest.raises(DatabaseError) as exc_info:
                async with uow:
                    pass
        assert exc_info.value.details["operation"] == "begin"

    async def test_movements_are_append_only(self, pool, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 3)
        with pytest.raises(aiosqlite.IntegrityError):
            async with pool.transaction() as conn:
                await conn.execute("UPDATE stock_movements SET qty_delta = 99")
        with pytest.raises(aiosqlite.IntegrityError):
            async with pool.transaction() as conn:
                await conn.execute("DELETE FROM stock_movements")

    async def test_negative_balance_rejected_by_schema(self, pool, catalog):
        with pytest.raises(aiosqlite.IntegrityError):
            async with pool.transaction() as conn:
                await conn.execute(
                    "INSERT INTO stock_balances (location_id, item_id, quantity, updated_at) "
                    "VALUES (?, ?, -1, '2024-01-01T00:00:00+00:00')",
                    (catalog.depot.id, catalog.bolt.id),
                )


class TestReentry:
    async def test_cannot_enter_twice(self, uow_factory):
        uow = uow_factory()
        async with uow:
            with pytest.raises(RuntimeError):
                await uow.__aenter__()


class TestSerialisedWriters:
    async def test_second_writer_waits_for_first(self, uow_factory, transit, catalog, stock_in, balance_of):
        """Two read-modify-write units never interleave."""
        await stock_in(catalog.depot.id, catalog.bolt.id, 10)
        first_holds_lock = asyncio.Event()
        release_first = asyncio.Event()

        async def first():
            async with uow_factory() as uow:
                ledger = MovementLedger(uow, transit)
                await ledger.get_balance(catalog.depot.id, catalog.bolt.id)
                first_holds_lock.set()
                await release_first.wait()
                await ledger.apply_movement(
                    MovementKind.OUT, catalog.depot.id, catalog.bolt.id, -6, ReferenceKind.SALE
                )

        async def second():
            await first_holds_lock.wait()
            release_first.set()
            async with uow_factory() as uow:
                await MovementLedger(uow, transit).apply_movement(
                    MovementKind.OUT, catalog.depot.id, catalog.bolt.id, -6, ReferenceKind.SALE
                )

        results = await asyncio.gather(first(), second(), return_exceptions=True)

        assert results[0] is None
        assert isinstance(results[1], InsufficientQuantityError)
        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 4

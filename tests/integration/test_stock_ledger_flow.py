"""Integration tests for ledger use cases and stock queries."""

import asyncio

import pytest

from stockcore.application.dto.requests import (
    ApplyMovementRequest,
    RecordLossRequest,
    RecordReturnRequest,
    SetStockLevelRequest,
)
from stockcore.application.use_cases import (
    ApplyMovementUseCase,
    RecordLossUseCase,
    RecordReturnUseCase,
    SetStockLevelUseCase,
    StockQueryUseCase,
)
from stockcore.core.entities import MovementKind, ReferenceKind
from stockcore.core.exceptions import (
    InsufficientQuantityError,
    ItemNotFoundError,
    LocationNotFoundError,
    ValidationError,
)
from stockcore.infrastructure.storage.sqlite import ConnectionPool, SQLiteUnitOfWork


class TestApplyMovement:
    async def test_in_then_out(self, engine_context, catalog):
        apply = engine_context.build(ApplyMovementUseCase)

        received = await apply.execute(
            ApplyMovementRequest(
                kind=MovementKind.IN,
                location_id=catalog.depot.id,
                item_id=catalog.bolt.id,
                qty_delta=12,
                reference_kind=ReferenceKind.MANUAL,
            )
        )
        issued = await apply.execute(
            ApplyMovementRequest(
                kind=MovementKind.OUT,
                location_id=catalog.depot.id,
                item_id=catalog.bolt.id,
                qty_delta=-5,
                reference_kind=ReferenceKind.SALE,
                reference_id="till-4",
            )
        )

        assert received.balance.quantity == 12
        assert issued.balance.quantity == 7
        assert issued.movement.reference_id == "till-4"

    async def test_out_beyond_balance(self, engine_context, catalog, stock_in, balance_of):
        await stock_in(catalog.depot.id, catalog.bolt.id, 2)
        with pytest.raises(InsufficientQuantityError) as exc_info:
            await engine_context.build(ApplyMovementUseCase).execute(
                ApplyMovementRequest(
                    kind=MovementKind.OUT,
                    location_id=catalog.depot.id,
                    item_id=catalog.bolt.id,
                    qty_delta=-3,
                    reference_kind=ReferenceKind.SALE,
                )
            )
        assert exc_info.value.details["available"] == 2
        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 2

    async def test_transit_requires_transfer(self, engine_context, catalog, transit):
        with pytest.raises(ValidationError):
            await engine_context.build(ApplyMovementUseCase).execute(
                ApplyMovementRequest(
                    kind=MovementKind.IN,
                    location_id=transit.id,
                    item_id=catalog.bolt.id,
                    qty_delta=1,
                    reference_kind=ReferenceKind.MANUAL,
                )
            )

    async def test_store_rejects_purchase_receipt(self, engine_context, catalog):
        with pytest.raises(ValidationError):
            await engine_context.build(ApplyMovementUseCase).execute(
                ApplyMovementRequest(
                    kind=MovementKind.IN,
                    location_id=catalog.store.id,
                    item_id=catalog.bolt.id,
                    qty_delta=1,
                    reference_kind=ReferenceKind.PURCHASE_RECEIPT,
                )
            )

    async def test_unknown_item(self, engine_context, catalog):
        with pytest.raises(ItemNotFoundError):
            await engine_context.build(ApplyMovementUseCase).execute(
                ApplyMovementRequest(
                    kind=MovementKind.IN,
                    location_id=catalog.depot.id,
                    item_id=9999,
                    qty_delta=1,
                    reference_kind=ReferenceKind.MANUAL,
                )
            )

    async def test_resolves_transit_without_injection(self, db_path, catalog):
        single = ConnectionPool(db_path, pool_size=1, busy_timeout=1000)
        await single.initialize()
        try:
            apply = ApplyMovementUseCase(uow_factory=lambda: SQLiteUnitOfWork(single))
            result = await asyncio.wait_for(
                apply.execute(
                    ApplyMovementRequest(
                        kind=MovementKind.IN,
                        location_id=catalog.depot.id,
                        item_id=catalog.bolt.id,
                        qty_delta=3,
                        reference_kind=ReferenceKind.MANUAL,
                    )
                ),
                timeout=10,
            )
        finally:
            await single.close()

        assert result.balance.quantity == 3


class TestReturnsAndLosses:
    async def test_return_adds_stock_with_note(self, engine_context, catalog):
        result = await engine_context.build(RecordReturnUseCase).execute(
            RecordReturnRequest(
                location_id=catalog.store.id, item_id=catalog.paint.id, qty=1, reason="wrong colour"
            )
        )
        assert result.balance.quantity == 1
        assert result.movement.reference_kind == ReferenceKind.RETURN
        assert result.movement.note == "Customer return: wrong colour"

    async def test_loss_needs_note(self, engine_context, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)
        with pytest.raises(ValidationError):
            await engine_context.build(RecordLossUseCase).execute(
                RecordLossRequest(
                    location_id=catalog.depot.id, item_id=catalog.bolt.id, qty=1, note="   "
                )
            )

    async def test_loss_removes_stock(self, engine_context, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)
        result = await engine_context.build(RecordLossUseCase).execute(
            RecordLossRequest(
                location_id=catalog.depot.id,
                item_id=catalog.bolt.id,
                qty=2,
                note="dropped pallet",
                loss_type="breakage",
            )
        )
        assert result.balance.quantity == 3
        assert result.movement.qty_delta == -2
        assert result.movement.note == "dropped pallet (type: breakage)"


class TestSetStockLevel:
    async def test_adjusts_to_counted(self, engine_context, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)
        result = await engine_context.build(SetStockLevelUseCase).execute(
            SetStockLevelRequest(
                location_id=catalog.depot.id, item_id=catalog.bolt.id, counted_qty=8, note="recount"
            )
        )
        assert result.balance.quantity == 8
        assert result.movement.kind == MovementKind.ADJUST
        assert result.movement.qty_delta == 3
        assert result.movement.reference_kind == ReferenceKind.LEGACY_INVENTORY

    async def test_no_movement_when_unchanged(self, engine_context, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)
        result = await engine_context.build(SetStockLevelUseCase).execute(
            SetStockLevelRequest(
                location_id=catalog.depot.id, item_id=catalog.bolt.id, counted_qty=5, note="recount"
            )
        )
        assert result.movement is None
        assert result.balance.quantity == 5


class TestStockQueries:
    async def test_balances_and_history(self, engine_context, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 3)
        await stock_in(catalog.depot.id, catalog.bolt.id, 4)
        await stock_in(catalog.depot.id, catalog.nut.id, 1)
        queries = engine_context.build(StockQueryUseCase)

        assert await queries.get_balance(catalog.depot.id, catalog.bolt.id) == 7
        assert await queries.get_balances_batch(
            catalog.depot.id, [catalog.bolt.id, catalog.paint.id]
        ) == {catalog.bolt.id: 7, catalog.paint.id: 0}
        assert len(await queries.list_by_location(catalog.depot.id)) == 2

        history = await queries.last_movements(catalog.depot.id, item_id=catalog.bolt.id)
        assert [m.qty_delta for m in history] == [4, 3]

    async def test_unknown_location(self, engine_context):
        with pytest.raises(LocationNotFoundError):
            await engine_context.build(StockQueryUseCase).last_movements(9999)

"""Integration tests for the inventory count workflow."""

import pytest

from stockcore.application.dto.requests import (
    CreateInventoryRequest,
    CreateSaleRequest,
    GenerateLinesRequest,
    LineRequest,
    PostInventoryRequest,
    RecordCountRequest,
)
from stockcore.application.use_cases import (
    CancelInventoryUseCase,
    CreateInventoryUseCase,
    CreateSaleUseCase,
    GenerateInventoryLinesUseCase,
    InventoryQueryUseCase,
    PostInventoryUseCase,
    PostSaleUseCase,
    RecordInventoryCountUseCase,
)
from stockcore.core.entities import (
    CountLineStatus,
    CountMode,
    CountStatus,
    MovementKind,
    ReferenceKind,
)
from stockcore.core.exceptions import (
    ConflictError,
    IllegalTransitionError,
    ItemNotFoundError,
    ValidationError,
)


async def open_count(engine_context, location_id, mode=CountMode.FULL, category_id=None):
    return await engine_context.build(CreateInventoryUseCase).execute(
        CreateInventoryRequest(location_id=location_id, mode=mode, category_id=category_id)
    )


async def load(engine_context, inventory_id):
    return await engine_context.build(InventoryQueryUseCase).get(inventory_id)


async def record(engine_context, count, item_id, **fields):
    line = next(line for line in count.lines if line.item_id == item_id)
    return await engine_context.build(RecordInventoryCountUseCase).execute(
        count.id, line.id, RecordCountRequest(**fields)
    )


class TestLineGeneration:
    async def test_full_count_snapshots_balances(self, engine_context, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 10)
        count = await open_count(engine_context, catalog.depot.id)
        assert count.number.startswith("INV-")

        created = await engine_context.build(GenerateInventoryLinesUseCase).execute(count.id)

        count = await load(engine_context, count.id)
        assert created == 3
        assert {line.item_id: line.expected_qty for line in count.lines} == {
            catalog.bolt.id: 10,
            catalog.nut.id: 0,
            catalog.paint.id: 0,
        }
        assert {line.status for line in count.lines} == {CountLineStatus.PENDING}

    async def test_generation_runs_once(self, engine_context, catalog):
        count = await open_count(engine_context, catalog.depot.id)
        generate = engine_context.build(GenerateInventoryLinesUseCase)
        await generate.execute(count.id)

        with pytest.raises(ConflictError):
            await generate.execute(count.id)

        assert len((await load(engine_context, count.id)).lines) == 3

    async def test_by_category(self, engine_context, catalog):
        count = await open_count(
            engine_context, catalog.depot.id, CountMode.BY_CATEGORY, catalog.hardware.id
        )
        await engine_context.build(GenerateInventoryLinesUseCase).execute(count.id)

        count = await load(engine_context, count.id)
        assert [line.item_id for line in count.lines] == [catalog.bolt.id, catalog.nut.id]

    async def test_by_category_requires_category(self, engine_context, catalog):
        with pytest.raises(ValidationError):
            await open_count(engine_context, catalog.depot.id, CountMode.BY_CATEGORY)

    async def test_free_count_with_chosen_items(self, engine_context, catalog):
        count = await open_count(engine_context, catalog.store.id, CountMode.FREE)
        created = await engine_context.build(GenerateInventoryLinesUseCase).execute(
            count.id, GenerateLinesRequest(item_ids=[catalog.paint.id, catalog.paint.id])
        )
        assert created == 1

    async def test_free_count_unknown_item(self, engine_context, catalog):
        count = await open_count(engine_context, catalog.store.id, CountMode.FREE)
        with pytest.raises(ItemNotFoundError):
            await engine_context.build(GenerateInventoryLinesUseCase).execute(
                count.id, GenerateLinesRequest(item_ids=[9999])
            )

    async def test_transit_cannot_be_counted(self, engine_context, transit):
        with pytest.raises(ValidationError):
            await open_count(engine_context, transit.id)


class TestRecordAndPost:
    @pytest.fixture
    async def count(self, engine_context, catalog, stock_in):
        """A FULL count at the depot with 10 bolts expected."""
        await stock_in(catalog.depot.id, catalog.bolt.id, 10)
        count = await open_count(engine_context, catalog.depot.id)
        await engine_context.build(GenerateInventoryLinesUseCase).execute(count.id)
        return await load(engine_context, count.id)

    async def test_record_computes_delta(self, engine_context, catalog, count):
        line = await record(engine_context, count, catalog.bolt.id, counted_qty=7)
        assert line.counted_qty == 7
        assert line.delta == -3
        assert line.status == CountLineStatus.COUNTED

    async def test_clearing_a_count(self, engine_context, catalog, count):
        await record(engine_context, count, catalog.bolt.id, counted_qty=7)
        line = await record(engine_context, count, catalog.bolt.id, counted_qty=None)
        assert line.counted_qty is None
        assert line.delta == 0
        assert line.status == CountLineStatus.PENDING

    async def test_note_only_update_keeps_count(self, engine_context, catalog, count):
        await record(engine_context, count, catalog.bolt.id, counted_qty=7)
        line = await record(engine_context, count, catalog.bolt.id, note="shelf B")
        assert line.counted_qty == 7
        assert line.note == "shelf B"

    async def test_negative_count_rejected(self, engine_context, catalog, count):
        with pytest.raises(ValidationError):
            await record(engine_context, count, catalog.bolt.id, counted_qty=-1)

    async def test_post_reconciles_against_current_balance(
        self, engine_context, catalog, count, balance_of, uow_factory
    ):
        """A sale between generation and posting does not skew the adjustment."""
        await record(engine_context, count, catalog.bolt.id, counted_qty=7)
        sale = await engine_context.build(CreateSaleUseCase).execute(
            CreateSaleRequest(
                location_id=catalog.depot.id, lines=[LineRequest(item_id=catalog.bolt.id, qty=2)]
            )
        )
        await engine_context.build(PostSaleUseCase).execute(sale.id)
        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 8

        posted = await engine_context.build(PostInventoryUseCase).execute(
            count.id, PostInventoryRequest(note="Quarterly count", posted_by="alex")
        )

        assert posted.status == CountStatus.POSTED
        assert posted.posted_by == "alex"
        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 7
        async with uow_factory() as uow:
            movements = await uow.stock.list_movements_for_inventory(count.id)
        assert [(m.kind, m.qty_delta, m.reference_kind) for m in movements] == [
            (MovementKind.ADJUST, -1, ReferenceKind.INVENTORY)
        ]
        assert movements[0].note == "Quarterly count"

    async def test_matching_count_writes_no_movement(self, engine_context, catalog, count, uow_factory):
        await record(engine_context, count, catalog.bolt.id, counted_qty=10)
        await engine_context.build(PostInventoryUseCase).execute(
            count.id, PostInventoryRequest(note="all good")
        )
        async with uow_factory() as uow:
            assert await uow.stock.list_movements_for_inventory(count.id) == []

    async def test_skipped_and_pending_lines_ignored(self, engine_context, catalog, count, balance_of):
        await record(engine_context, count, catalog.bolt.id, counted_qty=0, status=CountLineStatus.SKIPPED)
        await record(engine_context, count, catalog.nut.id, counted_qty=4)

        await engine_context.build(PostInventoryUseCase).execute(
            count.id, PostInventoryRequest(note="partial recount")
        )

        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 10
        assert await balance_of(catalog.depot.id, catalog.nut.id) == 4

    @pytest.mark.parametrize("note", ["", "ok", "x" * 256])
    async def test_post_note_length(self, engine_context, catalog, count, note):
        await record(engine_context, count, catalog.bolt.id, counted_qty=7)
        with pytest.raises(ValidationError):
            await engine_context.build(PostInventoryUseCase).execute(
                count.id, PostInventoryRequest(note=note)
            )

    async def test_post_needs_a_counted_line(self, engine_context, count):
        with pytest.raises(ValidationError):
            await engine_context.build(PostInventoryUseCase).execute(
                count.id, PostInventoryRequest(note="nothing here")
            )

    async def test_posted_count_is_closed(self, engine_context, catalog, count):
        await record(engine_context, count, catalog.bolt.id, counted_qty=7)
        post = engine_context.build(PostInventoryUseCase)
        await post.execute(count.id, PostInventoryRequest(note="first pass"))

        with pytest.raises(IllegalTransitionError):
            await post.execute(count.id, PostInventoryRequest(note="second pass"))
        with pytest.raises(IllegalTransitionError):
            await record(engine_context, count, catalog.bolt.id, counted_qty=1)
        with pytest.raises(IllegalTransitionError):
            await engine_context.build(CancelInventoryUseCase).execute(count.id)

    async def test_cancelled_count_rejects_counts(self, engine_context, catalog, count, balance_of):
        cancelled = await engine_context.build(CancelInventoryUseCase).execute(count.id)
        assert cancelled.status == CountStatus.CANCELLED

        with pytest.raises(IllegalTransitionError):
            await record(engine_context, count, catalog.bolt.id, counted_qty=1)
        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 10

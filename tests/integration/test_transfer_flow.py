"""Integration tests for transfers and two-leg journeys through in-transit."""

import pytest

from stockcore.application.dto.requests import (
    CreateTransferRequest,
    LineRequest,
    ReceiveTransferRequest,
    ShipTransferRequest,
)
from stockcore.application.use_cases import (
    CreateJourneyUseCase,
    CreateTransferDraftUseCase,
    PostTransferUseCase,
    ReceiveTransferUseCase,
    ShipTransferUseCase,
    TransferQueryUseCase,
)
from stockcore.core.entities import MovementKind, TransferStatus
from stockcore.core.exceptions import (
    ConflictError,
    IllegalTransitionError,
    InsufficientQuantityError,
    LocationNotFoundError,
    OverFulfillmentError,
    ValidationError,
)


def transfer_request(source, destination, *lines, note=None) -> CreateTransferRequest:
    return CreateTransferRequest(
        source_location_id=source,
        destination_location_id=destination,
        lines=[LineRequest(item_id=item_id, qty=qty) for item_id, qty in lines],
        note=note,
    )


def receipt(*lines) -> ReceiveTransferRequest:
    return ReceiveTransferRequest(lines=[LineRequest(item_id=item_id, qty=qty) for item_id, qty in lines])


class TestJourney:
    """Full journey: source -> in-transit -> destination."""

    async def test_journey_conserves_stock(self, engine_context, catalog, transit, stock_in, balance_of):
        depot, store, bolt = catalog.depot.id, catalog.store.id, catalog.bolt.id
        await stock_in(depot, bolt, 10)

        async def snapshot():
            return (
                await balance_of(depot, bolt),
                await balance_of(transit.id, bolt),
                await balance_of(store, bolt),
            )

        journey = await engine_context.build(CreateJourneyUseCase).execute(
            transfer_request(depot, store, (bolt, 4))
        )
        assert journey.outbound.source_location_id == depot
        assert journey.outbound.destination_location_id == transit.id
        assert journey.inbound.source_location_id == transit.id
        assert journey.inbound.destination_location_id == store
        assert journey.outbound.journey_id == journey.inbound.journey_id == journey.journey_id
        assert await snapshot() == (10, 0, 0)

        ship = engine_context.build(ShipTransferUseCase)
        receive = engine_context.build(ReceiveTransferUseCase)

        leg_a = await ship.execute(journey.outbound.id)
        assert leg_a.status == TransferStatus.SHIPPED
        assert await snapshot() == (6, 4, 0)

        leg_a = await receive.execute(journey.outbound.id, receipt((bolt, 4)))
        assert leg_a.status == TransferStatus.RECEIVED
        assert await snapshot() == (6, 4, 0)

        await ship.execute(journey.inbound.id)
        assert await snapshot() == (6, 4, 0)

        leg_b = await receive.execute(journey.inbound.id, receipt((bolt, 3)))
        assert leg_b.status == TransferStatus.PARTIALLY_RECEIVED
        assert await snapshot() == (6, 1, 3)

        leg_b = await receive.execute(journey.inbound.id, receipt((bolt, 1)))
        assert leg_b.status == TransferStatus.RECEIVED
        assert leg_b.received_at is not None
        assert await snapshot() == (6, 0, 4)

    async def test_journey_lookup(self, engine_context, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)
        journey = await engine_context.build(CreateJourneyUseCase).execute(
            transfer_request(catalog.depot.id, catalog.warehouse.id, (catalog.bolt.id, 2))
        )

        found = await engine_context.build(TransferQueryUseCase).get_journey(journey.journey_id)

        assert found.outbound.id == journey.outbound.id
        assert found.inbound.id == journey.inbound.id

    async def test_inbound_leg_needs_stock_in_transit(self, engine_context, catalog, stock_in):
        """Leg B cannot ship before leg A has moved stock into transit."""
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)
        journey = await engine_context.build(CreateJourneyUseCase).execute(
            transfer_request(catalog.depot.id, catalog.store.id, (catalog.bolt.id, 2))
        )

        with pytest.raises(InsufficientQuantityError):
            await engine_context.build(ShipTransferUseCase).execute(journey.inbound.id)

        leg_b = await engine_context.build(TransferQueryUseCase).get(journey.inbound.id)
        assert leg_b.status == TransferStatus.DRAFT

    async def test_ship_movements_reference_transfer(self, engine_context, catalog, transit, stock_in, uow_factory):
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)
        journey = await engine_context.build(CreateJourneyUseCase).execute(
            transfer_request(catalog.depot.id, catalog.store.id, (catalog.bolt.id, 2))
        )
        await engine_context.build(ShipTransferUseCase).execute(
            journey.outbound.id, ShipTransferRequest(note="van 3")
        )

        async with uow_factory() as uow:
            movements = await uow.stock.list_movements_for_transfer(journey.outbound.id)

        assert [(m.kind, m.location_id, m.qty_delta) for m in movements] == [
            (MovementKind.OUT, catalog.depot.id, -2),
            (MovementKind.IN, transit.id, 2),
        ]
        assert {m.note for m in movements} == {"van 3"}

    async def test_same_source_and_destination_rejected(self, engine_context, catalog):
        with pytest.raises(ValidationError):
            await engine_context.build(CreateJourneyUseCase).execute(
                transfer_request(catalog.depot.id, catalog.depot.id, (catalog.bolt.id, 1))
            )


class TestDraftTransfer:
    async def test_direct_leg_moves_on_ship_and_receive(self, engine_context, catalog, stock_in, balance_of):
        depot, warehouse, bolt = catalog.depot.id, catalog.warehouse.id, catalog.bolt.id
        await stock_in(depot, bolt, 5)
        transfer = await engine_context.build(CreateTransferDraftUseCase).execute(
            transfer_request(depot, warehouse, (bolt, 3))
        )
        assert transfer.status == TransferStatus.DRAFT

        await engine_context.build(ShipTransferUseCase).execute(transfer.id)
        assert await balance_of(depot, bolt) == 2
        assert await balance_of(warehouse, bolt) == 0

        await engine_context.build(ReceiveTransferUseCase).execute(transfer.id, receipt((bolt, 3)))
        assert await balance_of(warehouse, bolt) == 3

    async def test_multi_line_ship_is_all_or_nothing(self, engine_context, catalog, stock_in, balance_of, uow_factory):
        depot = catalog.depot.id
        await stock_in(depot, catalog.bolt.id, 5)
        await stock_in(depot, catalog.nut.id, 1)
        transfer = await engine_context.build(CreateTransferDraftUseCase).execute(
            transfer_request(depot, catalog.warehouse.id, (catalog.bolt.id, 3), (catalog.nut.id, 2))
        )

        with pytest.raises(InsufficientQuantityError) as exc_info:
            await engine_context.build(ShipTransferUseCase).execute(transfer.id)

        assert exc_info.value.details["item_id"] == catalog.nut.id
        assert await balance_of(depot, catalog.bolt.id) == 5
        async with uow_factory() as uow:
            assert await uow.stock.list_movements_for_transfer(transfer.id) == []
            assert (await uow.transfers.get(transfer.id)).status == TransferStatus.DRAFT

    async def test_ship_twice_rejected(self, engine_context, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)
        transfer = await engine_context.build(CreateTransferDraftUseCase).execute(
            transfer_request(catalog.depot.id, catalog.warehouse.id, (catalog.bolt.id, 1))
        )
        ship = engine_context.build(ShipTransferUseCase)
        await ship.execute(transfer.id)

        with pytest.raises(IllegalTransitionError):
            await ship.execute(transfer.id)

    async def test_receive_before_ship_rejected(self, engine_context, catalog):
        transfer = await engine_context.build(CreateTransferDraftUseCase).execute(
            transfer_request(catalog.depot.id, catalog.warehouse.id, (catalog.bolt.id, 1))
        )
        with pytest.raises(IllegalTransitionError):
            await engine_context.build(ReceiveTransferUseCase).execute(
                transfer.id, receipt((catalog.bolt.id, 1))
            )

    async def test_transit_not_user_facing(self, engine_context, catalog, transit):
        with pytest.raises(ValidationError):
            await engine_context.build(CreateTransferDraftUseCase).execute(
                transfer_request(transit.id, catalog.store.id, (catalog.bolt.id, 1))
            )

    async def test_repeated_item_rejected(self, engine_context, catalog):
        with pytest.raises(ConflictError):
            await engine_context.build(CreateTransferDraftUseCase).execute(
                transfer_request(
                    catalog.depot.id, catalog.store.id, (catalog.bolt.id, 1), (catalog.bolt.id, 2)
                )
            )

    async def test_unknown_location(self, engine_context, catalog):
        with pytest.raises(LocationNotFoundError):
            await engine_context.build(CreateTransferDraftUseCase).execute(
                transfer_request(catalog.depot.id, 9999, (catalog.bolt.id, 1))
            )

    async def test_zero_quantity_rejected(self, engine_context, catalog):
        with pytest.raises(ValidationError):
            await engine_context.build(CreateTransferDraftUseCase).execute(
                transfer_request(catalog.depot.id, catalog.store.id, (catalog.bolt.id, 0))
            )


class TestReceiveValidation:
    """A receive call is validated in full before any movement."""

    @pytest.fixture
    async def shipped(self, engine_context, catalog, stock_in):
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)
        await stock_in(catalog.depot.id, catalog.nut.id, 5)
        transfer = await engine_context.build(CreateTransferDraftUseCase).execute(
            transfer_request(
                catalog.depot.id, catalog.warehouse.id, (catalog.bolt.id, 3), (catalog.nut.id, 2)
            )
        )
        return await engine_context.build(ShipTransferUseCase).execute(transfer.id)

    async def test_over_receipt_rejected(self, engine_context, catalog, shipped, balance_of):
        with pytest.raises(OverFulfillmentError):
            await engine_context.build(ReceiveTransferUseCase).execute(
                shipped.id, receipt((catalog.bolt.id, 3), (catalog.nut.id, 3))
            )
        assert await balance_of(catalog.warehouse.id, catalog.bolt.id) == 0

    async def test_item_outside_transfer_rejected(self, engine_context, catalog, shipped):
        with pytest.raises(ValidationError):
            await engine_context.build(ReceiveTransferUseCase).execute(
                shipped.id, receipt((catalog.paint.id, 1))
            )

    async def test_duplicate_item_rejected(self, engine_context, catalog, shipped):
        with pytest.raises(ConflictError):
            await engine_context.build(ReceiveTransferUseCase).execute(
                shipped.id, receipt((catalog.bolt.id, 1), (catalog.bolt.id, 1))
            )

    async def test_nothing_to_receive(self, engine_context, catalog, shipped):
        with pytest.raises(ValidationError):
            await engine_context.build(ReceiveTransferUseCase).execute(
                shipped.id, receipt((catalog.bolt.id, 0))
            )

    async def test_partial_then_complete(self, engine_context, catalog, shipped, balance_of):
        receive = engine_context.build(ReceiveTransferUseCase)

        partial = await receive.execute(shipped.id, receipt((catalog.bolt.id, 3)))
        assert partial.status == TransferStatus.PARTIALLY_RECEIVED
        assert partial.line_for(catalog.nut.id).remaining == 2

        complete = await receive.execute(shipped.id, receipt((catalog.nut.id, 2)))
        assert complete.status == TransferStatus.RECEIVED
        assert await balance_of(catalog.warehouse.id, catalog.nut.id) == 2

        with pytest.raises(IllegalTransitionError):
            await receive.execute(shipped.id, receipt((catalog.nut.id, 1)))


class TestPostTransfer:
    async def test_one_shot_transfer(self, engine_context, catalog, stock_in, balance_of):
        await stock_in(catalog.depot.id, catalog.bolt.id, 5)

        transfer = await engine_context.build(PostTransferUseCase).execute(
            transfer_request(catalog.depot.id, catalog.store.id, (catalog.bolt.id, 5))
        )

        assert transfer.status == TransferStatus.RECEIVED
        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 0
        assert await balance_of(catalog.store.id, catalog.bolt.id) == 5

    async def test_failure_leaves_no_draft(self, engine_context, catalog):
        with pytest.raises(InsufficientQuantityError):
            await engine_context.build(PostTransferUseCase).execute(
                transfer_request(catalog.depot.id, catalog.store.id, (catalog.bolt.id, 5))
            )
        assert await engine_context.build(TransferQueryUseCase).list_recent() == []

"""
Transfer journey engine.

A transfer leg moves stock from a source to a destination location. A
journey is two legs sharing a journey id and passing through the
in-transit location:

    leg A: source -> in-transit      (ship: OUT source, IN in-transit)
    leg B: in-transit -> destination (receive: OUT in-transit, IN destination)

A direct leg between two ordinary locations issues OUT at ship time and
IN at receive time. All balance changes go through the ledger.
"""

import uuid

from stockcore.config import get_logger
from stockcore.core.entities import (
    Journey,
    LineQuantity,
    MovementDraft,
    MovementKind,
    ReferenceKind,
    Transfer,
    TransferLine,
    TransferPartiallyReceived,
    TransferPurpose,
    TransferReceived,
    TransferShipped,
    TransferStatus,
    TransitLocation,
)
from stockcore.core.entities.common import utc_now
from stockcore.core.exceptions import (
    ConflictError,
    DocumentNotFoundError,
    LocationNotFoundError,
    OverFulfillmentError,
    ValidationError,
)
from stockcore.core.interfaces import IUnitOfWork
from stockcore.core.services.events import EventBus
from stockcore.core.services.ledger import MovementLedger
from stockcore.core.services.lines import check_quantity, ensure_items_exist
from stockcore.core.services.transitions import TRANSFER_GRAPH

logger = get_logger(__name__)


class TransferEngine:
    """Creates, ships and receives transfer legs inside one unit of work."""

    def __init__(
        self,
        uow: IUnitOfWork,
        ledger: MovementLedger,
        transit: TransitLocation,
        events: EventBus | None = None,
    ):
        self._uow = uow
        self._ledger = ledger
        self._transit = transit
        self._events = events or EventBus()

    # Queries

    async def get(self, transfer_id: int) -> Transfer:
        transfer = await self._uow.transfers.get(transfer_id)
        if transfer is None:
            raise DocumentNotFoundError("Transfer", transfer_id)
        return transfer

    async def list_recent(self, limit: int = 100) -> list[Transfer]:
        return await self._uow.transfers.list_recent(limit=limit)

    async def get_journey(self, journey_id: str) -> Journey:
        legs = await self._uow.transfers.list_by_journey(journey_id)
        outbound = next((t for t in legs if self._transit.matches(t.destination_location_id)), None)
        inbound = next((t for t in legs if self._transit.matches(t.source_location_id)), None)
        if outbound is None or inbound is None:
            raise DocumentNotFoundError("Journey", journey_id)
        return Journey(journey_id=journey_id, outbound=outbound, inbound=inbound)

    # Creation

    async def create_draft(
        self,
        source_location_id: int,
        destination_location_id: int,
        lines: list[LineQuantity],
        purpose: TransferPurpose = TransferPurpose.INTERNAL_DELIVERY,
        journey_id: str | None = None,
        note: str | None = None,
    ) -> Transfer:
        """Create a DRAFT transfer between two user-facing locations."""
        return await self._create(
            source_location_id, destination_location_id, lines, purpose, journey_id, note,
            user_locations=(source_location_id, destination_location_id),
        )

    async def create_journey(
        self,
        source_location_id: int,
        destination_location_id: int,
        lines: list[LineQuantity],
        purpose: TransferPurpose = TransferPurpose.INTERNAL_DELIVERY,
        note: str | None = None,
    ) -> Journey:
        """Create both legs of a journey through the in-transit location."""
        if source_location_id == destination_location_id:
            raise ValidationError(
                "destination_location_id", "must differ from the source", destination_location_id
            )
        journey_id = uuid.uuid4().hex
        outbound = await self._create(
            source_location_id, self._transit.id, lines, purpose, journey_id, note,
            user_locations=(source_location_id,),
        )
        inbound = await self._create(
            self._transit.id, destination_location_id, lines, purpose, journey_id, note,
            user_locations=(destination_location_id,),
        )
        logger.info(
            "transfer_journey_created",
            journey_id=journey_id,
            outbound_id=outbound.id,
            inbound_id=inbound.id,
        )
        return Journey(journey_id=journey_id, outbound=outbound, inbound=inbound)

    async def _create(
        self,
        source_location_id: int,
        destination_location_id: int,
        lines: list[LineQuantity],
        purpose: TransferPurpose,
        journey_id: str | None,
        note: str | None,
        user_locations: tuple[int, ...] = (),
    ) -> Transfer:
        if source_location_id == destination_location_id:
            raise ValidationError(
                "destination_location_id", "must differ from the source", destination_location_id
            )
        for location_id in user_locations:
            if self._transit.matches(location_id):
                raise ValidationError("location_id", "the in-transit location is managed by journeys", location_id)
        if not lines:
            raise ValidationError("lines", "at least one line is required")

        seen: set[int] = set()
        for line in lines:
            check_quantity("qty", line.qty)
            if line.item_id in seen:
                raise ConflictError(
                    f"Item {line.item_id} appears more than once",
                    details={"field": "lines", "item_id": line.item_id},
                )
            seen.add(line.item_id)

        for location_id in (source_location_id, destination_location_id):
            if await self._uow.master.get_location(location_id) is None:
                raise LocationNotFoundError(location_id)
        await ensure_items_exist(self._uow, list(seen))

        transfer = await self._uow.transfers.create(
            Transfer(
                source_location_id=source_location_id,
                destination_location_id=destination_location_id,
                journey_id=journey_id,
                purpose=purpose,
                note=note,
                lines=[
                    TransferLine(item_id=line.item_id, qty_requested=line.qty, note=line.note)
                    for line in lines
                ],
            )
        )
        logger.info(
            "transfer_created",
            transfer_id=transfer.id,
            source_location_id=source_location_id,
            destination_location_id=destination_location_id,
            journey_id=journey_id,
            lines=len(transfer.lines),
        )
        return transfer

    # Ship / receive

    async def ship(self, transfer_id: int, note: str | None = None) -> Transfer:
        """
        Ship a DRAFT transfer.

        Every line is checked against the source balance before any
        movement is written. Shipping leg B of a journey only checks the
        in-transit balance: its stock already moved when leg A shipped.
        """
        transfer = await self.get(transfer_id)
        TRANSFER_GRAPH.require(transfer.status, TransferStatus.DRAFT)

        reference = str(transfer.id)
        outgoing = [
            MovementDraft(
                kind=MovementKind.OUT,
                location_id=transfer.source_location_id,
                item_id=line.item_id,
                qty_delta=-line.qty_requested,
                reference_kind=ReferenceKind.TRANSFER,
                reference_id=reference,
                transfer_id=transfer.id,
                note=note,
            )
            for line in transfer.lines
        ]

        if self._transit.matches(transfer.source_location_id):
            await self._ledger.check_available(outgoing)
        else:
            drafts = list(outgoing)
            if self._transit.matches(transfer.destination_location_id):
                drafts.extend(
                    MovementDraft(
                        kind=MovementKind.IN,
                        location_id=self._transit.id,
                        item_id=line.item_id,
                        qty_delta=line.qty_requested,
                        reference_kind=ReferenceKind.TRANSFER,
                        reference_id=reference,
                        transfer_id=transfer.id,
                        note=note,
                    )
                    for line in transfer.lines
                )
            await self._ledger.apply_batch(drafts)

        transfer.status = TransferStatus.SHIPPED
        transfer.shipped_at = utc_now()
        if note:
            transfer.note = note
        await self._uow.transfers.update_status(transfer)

        logger.info(
            "transfer_shipped",
            transfer_id=transfer.id,
            journey_id=transfer.journey_id,
            lines=len(transfer.lines),
            quantity=transfer.total_requested,
        )
        await self._events.publish(
            TransferShipped(
                transfer_id=transfer.id,
                journey_id=transfer.journey_id,
                note=note,
                lines=len(transfer.lines),
                quantity=transfer.total_requested,
            ),
            self._uow,
        )
        return transfer

    async def receive(
        self,
        transfer_id: int,
        lines: list[LineQuantity],
        note: str | None = None,
    ) -> Transfer:
        """
        Receive some or all of a shipped transfer.

        The whole call is validated before any movement: an unknown item,
        a duplicate item or a quantity above what remains fails it.
        """
        transfer = await self.get(transfer_id)
        TRANSFER_GRAPH.require(
            transfer.status, TransferStatus.SHIPPED, TransferStatus.PARTIALLY_RECEIVED
        )
        if not lines:
            raise ValidationError("lines", "at least one line is required")

        receipts: list[tuple[TransferLine, int]] = []
        seen: set[int] = set()
        for submitted in lines:
            qty = check_quantity("qty_received", submitted.qty, allow_zero=True)
            line = transfer.line_for(submitted.item_id)
            if line is None:
                raise ValidationError(
                    "item_id", "item is not part of this transfer", submitted.item_id
                )
            if submitted.item_id in seen:
                raise ConflictError(
                    f"Item {submitted.item_id} submitted more than once",
                    details={"field": "lines", "item_id": submitted.item_id},
                )
            seen.add(submitted.item_id)
            if line.qty_received + qty > line.qty_requested:
                raise OverFulfillmentError(line.id, line.qty_requested, line.qty_received, qty)
            if qty > 0:
                receipts.append((line, qty))

        if not receipts:
            raise ValidationError("lines", "nothing to receive")

        reference = str(transfer.id)
        drafts: list[MovementDraft] = []
        from_transit = self._transit.matches(transfer.source_location_id)
        into_transit = self._transit.matches(transfer.destination_location_id)
        for line, qty in receipts:
            if from_transit:
                drafts.append(
                    MovementDraft(
                        kind=MovementKind.OUT,
                        location_id=self._transit.id,
                        item_id=line.item_id,
                        qty_delta=-qty,
                        reference_kind=ReferenceKind.TRANSFER,
                        reference_id=reference,
                        transfer_id=transfer.id,
                        note=note,
                    )
                )
            if not into_transit:
                drafts.append(
                    MovementDraft(
                        kind=MovementKind.IN,
                        location_id=transfer.destination_location_id,
                        item_id=line.item_id,
                        qty_delta=qty,
                        reference_kind=ReferenceKind.TRANSFER,
                        reference_id=reference,
                        transfer_id=transfer.id,
                        note=note,
                    )
                )
        await self._ledger.apply_batch(drafts)

        for line, qty in receipts:
            line.qty_received += qty
            await self._uow.transfers.update_line_received(line.id, line.qty_received)

        complete = all(line.is_complete for line in transfer.lines)
        next_status = TransferStatus.RECEIVED if complete else TransferStatus.PARTIALLY_RECEIVED
        TRANSFER_GRAPH.check(transfer.status, next_status)
        transfer.status = next_status
        if complete:
            transfer.received_at = utc_now()
        if note:
            transfer.note = note
        await self._uow.transfers.update_status(transfer)

        expected = transfer.total_requested
        received = transfer.total_received
        logger.info(
            "transfer_received",
            transfer_id=transfer.id,
            status=transfer.status.value,
            expected=expected,
            received=received,
        )
        event_type = TransferReceived if complete else TransferPartiallyReceived
        await self._events.publish(
            event_type(
                transfer_id=transfer.id,
                journey_id=transfer.journey_id,
                note=note,
                expected=expected,
                received=received,
                missing=expected - received,
            ),
            self._uow,
        )
        return transfer

    async def post_direct(
        self,
        source_location_id: int,
        destination_location_id: int,
        lines: list[LineQuantity],
        purpose: TransferPurpose = TransferPurpose.INTERNAL_DELIVERY,
        note: str | None = None,
    ) -> Transfer:
        """One-shot transfer: create, ship and receive every line."""
        transfer = await self.create_draft(
            source_location_id, destination_location_id, lines, purpose, note=note
        )
        await self.ship(transfer.id, note=note)
        return await self.receive(
            transfer.id,
            [LineQuantity(item_id=line.item_id, qty=line.qty_requested) for line in transfer.lines],
            note=note,
        )

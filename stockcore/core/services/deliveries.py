"""
Delivery status machine.

A delivery is created from a posted sale, from an open order, or
standalone between two locations. Entering PARTIALLY_DELIVERED or
DELIVERED for the first time adds the delivered quantities onto the
originating sale or order lines; exceeding a line's ordered quantity is a
conflict, never clamped.

Transfer events reach deliveries through ``DeliveryTransferListener``;
the transfer engine has no knowledge of deliveries.
"""

import secrets
from dataclasses import dataclass, field

from stockcore.config import get_logger
from stockcore.core.entities import (
    Delivery,
    DeliveryEvent,
    DeliveryLine,
    DeliverySource,
    DeliveryStatus,
    FromOrder,
    FromSale,
    LineQuantity,
    OrderStatus,
    SaleStatus,
    Standalone,
    TransferEvent,
    TransferPartiallyReceived,
    TransferPurpose,
    TransferReceived,
    TransferShipped,
)
from stockcore.core.entities.common import utc_now
from stockcore.core.exceptions import (
    ConflictError,
    DocumentNotFoundError,
    OverFulfillmentError,
    ValidationError,
)
from stockcore.core.interfaces import INumberAllocator, IUnitOfWork
from stockcore.core.services.events import EventBus
from stockcore.core.services.fulfillment import (
    DocumentWorkflow,
    OrderWorkflow,
    SaleWorkflow,
)
from stockcore.core.services.ledger import MovementLedger
from stockcore.core.services.numbering import DELIVERY_PREFIX, allocate_unique
from stockcore.core.services.transfer_engine import TransferEngine
from stockcore.core.services.transitions import DELIVERY_GRAPH

logger = get_logger(__name__)

DELIVERED_STATUSES = frozenset({DeliveryStatus.PARTIALLY_DELIVERED, DeliveryStatus.DELIVERED})

# Orders a delivery may not be created from
UNDELIVERABLE_ORDER_STATUSES = frozenset({OrderStatus.DRAFT, OrderStatus.CANCELLED})


@dataclass
class DeliveryPlan:
    """A creation request resolved into the single internal shape."""

    source: DeliverySource
    origin_location_id: int
    destination_location_id: int | None = None
    sale_id: int | None = None
    order_id: int | None = None
    transfer_id: int | None = None
    note: str | None = None
    lines: list[DeliveryLine] = field(default_factory=list)


class DeliveryWorkflow(DocumentWorkflow):
    """Creates deliveries and moves them through their status graph."""

    def __init__(
        self,
        uow: IUnitOfWork,
        ledger: MovementLedger,
        allocator: INumberAllocator,
        transfers: TransferEngine,
        numbering_attempts: int = 5,
    ):
        super().__init__(uow, ledger, allocator, numbering_attempts)
        self._transfers = transfers
        self._sales = SaleWorkflow(uow, ledger, allocator, numbering_attempts)
        self._orders = OrderWorkflow(uow, ledger, allocator, numbering_attempts)

    async def get(self, delivery_id: int) -> Delivery:
        delivery = await self._uow.deliveries.get(delivery_id)
        if delivery is None:
            raise DocumentNotFoundError("Delivery", delivery_id)
        return delivery

    # Creation

    async def create(self, request: FromSale | FromOrder | Standalone) -> Delivery:
        plan = await self.plan(request)
        delivery = await allocate_unique(
            self._allocator,
            DELIVERY_PREFIX,
            lambda number: self._uow.deliveries.create(
                Delivery(
                    number=number,
                    source=plan.source,
                    sale_id=plan.sale_id,
                    order_id=plan.order_id,
                    origin_location_id=plan.origin_location_id,
                    destination_location_id=plan.destination_location_id,
                    transfer_id=plan.transfer_id,
                    tracking_token=secrets.token_urlsafe(16),
                    note=plan.note,
                    lines=plan.lines,
                )
            ),
            attempts=self._numbering_attempts,
        )
        event = await self._uow.deliveries.add_event(
            DeliveryEvent(
                delivery_id=delivery.id,
                type="CREATED",
                status=delivery.status,
                message=plan.note,
                meta={"source": plan.source.value},
            )
        )
        delivery.events.append(event)
        logger.info(
            "delivery_created",
            delivery_id=delivery.id,
            number=delivery.number,
            source=plan.source.value,
            transfer_id=plan.transfer_id,
            lines=len(delivery.lines),
        )
        return delivery

    async def plan(self, request: FromSale | FromOrder | Standalone) -> DeliveryPlan:
        """Resolve a creation variant into a DeliveryPlan."""
        if isinstance(request, FromSale):
            return await self._plan_from_sale(request)
        if isinstance(request, FromOrder):
            return await self._plan_from_order(request)
        return await self._plan_standalone(request)

    async def _plan_from_sale(self, request: FromSale) -> DeliveryPlan:
        sale = await self._sales.get(request.sale_id)
        if sale.status != SaleStatus.POSTED:
            raise ConflictError(
                "Only posted sales can be delivered",
                details={"sale_id": sale.id, "status": sale.status.value},
            )
        lines: list[DeliveryLine] = []
        seen: set[int] = set()
        for submitted in request.lines:
            line = sale.line(submitted.sale_line_id)
            if line is None:
                raise ValidationError("sale_line_id", "line is not part of this sale", submitted.sale_line_id)
            if line.id in seen:
                raise ConflictError(
                    f"Sale line {line.id} submitted more than once",
                    details={"field": "lines", "sale_line_id": line.id},
                )
            seen.add(line.id)
            if submitted.qty > line.remaining:
                raise OverFulfillmentError(line.id, line.qty, line.qty_delivered, submitted.qty)
            lines.append(DeliveryLine(item_id=line.item_id, qty=submitted.qty, sale_line_id=line.id))

        await self._check_transfer_free(request.transfer_id)
        return DeliveryPlan(
            source=DeliverySource.SALE,
            origin_location_id=sale.location_id,
            sale_id=sale.id,
            transfer_id=request.transfer_id,
            note=request.note,
            lines=lines,
        )

    async def _plan_from_order(self, request: FromOrder) -> DeliveryPlan:
        order = await self._orders.get(request.order_id)
        if order.status in UNDELIVERABLE_ORDER_STATUSES:
            raise ConflictError(
                f"Orders in status {order.status.value} cannot be delivered",
                details={"order_id": order.id, "status": order.status.value},
            )
        lines: list[DeliveryLine] = []
        seen: set[int] = set()
        for submitted in request.lines:
            line = order.line(submitted.order_line_id)
            if line is None:
                raise ValidationError("order_line_id", "line is not part of this order", submitted.order_line_id)
            if line.id in seen:
                raise ConflictError(
                    f"Order line {line.id} submitted more than once",
                    details={"field": "lines", "order_line_id": line.id},
                )
            seen.add(line.id)
            if submitted.qty > line.remaining:
                raise OverFulfillmentError(line.id, line.qty, line.qty_delivered, submitted.qty)
            lines.append(DeliveryLine(item_id=line.item_id, qty=submitted.qty, order_line_id=line.id))

        await self._check_transfer_free(request.transfer_id)
        return DeliveryPlan(
            source=DeliverySource.ORDER,
            origin_location_id=order.location_id,
            order_id=order.id,
            transfer_id=request.transfer_id,
            note=request.note,
            lines=lines,
        )

    async def _plan_standalone(self, request: Standalone) -> DeliveryPlan:
        transfer = await self._transfers.create_draft(
            request.origin_location_id,
            request.destination_location_id,
            [LineQuantity(item_id=line.item_id, qty=line.qty) for line in request.lines],
            purpose=TransferPurpose.INTERNAL_DELIVERY,
            note=request.note,
        )
        return DeliveryPlan(
            source=DeliverySource.STANDALONE,
            origin_location_id=request.origin_location_id,
            destination_location_id=request.destination_location_id,
            transfer_id=transfer.id,
            note=request.note,
            lines=[DeliveryLine(item_id=line.item_id, qty=line.qty) for line in transfer.lines],
        )

    async def _check_transfer_free(self, transfer_id: int | None) -> None:
        if transfer_id is None:
            return
        await self._transfers.get(transfer_id)
        linked = await self._uow.deliveries.get_by_transfer(transfer_id)
        if linked is not None:
            raise ConflictError(
                f"Transfer {transfer_id} is already linked to delivery {linked.id}",
                details={"transfer_id": transfer_id, "delivery_id": linked.id},
            )

    # Transitions

    async def set_status(
        self,
        delivery_id: int,
        status: DeliveryStatus,
        message: str | None = None,
    ) -> Delivery:
        delivery = await self.get(delivery_id)
        previous = delivery.status
        DELIVERY_GRAPH.check(previous, status)

        if status in DELIVERED_STATUSES and not delivery.fulfillment_applied:
            await self._apply_fulfillment(delivery)
            delivery.fulfillment_applied = True

        now = utc_now()
        if status == DeliveryStatus.OUT_FOR_DELIVERY and delivery.dispatched_at is None:
            delivery.dispatched_at = now
        if status in DELIVERED_STATUSES and delivery.delivered_at is None:
            delivery.delivered_at = now

        delivery.status = status
        await self._uow.deliveries.update(delivery)
        event = await self._uow.deliveries.add_event(
            DeliveryEvent(
                delivery_id=delivery.id,
                type="STATUS_CHANGED",
                status=status,
                message=message,
                meta={"from": previous.value, "to": status.value},
            )
        )
        delivery.events.append(event)
        logger.info(
            "delivery_status_changed",
            delivery_id=delivery.id,
            previous=previous.value,
            status=status.value,
        )
        return delivery

    async def _apply_fulfillment(self, delivery: Delivery) -> None:
        """Add delivered quantities to the originating lines; check all, then write."""
        if delivery.sale_id is not None:
            sale = await self._sales.get(delivery.sale_id)
            targets = {line.id: line for line in sale.lines}
            line_key = "sale_line_id"
            update = self._uow.sales.update_line_delivered
        elif delivery.order_id is not None:
            order = await self._orders.get(delivery.order_id)
            targets = {line.id: line for line in order.lines}
            line_key = "order_line_id"
            update = self._uow.orders.update_line_delivered
        else:
            return

        pending: dict[int, int] = {}
        for line in delivery.lines:
            target_id = getattr(line, line_key)
            if target_id is None or target_id not in targets:
                raise ValidationError(line_key, "delivery line has no originating line", target_id)
            pending[target_id] = pending.get(target_id, 0) + line.qty

        for target_id, qty in pending.items():
            target = targets[target_id]
            if target.qty_delivered + qty > target.qty:
                raise OverFulfillmentError(target.id, target.qty, target.qty_delivered, qty)

        for target_id, qty in pending.items():
            target = targets[target_id]
            target.qty_delivered += qty
            await update(target.id, target.qty_delivered)

        logger.info(
            "delivery_fulfillment_applied",
            delivery_id=delivery.id,
            sale_id=delivery.sale_id,
            order_id=delivery.order_id,
            lines=len(pending),
        )


class DeliveryTransferListener:
    """Mirrors transfer events onto the delivery linked to the transfer."""

    EVENT_TYPES: dict[type, str] = {
        TransferShipped: "TRANSFER_SHIPPED",
        TransferReceived: "TRANSFER_RECEIVED",
        TransferPartiallyReceived: "TRANSFER_PARTIALLY_RECEIVED",
    }

    async def __call__(self, event: TransferEvent, uow: IUnitOfWork) -> None:
        event_type = self.EVENT_TYPES.get(type(event))
        if event_type is None:
            return
        delivery = await uow.deliveries.get_by_transfer(event.transfer_id)
        if delivery is None:
            return

        meta: dict = {"transfer_id": event.transfer_id, "journey_id": event.journey_id}
        if isinstance(event, TransferReceived):
            meta.update(expected=event.expected, received=event.received, missing=event.missing)
        elif isinstance(event, TransferShipped):
            meta.update(lines=event.lines, quantity=event.quantity)

        await uow.deliveries.add_event(
            DeliveryEvent(
                delivery_id=delivery.id,
                type=event_type,
                status=delivery.status,
                message=event.note,
                meta=meta,
            )
        )
        logger.info("delivery_transfer_event_recorded", delivery_id=delivery.id, type=event_type)


_transfer_listener = DeliveryTransferListener()


def register_delivery_listeners(bus: EventBus) -> EventBus:
    bus.subscribe(TransferEvent, _transfer_listener)
    return bus

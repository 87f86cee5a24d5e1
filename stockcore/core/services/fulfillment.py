"""
Status machines for sales, purchase orders and customer orders.

Every transition loads the document, checks the requested status against
its graph, and only then touches stock or line counters.
"""

from stockcore.config import get_logger
from stockcore.core.entities import (
    LineQuantity,
    Location,
    LocationKind,
    MovementDraft,
    MovementKind,
    Order,
    OrderLine,
    OrderStatus,
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    ReferenceKind,
    Sale,
    SaleLine,
    SaleStatus,
)
from stockcore.core.entities.common import utc_now
from stockcore.core.exceptions import (
    ConflictError,
    DocumentNotFoundError,
    LocationNotFoundError,
    OverFulfillmentError,
    ValidationError,
)
from stockcore.core.interfaces import INumberAllocator, IUnitOfWork
from stockcore.core.services.ledger import MovementLedger
from stockcore.core.services.lines import check_quantity, ensure_items_exist, merge_lines
from stockcore.core.services.numbering import (
    ORDER_PREFIX,
    PURCHASE_ORDER_PREFIX,
    SALE_PREFIX,
    allocate_unique,
)
from stockcore.core.services.transitions import (
    ORDER_GRAPH,
    PURCHASE_ORDER_GRAPH,
    PURCHASE_ORDER_RECEIPT_STATUSES,
    SALE_GRAPH,
)

logger = get_logger(__name__)


class DocumentWorkflow:
    """Shared plumbing for numbered documents."""

    def __init__(
        self,
        uow: IUnitOfWork,
        ledger: MovementLedger,
        allocator: INumberAllocator,
        numbering_attempts: int = 5,
    ):
        self._uow = uow
        self._ledger = ledger
        self._allocator = allocator
        self._numbering_attempts = numbering_attempts

    async def _require_location(self, location_id: int) -> Location:
        location = await self._uow.master.get_location(location_id)
        if location is None:
            raise LocationNotFoundError(location_id)
        if location.is_transit:
            raise ValidationError("location_id", "the in-transit location is managed by transfers", location_id)
        return location

    async def _prepare_lines(self, lines: list[LineQuantity]) -> list[LineQuantity]:
        merged = merge_lines(lines)
        await ensure_items_exist(self._uow, [line.item_id for line in merged])
        return merged


class SaleWorkflow(DocumentWorkflow):
    """Sale: DRAFT -> POSTED | CANCELLED. Posting issues stock."""

    async def get(self, sale_id: int) -> Sale:
        sale = await self._uow.sales.get(sale_id)
        if sale is None:
            raise DocumentNotFoundError("Sale", sale_id)
        return sale

    async def create(
        self,
        location_id: int,
        lines: list[LineQuantity],
        customer_ref: str | None = None,
        note: str | None = None,
    ) -> Sale:
        await self._require_location(location_id)
        merged = await self._prepare_lines(lines)
        sale = await allocate_unique(
            self._allocator,
            SALE_PREFIX,
            lambda number: self._uow.sales.create(
                Sale(
                    number=number,
                    location_id=location_id,
                    customer_ref=customer_ref,
                    note=note,
                    lines=[SaleLine(item_id=line.item_id, qty=line.qty) for line in merged],
                )
            ),
            attempts=self._numbering_attempts,
        )
        logger.info("sale_created", sale_id=sale.id, number=sale.number, lines=len(sale.lines))
        return sale

    async def set_status(self, sale_id: int, status: SaleStatus) -> Sale:
        if status == SaleStatus.POSTED:
            return await self.post(sale_id)
        sale = await self.get(sale_id)
        SALE_GRAPH.check(sale.status, status)
        sale.status = status
        await self._uow.sales.update_status(sale)
        logger.info("sale_status_changed", sale_id=sale_id, status=status.value)
        return sale

    async def post(self, sale_id: int) -> Sale:
        """Issue one OUT per line; every line is checked before any is applied."""
        sale = await self.get(sale_id)
        SALE_GRAPH.check(sale.status, SaleStatus.POSTED)

        await self._ledger.apply_batch(
            [
                MovementDraft(
                    kind=MovementKind.OUT,
                    location_id=sale.location_id,
                    item_id=line.item_id,
                    qty_delta=-line.qty,
                    reference_kind=ReferenceKind.SALE,
                    reference_id=sale.number,
                )
                for line in sale.lines
            ]
        )

        sale.status = SaleStatus.POSTED
        sale.posted_at = utc_now()
        await self._uow.sales.update_status(sale)
        logger.info("sale_posted", sale_id=sale.id, number=sale.number, lines=len(sale.lines))
        return sale


class PurchaseOrderWorkflow(DocumentWorkflow):
    """
    Purchase order status machine.

    DRAFT -> ORDERED -> (PARTIALLY_RECEIVED) -> RECEIVED, CANCELLED from any
    open state. Received statuses are only reached by receiving goods.
    """

    async def get(self, purchase_order_id: int) -> PurchaseOrder:
        order = await self._uow.purchase_orders.get(purchase_order_id)
        if order is None:
            raise DocumentNotFoundError("PurchaseOrder", purchase_order_id)
        return order

    async def create(
        self,
        location_id: int,
        lines: list[LineQuantity],
        supplier_ref: str | None = None,
        note: str | None = None,
    ) -> PurchaseOrder:
        location = await self._require_location(location_id)
        if location.kind == LocationKind.STORE:
            raise ValidationError("location_id", "stores cannot receive purchases directly", location_id)
        merged = await self._prepare_lines(lines)
        order = await allocate_unique(
            self._allocator,
            PURCHASE_ORDER_PREFIX,
            lambda number: self._uow.purchase_orders.create(
                PurchaseOrder(
                    number=number,
                    location_id=location_id,
                    supplier_ref=supplier_ref,
                    note=note,
                    lines=[
                        PurchaseOrderLine(item_id=line.item_id, qty_ordered=line.qty)
                        for line in merged
                    ],
                )
            ),
            attempts=self._numbering_attempts,
        )
        logger.info(
            "purchase_order_created",
            purchase_order_id=order.id,
            number=order.number,
            lines=len(order.lines),
        )
        return order

    async def set_status(self, purchase_order_id: int, status: PurchaseOrderStatus) -> PurchaseOrder:
        order = await self.get(purchase_order_id)
        if status in PURCHASE_ORDER_RECEIPT_STATUSES:
            raise ConflictError(
                f"{status.value} is set by receiving goods, not by hand",
                details={"current": order.status.value, "requested": status.value},
            )
        PURCHASE_ORDER_GRAPH.check(order.status, status)
        order.status = status
        await self._uow.purchase_orders.update_status(order)
        logger.info("purchase_order_status_changed", purchase_order_id=order.id, status=status.value)
        return order

    async def receive(
        self,
        purchase_order_id: int,
        lines: list[LineQuantity],
        note: str | None = None,
    ) -> PurchaseOrder:
        """Receive goods against the order, capped per line at the ordered quantity."""
        order = await self.get(purchase_order_id)
        PURCHASE_ORDER_GRAPH.require(
            order.status, PurchaseOrderStatus.ORDERED, PurchaseOrderStatus.PARTIALLY_RECEIVED
        )
        if not lines:
            raise ValidationError("lines", "at least one line is required")

        receipts: list[tuple[PurchaseOrderLine, int]] = []
        seen: set[int] = set()
        for submitted in lines:
            qty = check_quantity("qty_received", submitted.qty, allow_zero=True)
            line = order.line_for(submitted.item_id)
            if line is None:
                raise ValidationError(
                    "item_id", "item is not part of this purchase order", submitted.item_id
                )
            if submitted.item_id in seen:
                raise ConflictError(
                    f"Item {submitted.item_id} submitted more than once",
                    details={"field": "lines", "item_id": submitted.item_id},
                )
            seen.add(submitted.item_id)
            if qty > line.remaining:
                raise OverFulfillmentError(line.id, line.qty_ordered, line.qty_received, qty)
            if qty > 0:
                receipts.append((line, qty))

        if not receipts:
            raise ValidationError("lines", "nothing to receive")

        await self._ledger.apply_batch(
            [
                MovementDraft(
                    kind=MovementKind.IN,
                    location_id=order.location_id,
                    item_id=line.item_id,
                    qty_delta=qty,
                    reference_kind=ReferenceKind.PURCHASE_RECEIPT,
                    reference_id=order.number,
                    note=note,
                )
                for line, qty in receipts
            ]
        )
        for line, qty in receipts:
            line.qty_received += qty
            await self._uow.purchase_orders.update_line_received(line.id, line.qty_received)

        if all(line.is_complete for line in order.lines):
            next_status = PurchaseOrderStatus.RECEIVED
        else:
            next_status = PurchaseOrderStatus.PARTIALLY_RECEIVED
        PURCHASE_ORDER_GRAPH.check(order.status, next_status)
        order.status = next_status
        await self._uow.purchase_orders.update_status(order)

        logger.info(
            "purchase_order_received",
            purchase_order_id=order.id,
            lines=len(receipts),
            quantity=sum(qty for _, qty in receipts),
            status=next_status.value,
        )
        return order


class OrderWorkflow(DocumentWorkflow):
    """Customer order; delivered quantities come from deliveries."""

    async def get(self, order_id: int) -> Order:
        order = await self._uow.orders.get(order_id)
        if order is None:
            raise DocumentNotFoundError("Order", order_id)
        return order

    async def create(
        self,
        location_id: int,
        lines: list[LineQuantity],
        customer_ref: str | None = None,
        note: str | None = None,
    ) -> Order:
        await self._require_location(location_id)
        merged = await self._prepare_lines(lines)
        order = await allocate_unique(
            self._allocator,
            ORDER_PREFIX,
            lambda number: self._uow.orders.create(
                Order(
                    number=number,
                    location_id=location_id,
                    customer_ref=customer_ref,
                    note=note,
                    lines=[OrderLine(item_id=line.item_id, qty=line.qty) for line in merged],
                )
            ),
            attempts=self._numbering_attempts,
        )
        logger.info("order_created", order_id=order.id, number=order.number, lines=len(order.lines))
        return order

    async def set_status(self, order_id: int, status: OrderStatus) -> Order:
        order = await self.get(order_id)
        ORDER_GRAPH.check(order.status, status)
        order.status = status
        await self._uow.orders.update_status(order)
        logger.info("order_status_changed", order_id=order_id, status=status.value)
        return order

"""
Status graphs for documents.

Each graph lists, per status, the statuses a caller may request next.
Transition functions check the graph before any side effect.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Generic, TypeVar

from stockcore.core.entities import (
    CountStatus,
    DeliveryStatus,
    OrderStatus,
    PurchaseOrderStatus,
    SaleStatus,
    TransferStatus,
)
from stockcore.core.exceptions import IllegalTransitionError

S = TypeVar("S", bound=Enum)


class StatusGraph(Generic[S]):
    """Allowed-transitions table for one document type."""

    def __init__(self, document: str, allowed: Mapping[S, Iterable[S]]):
        self.document = document
        self._allowed: dict[S, frozenset[S]] = {
            status: frozenset(targets) for status, targets in allowed.items()
        }

    def allowed_from(self, current: S) -> frozenset[S]:
        return self._allowed.get(current, frozenset())

    def is_terminal(self, status: S) -> bool:
        return not self.allowed_from(status)

    def can(self, current: S, requested: S) -> bool:
        return requested in self.allowed_from(current)

    def check(self, current: S, requested: S) -> None:
        """Raise IllegalTransitionError unless current -> requested is allowed."""
        if not self.can(current, requested):
            raise IllegalTransitionError(
                self.document,
                current.value,
                requested.value,
                sorted(s.value for s in self.allowed_from(current)),
            )

    def require(self, current: S, *expected: S) -> None:
        """Raise unless the document is in one of the expected statuses.

        Used by operations (ship, receive, post) whose resulting status is
        computed rather than requested.
        """
        if current not in expected:
            raise IllegalTransitionError(
                self.document,
                current.value,
                "/".join(s.value for s in expected),
                sorted(s.value for s in self.allowed_from(current)),
            )


SALE_GRAPH: StatusGraph[SaleStatus] = StatusGraph(
    "Sale",
    {
        SaleStatus.DRAFT: [SaleStatus.POSTED, SaleStatus.CANCELLED],
    },
)

PURCHASE_ORDER_GRAPH: StatusGraph[PurchaseOrderStatus] = StatusGraph(
    "PurchaseOrder",
    {
        PurchaseOrderStatus.DRAFT: [
            PurchaseOrderStatus.ORDERED,
            PurchaseOrderStatus.CANCELLED,
        ],
        PurchaseOrderStatus.ORDERED: [
            PurchaseOrderStatus.PARTIALLY_RECEIVED,
            PurchaseOrderStatus.RECEIVED,
            PurchaseOrderStatus.CANCELLED,
        ],
        PurchaseOrderStatus.PARTIALLY_RECEIVED: [
            PurchaseOrderStatus.PARTIALLY_RECEIVED,
            PurchaseOrderStatus.RECEIVED,
            PurchaseOrderStatus.CANCELLED,
        ],
    },
)

# Statuses only reachable by receiving goods
PURCHASE_ORDER_RECEIPT_STATUSES = frozenset(
    {PurchaseOrderStatus.PARTIALLY_RECEIVED, PurchaseOrderStatus.RECEIVED}
)

DELIVERY_GRAPH: StatusGraph[DeliveryStatus] = StatusGraph(
    "Delivery",
    {
        DeliveryStatus.DRAFT: [DeliveryStatus.PREPARED, DeliveryStatus.CANCELLED],
        DeliveryStatus.PREPARED: [
            DeliveryStatus.OUT_FOR_DELIVERY,
            DeliveryStatus.CANCELLED,
        ],
        DeliveryStatus.OUT_FOR_DELIVERY: [
            DeliveryStatus.PARTIALLY_DELIVERED,
            DeliveryStatus.DELIVERED,
            DeliveryStatus.FAILED,
            DeliveryStatus.CANCELLED,
        ],
        DeliveryStatus.PARTIALLY_DELIVERED: [
            DeliveryStatus.OUT_FOR_DELIVERY,
            DeliveryStatus.DELIVERED,
            DeliveryStatus.FAILED,
            DeliveryStatus.CANCELLED,
        ],
    },
)

ORDER_GRAPH: StatusGraph[OrderStatus] = StatusGraph(
    "Order",
    {
        OrderStatus.DRAFT: [OrderStatus.CONFIRMED, OrderStatus.CANCELLED],
        OrderStatus.CONFIRMED: [OrderStatus.PREPARED, OrderStatus.CANCELLED],
        OrderStatus.PREPARED: [OrderStatus.SHIPPED, OrderStatus.CANCELLED],
        OrderStatus.SHIPPED: [OrderStatus.DELIVERED, OrderStatus.CANCELLED],
    },
)

TRANSFER_GRAPH: StatusGraph[TransferStatus] = StatusGraph(
    "Transfer",
    {
        TransferStatus.DRAFT: [TransferStatus.SHIPPED],
        TransferStatus.SHIPPED: [
            TransferStatus.PARTIALLY_RECEIVED,
            TransferStatus.RECEIVED,
        ],
        TransferStatus.PARTIALLY_RECEIVED: [
            TransferStatus.PARTIALLY_RECEIVED,
            TransferStatus.RECEIVED,
        ],
    },
)

INVENTORY_GRAPH: StatusGraph[CountStatus] = StatusGraph(
    "InventoryCount",
    {
        CountStatus.DRAFT: [CountStatus.POSTED, CountStatus.CANCELLED],
    },
)

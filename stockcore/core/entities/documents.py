"""
Fulfillable documents: sales, purchase orders, orders and deliveries.

Every line carries an ordered quantity and a cumulative fulfilled counter
that never exceeds it.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from stockcore.core.entities.common import utc_now


class SaleStatus(str, Enum):
    DRAFT = "DRAFT"
    POSTED = "POSTED"
    CANCELLED = "CANCELLED"


class PurchaseOrderStatus(str, Enum):
    DRAFT = "DRAFT"
    ORDERED = "ORDERED"
    PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


class OrderStatus(str, Enum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    PREPARED = "PREPARED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class DeliveryStatus(str, Enum):
    DRAFT = "DRAFT"
    PREPARED = "PREPARED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    PARTIALLY_DELIVERED = "PARTIALLY_DELIVERED"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class DeliverySource(str, Enum):
    SALE = "SALE"
    ORDER = "ORDER"
    STANDALONE = "STANDALONE"


# Sale
class SaleLine(BaseModel):
    id: int | None = None
    sale_id: int | None = None
    item_id: int
    qty: int = Field(gt=0)
    qty_delivered: int = Field(default=0, ge=0)

    @property
    def remaining(self) -> int:
        return self.qty - self.qty_delivered


class Sale(BaseModel):
    """Sale at a location; posting issues the stock."""

    id: int | None = None
    number: str
    status: SaleStatus = SaleStatus.DRAFT
    location_id: int
    customer_ref: str | None = None
    note: str | None = None
    posted_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    lines: list[SaleLine] = Field(default_factory=list)

    def line(self, line_id: int) -> SaleLine | None:
        return next((line for line in self.lines if line.id == line_id), None)


# Purchase order
class PurchaseOrderLine(BaseModel):
    id: int | None = None
    purchase_order_id: int | None = None
    item_id: int
    qty_ordered: int = Field(gt=0)
    qty_received: int = Field(default=0, ge=0)

    @property
    def remaining(self) -> int:
        return self.qty_ordered - self.qty_received

    @property
    def is_complete(self) -> bool:
        return self.qty_received >= self.qty_ordered


class PurchaseOrder(BaseModel):
    """Supplier order received into a location."""

    id: int | None = None
    number: str
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    location_id: int
    supplier_ref: str | None = None
    note: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    lines: list[PurchaseOrderLine] = Field(default_factory=list)

    def line_for(self, item_id: int) -> PurchaseOrderLine | None:
        return next((line for line in self.lines if line.item_id == item_id), None)


# Order
class OrderLine(BaseModel):
    id: int | None = None
    order_id: int | None = None
    item_id: int
    qty: int = Field(gt=0)
    qty_delivered: int = Field(default=0, ge=0)

    @property
    def remaining(self) -> int:
        return self.qty - self.qty_delivered


class Order(BaseModel):
    """Customer order; fulfilled through deliveries."""

    id: int | None = None
    number: str
    status: OrderStatus = OrderStatus.DRAFT
    location_id: int
    customer_ref: str | None = None
    note: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    lines: list[OrderLine] = Field(default_factory=list)

    def line(self, line_id: int) -> OrderLine | None:
        return next((line for line in self.lines if line.id == line_id), None)


# Delivery
class DeliveryLine(BaseModel):
    id: int | None = None
    delivery_id: int | None = None
    item_id: int
    qty: int = Field(gt=0)
    sale_line_id: int | None = None
    order_line_id: int | None = None


class DeliveryEvent(BaseModel):
    """Audit trail entry on a delivery."""

    id: int | None = None
    delivery_id: int
    type: str
    status: DeliveryStatus | None = None
    message: str | None = None
    meta: dict[str, Any] | None = None
    created_at: datetime = Field(default_factory=utc_now)


class Delivery(BaseModel):
    """Delivery of goods from a sale, an order, or between locations."""

    id: int | None = None
    number: str
    status: DeliveryStatus = DeliveryStatus.DRAFT
    source: DeliverySource
    sale_id: int | None = None
    order_id: int | None = None
    origin_location_id: int
    destination_location_id: int | None = None
    transfer_id: int | None = None
    tracking_token: str
    fulfillment_applied: bool = False
    note: str | None = None
    dispatched_at: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    lines: list[DeliveryLine] = Field(default_factory=list)
    events: list[DeliveryEvent] = Field(default_factory=list)


# Delivery creation shapes
class SaleDeliveryLine(BaseModel):
    sale_line_id: int
    qty: int = Field(gt=0)


class OrderDeliveryLine(BaseModel):
    order_line_id: int
    qty: int = Field(gt=0)


class ItemDeliveryLine(BaseModel):
    item_id: int
    qty: int = Field(gt=0)


class FromSale(BaseModel):
    kind: Literal["from_sale"] = "from_sale"
    sale_id: int
    lines: list[SaleDeliveryLine] = Field(min_length=1)
    transfer_id: int | None = None
    note: str | None = None


class FromOrder(BaseModel):
    kind: Literal["from_order"] = "from_order"
    order_id: int
    lines: list[OrderDeliveryLine] = Field(min_length=1)
    transfer_id: int | None = None
    note: str | None = None


class Standalone(BaseModel):
    kind: Literal["standalone"] = "standalone"
    origin_location_id: int
    destination_location_id: int
    lines: list[ItemDeliveryLine] = Field(min_length=1)
    note: str | None = None


DeliveryRequestSource = Annotated[
    FromSale | FromOrder | Standalone,
    Field(discriminator="kind"),
]

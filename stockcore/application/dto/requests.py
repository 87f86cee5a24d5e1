"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from pydantic import BaseModel, Field

from stockcore.core.entities import (
    CountLineStatus,
    CountMode,
    DeliveryRequestSource,
    DeliveryStatus,
    LineQuantity,
    MovementKind,
    OrderStatus,
    PurchaseOrderStatus,
    ReferenceKind,
    TransferPurpose,
)


class LineRequest(BaseModel):
    """Item and quantity on a document line."""

    item_id: int = Field(..., description="Item ID")
    qty: int = Field(..., description="Quantity in units", examples=[4])
    note: str | None = Field(default=None, description="Line note")

    def to_line(self) -> LineQuantity:
        return LineQuantity(item_id=self.item_id, qty=self.qty, note=self.note)


def to_lines(lines: list[LineRequest]) -> list[LineQuantity]:
    return [line.to_line() for line in lines]


# Ledger


class ApplyMovementRequest(BaseModel):
    """Request for a single ledger movement."""

    kind: MovementKind = Field(..., description="IN, OUT or ADJUST")
    location_id: int = Field(..., description="Location ID")
    item_id: int = Field(..., description="Item ID")
    qty_delta: int = Field(
        ...,
        description="Signed quantity: > 0 for IN, < 0 for OUT, non-zero for ADJUST",
        examples=[10, -3],
    )
    reference_kind: ReferenceKind = Field(..., description="Business reason")
    reference_id: str | None = Field(default=None, description="External reference")
    note: str | None = Field(
        default=None,
        description="Required for CORRECTION and LOSS",
    )


class RecordReturnRequest(BaseModel):
    location_id: int
    item_id: int
    qty: int = Field(..., description="Returned units", examples=[1])
    reason: str | None = Field(default=None, description="Why the customer returned it")
    reference_id: str | None = None


class RecordLossRequest(BaseModel):
    location_id: int
    item_id: int
    qty: int = Field(..., description="Lost units", examples=[2])
    note: str = Field(..., description="What happened")
    loss_type: str | None = Field(
        default=None,
        description="Kind of loss",
        examples=["breakage", "theft", "expiry"],
    )
    reference_id: str | None = None


class SetStockLevelRequest(BaseModel):
    """Legacy absolute stock correction."""

    location_id: int
    item_id: int
    counted_qty: int = Field(..., description="Quantity physically on hand")
    note: str = Field(..., description="Reason for the correction")


# Transfers


class CreateTransferRequest(BaseModel):
    """Request for a transfer draft or a two-leg journey."""

    source_location_id: int = Field(..., description="Location the stock leaves")
    destination_location_id: int = Field(..., description="Location the stock arrives at")
    lines: list[LineRequest] = Field(..., description="Requested items")
    purpose: TransferPurpose = Field(default=TransferPurpose.INTERNAL_DELIVERY)
    note: str | None = None


class ShipTransferRequest(BaseModel):
    note: str | None = None


class ReceiveTransferRequest(BaseModel):
    """Quantities arriving now; omitted items receive nothing."""

    lines: list[LineRequest] = Field(..., description="Received quantities per item")
    note: str | None = None


# Inventory counts


class CreateInventoryRequest(BaseModel):
    location_id: int = Field(..., description="Location being counted")
    mode: CountMode = Field(default=CountMode.FULL)
    category_id: int | None = Field(default=None, description="Required for BY_CATEGORY")
    note: str | None = None


class GenerateLinesRequest(BaseModel):
    """Overrides applied when snapshotting lines."""

    mode: CountMode | None = None
    category_id: int | None = None
    item_ids: list[int] | None = Field(
        default=None,
        description="Explicit selection for FREE mode (all active items when omitted)",
    )


class RecordCountRequest(BaseModel):
    """Count for one line.

    Leaving counted_qty out keeps the current count; sending null clears it.
    """

    counted_qty: int | None = Field(default=None, description="Counted units")
    status: CountLineStatus | None = Field(
        default=None,
        description="Explicit line status (inferred from counted_qty when omitted)",
    )
    note: str | None = None


class PostInventoryRequest(BaseModel):
    note: str = Field(..., description="Posting note", examples=["Quarterly count"])
    posted_by: str | None = Field(default=None, description="Who posted the count")


# Documents


class CreateSaleRequest(BaseModel):
    location_id: int
    lines: list[LineRequest]
    customer_ref: str | None = None
    note: str | None = None


class CreatePurchaseOrderRequest(BaseModel):
    location_id: int = Field(..., description="Depot receiving the goods")
    lines: list[LineRequest]
    supplier_ref: str | None = None
    note: str | None = None


class SetPurchaseOrderStatusRequest(BaseModel):
    status: PurchaseOrderStatus


class ReceivePurchaseOrderRequest(BaseModel):
    lines: list[LineRequest] = Field(..., description="Received quantities per item")
    note: str | None = None


class CreateOrderRequest(BaseModel):
    location_id: int
    lines: list[LineRequest]
    customer_ref: str | None = None
    note: str | None = None


class SetOrderStatusRequest(BaseModel):
    status: OrderStatus


class CreateDeliveryRequest(BaseModel):
    """Delivery creation; ``source.kind`` selects the variant."""

    source: DeliveryRequestSource


class SetDeliveryStatusRequest(BaseModel):
    status: DeliveryStatus
    message: str | None = Field(default=None, description="Recorded on the status event")

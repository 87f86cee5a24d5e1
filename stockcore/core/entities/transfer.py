"""Transfer documents and their lines."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from stockcore.core.entities.common import utc_now


class TransferStatus(str, Enum):
    DRAFT = "DRAFT"
    SHIPPED = "SHIPPED"
    PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED"
    RECEIVED = "RECEIVED"


class TransferPurpose(str, Enum):
    INTERNAL_DELIVERY = "INTERNAL_DELIVERY"
    REPLENISHMENT = "REPLENISHMENT"
    RETURN = "RETURN"
    OTHER = "OTHER"


class TransferLine(BaseModel):
    """Requested quantity of one item and how much of it arrived."""

    id: int | None = None
    transfer_id: int | None = None
    item_id: int
    qty_requested: int = Field(gt=0)
    qty_received: int = Field(default=0, ge=0)
    note: str | None = None

    @property
    def remaining(self) -> int:
        return self.qty_requested - self.qty_received

    @property
    def is_complete(self) -> bool:
        return self.qty_received >= self.qty_requested


class Transfer(BaseModel):
    """One leg moving stock from a source to a destination location."""

    id: int | None = None
    status: TransferStatus = TransferStatus.DRAFT
    source_location_id: int
    destination_location_id: int
    journey_id: str | None = None
    purpose: TransferPurpose = TransferPurpose.INTERNAL_DELIVERY
    note: str | None = None
    shipped_at: datetime | None = None
    received_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    lines: list[TransferLine] = Field(default_factory=list)

    def line_for(self, item_id: int) -> TransferLine | None:
        for line in self.lines:
            if line.item_id == item_id:
                return line
        return None

    @property
    def total_requested(self) -> int:
        return sum(line.qty_requested for line in self.lines)

    @property
    def total_received(self) -> int:
        return sum(line.qty_received for line in self.lines)


class Journey(BaseModel):
    """Two transfer legs linked through the in-transit location."""

    journey_id: str
    outbound: Transfer
    inbound: Transfer

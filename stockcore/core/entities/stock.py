"""Balance and movement ledger entities."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from stockcore.core.entities.common import utc_now


class MovementKind(str, Enum):
    """Types of stock movements."""

    IN = "IN"
    OUT = "OUT"
    ADJUST = "ADJUST"


class ReferenceKind(str, Enum):
    """Business reason recorded on a movement."""

    SALE = "SALE"
    PURCHASE_RECEIPT = "PURCHASE_RECEIPT"
    TRANSFER = "TRANSFER"
    INVENTORY = "INVENTORY"
    CORRECTION = "CORRECTION"
    RETURN = "RETURN"
    LOSS = "LOSS"
    LEGACY_INVENTORY = "LEGACY_INVENTORY"
    MANUAL = "MANUAL"


# References that must carry a note
NOTE_REQUIRED_REFERENCES = frozenset({ReferenceKind.CORRECTION, ReferenceKind.LOSS})

# References a retail store may not receive directly
STORE_FORBIDDEN_REFERENCES = frozenset({ReferenceKind.PURCHASE_RECEIPT})


class Balance(BaseModel):
    """On-hand quantity of one item at one location."""

    location_id: int
    item_id: int
    quantity: int = Field(default=0, ge=0)
    updated_at: datetime = Field(default_factory=utc_now)


class Movement(BaseModel):
    """Immutable ledger entry; sign of qty_delta follows kind."""

    id: int | None = None
    kind: MovementKind
    location_id: int
    item_id: int
    qty_delta: int
    reference_kind: ReferenceKind
    reference_id: str | None = None
    transfer_id: int | None = None
    inventory_id: int | None = None
    note: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


@dataclass
class MovementDraft:
    """A movement requested by a caller, not yet applied."""

    kind: MovementKind
    location_id: int
    item_id: int
    qty_delta: int
    reference_kind: ReferenceKind
    reference_id: str | None = None
    note: str | None = None
    transfer_id: int | None = None
    inventory_id: int | None = None


@dataclass
class LineQuantity:
    """Item and quantity pair submitted for a document line."""

    item_id: int
    qty: int
    note: str | None = None


@dataclass
class MovementResult:
    """Balance after a movement together with the movement itself."""

    balance: Balance
    movement: Movement | None

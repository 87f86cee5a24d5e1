"""Physical inventory count documents."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from stockcore.core.entities.common import utc_now


class CountStatus(str, Enum):
    DRAFT = "DRAFT"
    POSTED = "POSTED"
    CANCELLED = "CANCELLED"


class CountMode(str, Enum):
    FULL = "FULL"
    BY_CATEGORY = "BY_CATEGORY"
    FREE = "FREE"


class CountLineStatus(str, Enum):
    PENDING = "PENDING"
    COUNTED = "COUNTED"
    SKIPPED = "SKIPPED"


class InventoryLine(BaseModel):
    """Expected vs counted quantity for one item."""

    id: int | None = None
    inventory_id: int | None = None
    item_id: int
    expected_qty: int = Field(default=0, ge=0)
    counted_qty: int | None = Field(default=None, ge=0)
    delta: int = 0
    status: CountLineStatus = CountLineStatus.PENDING
    note: str | None = None

    @property
    def is_postable(self) -> bool:
        return self.counted_qty is not None and self.status != CountLineStatus.SKIPPED


class InventoryCount(BaseModel):
    """Count document: generate lines, record counts, post."""

    id: int | None = None
    number: str
    status: CountStatus = CountStatus.DRAFT
    mode: CountMode = CountMode.FULL
    location_id: int
    category_id: int | None = None
    note: str | None = None
    posted_at: datetime | None = None
    posted_by: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    lines: list[InventoryLine] = Field(default_factory=list)

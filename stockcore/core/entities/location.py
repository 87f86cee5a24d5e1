"""Location and item master data, as seen by the stock engine."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from stockcore.core.entities.common import utc_now


class LocationKind(str, Enum):
    """Kinds of places stock can be held."""

    DEPOT = "DEPOT"
    STORE = "STORE"
    IN_TRANSIT = "IN_TRANSIT"


class Location(BaseModel):
    """A warehouse-like node holding stock."""

    id: int | None = None
    code: str
    name: str
    kind: LocationKind = LocationKind.DEPOT
    active: bool = True
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_transit(self) -> bool:
        return self.kind == LocationKind.IN_TRANSIT


@dataclass(frozen=True)
class TransitLocation:
    """Handle on the single system-managed in-transit location.

    Resolved once at startup; engine code compares location ids against
    it instead of looking the location up by code.
    """

    id: int
    code: str

    def matches(self, location_id: int | None) -> bool:
        return location_id == self.id


class Category(BaseModel):
    """Item category (master data)."""

    id: int | None = None
    name: str


class Item(BaseModel):
    """A stock-keeping unit."""

    id: int | None = None
    sku: str
    name: str
    category_id: int | None = None
    active: bool = True
    created_at: datetime = Field(default_factory=utc_now)

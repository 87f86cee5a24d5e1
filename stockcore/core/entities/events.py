"""Domain events emitted by the transfer engine."""

from dataclasses import dataclass, field
from datetime import datetime

from stockcore.core.entities.common import utc_now


@dataclass(frozen=True)
class TransferEvent:
    transfer_id: int
    journey_id: str | None
    note: str | None = None
    occurred_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class TransferShipped(TransferEvent):
    lines: int = 0
    quantity: int = 0


@dataclass(frozen=True)
class TransferReceived(TransferEvent):
    """Every line of the transfer has fully arrived."""

    expected: int = 0
    received: int = 0
    missing: int = 0


@dataclass(frozen=True)
class TransferPartiallyReceived(TransferReceived):
    pass

"""
Document numbering.

Numbers look like ``PREFIX-YYYYMMDD-XXXXXX``. Storage enforces uniqueness;
``allocate_unique`` retries a bounded number of times on collision.
"""

import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TypeVar

from stockcore.config import get_logger
from stockcore.core.exceptions import DuplicateNumberError, NumberingExhaustedError
from stockcore.core.interfaces import INumberAllocator

logger = get_logger(__name__)

T = TypeVar("T")

SALE_PREFIX = "SA"
PURCHASE_ORDER_PREFIX = "PO"
ORDER_PREFIX = "OR"
DELIVERY_PREFIX = "DL"
INVENTORY_PREFIX = "INV"


class DatedUUIDNumberAllocator(INumberAllocator):
    """Date plus a random UUID-derived suffix."""

    def __init__(self, suffix_length: int = 6):
        self.suffix_length = suffix_length

    def next_number(self, prefix: str) -> str:
        day = datetime.now(UTC).strftime("%Y%m%d")
        suffix = uuid.uuid4().hex[: self.suffix_length].upper()
        return f"{prefix}-{day}-{suffix}"


async def allocate_unique(
    allocator: INumberAllocator,
    prefix: str,
    create: Callable[[str], Awaitable[T]],
    attempts: int = 5,
) -> T:
    """
    Create a document under a freshly allocated number.

    Args:
        allocator: Number source
        prefix: Document prefix (SA, PO, ...)
        create: Coroutine factory persisting the document with a number
        attempts: Maximum numbers tried before giving up

    Raises:
        NumberingExhaustedError: Every attempted number collided
    """
    for attempt in range(1, attempts + 1):
        number = allocator.next_number(prefix)
        try:
            return await create(number)
        except DuplicateNumberError:
            logger.warning("document_number_collision", prefix=prefix, number=number, attempt=attempt)

    raise NumberingExhaustedError(prefix, attempts)

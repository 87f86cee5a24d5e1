"""
Inventory count workflow: create, generate lines, record counts, post.

Posting reconciles each counted line against the balance as it stands at
post time, not the expected quantity captured when lines were generated.
"""

from typing import Any

from stockcore.config import get_logger
from stockcore.core.entities import (
    CountLineStatus,
    CountMode,
    CountStatus,
    InventoryCount,
    InventoryLine,
    Item,
    ReferenceKind,
)
from stockcore.core.entities.common import utc_now
from stockcore.core.exceptions import (
    CategoryNotFoundError,
    ConflictError,
    DocumentNotFoundError,
    ItemNotFoundError,
    LocationNotFoundError,
    ValidationError,
)
from stockcore.core.interfaces import INumberAllocator, IUnitOfWork
from stockcore.core.services.ledger import MovementLedger
from stockcore.core.services.numbering import INVENTORY_PREFIX, allocate_unique
from stockcore.core.services.transitions import INVENTORY_GRAPH

logger = get_logger(__name__)

UNSET: Any = object()


class InventoryCounter:
    """Runs count documents through DRAFT -> POSTED / CANCELLED."""

    def __init__(
        self,
        uow: IUnitOfWork,
        ledger: MovementLedger,
        allocator: INumberAllocator,
        numbering_attempts: int = 5,
        note_min_length: int = 3,
        note_max_length: int = 255,
    ):
        self._uow = uow
        self._ledger = ledger
        self._allocator = allocator
        self._numbering_attempts = numbering_attempts
        self._note_min = note_min_length
        self._note_max = note_max_length

    async def get(self, inventory_id: int) -> InventoryCount:
        count = await self._uow.inventories.get(inventory_id)
        if count is None:
            raise DocumentNotFoundError("InventoryCount", inventory_id)
        return count

    async def create(
        self,
        location_id: int,
        mode: CountMode = CountMode.FULL,
        category_id: int | None = None,
        note: str | None = None,
    ) -> InventoryCount:
        location = await self._uow.master.get_location(location_id)
        if location is None:
            raise LocationNotFoundError(location_id)
        if location.is_transit:
            raise ValidationError("location_id", "the in-transit location cannot be counted", location_id)
        category_id = await self._resolve_category(mode, category_id)

        count = await allocate_unique(
            self._allocator,
            INVENTORY_PREFIX,
            lambda number: self._uow.inventories.create(
                InventoryCount(
                    number=number,
                    mode=mode,
                    location_id=location_id,
                    category_id=category_id,
                    note=note,
                )
            ),
            attempts=self._numbering_attempts,
        )
        logger.info(
            "inventory_count_created",
            inventory_id=count.id,
            number=count.number,
            location_id=location_id,
            mode=mode.value,
        )
        return count

    async def generate_lines(
        self,
        inventory_id: int,
        mode: CountMode | None = None,
        category_id: int | None = None,
        item_ids: list[int] | None = None,
    ) -> int:
        """
        Snapshot expected quantities into PENDING lines.

        Runs once per document; a second call raises ConflictError and
        adds nothing.
        """
        count = await self.get(inventory_id)
        INVENTORY_GRAPH.require(count.status, CountStatus.DRAFT)

        existing = await self._uow.inventories.count_lines(inventory_id)
        if existing > 0:
            raise ConflictError(
                "Lines already generated",
                details={"inventory_id": inventory_id, "lines": existing},
            )

        mode = mode or count.mode
        category_id = await self._resolve_category(mode, category_id or count.category_id)
        items = await self._select_items(mode, category_id, item_ids)

        item_id_list = [item.id for item in items]
        expected = await self._ledger.get_balances(count.location_id, item_id_list)
        lines = [
            InventoryLine(item_id=item_id, expected_qty=expected[item_id])
            for item_id in item_id_list
        ]
        created = await self._uow.inventories.add_lines(inventory_id, lines) if lines else 0

        count.mode = mode
        count.category_id = category_id
        await self._uow.inventories.update_header(count)

        logger.info(
            "inventory_lines_generated",
            inventory_id=inventory_id,
            mode=mode.value,
            category_id=category_id,
            lines=created,
        )
        return created

    async def record_count(
        self,
        inventory_id: int,
        line_id: int,
        counted_qty: int | None = UNSET,
        status: CountLineStatus | None = None,
        note: str | None = None,
    ) -> InventoryLine:
        """Record a count on one line.

        Passing counted_qty=None clears an earlier count; leaving it out
        keeps the current value.
        """
        count = await self.get(inventory_id)
        INVENTORY_GRAPH.require(count.status, CountStatus.DRAFT)

        line = await self._uow.inventories.get_line(inventory_id, line_id)
        if line is None:
            raise DocumentNotFoundError("InventoryLine", line_id)

        next_counted = line.counted_qty if counted_qty is UNSET else counted_qty
        if next_counted is not None and (
            isinstance(next_counted, bool) or not isinstance(next_counted, int) or next_counted < 0
        ):
            raise ValidationError("counted_qty", "must be a non-negative integer", next_counted)

        line.counted_qty = next_counted
        line.delta = next_counted - line.expected_qty if next_counted is not None else 0
        if status is not None:
            line.status = status
        else:
            line.status = CountLineStatus.COUNTED if next_counted is not None else CountLineStatus.PENDING
        if note is not None:
            line.note = note

        updated = await self._uow.inventories.update_line(line)
        logger.info(
            "inventory_count_recorded",
            inventory_id=inventory_id,
            line_id=line_id,
            counted_qty=updated.counted_qty,
            delta=updated.delta,
            status=updated.status.value,
        )
        return updated

    async def post(
        self,
        inventory_id: int,
        note: str,
        posted_by: str | None = None,
    ) -> InventoryCount:
        """Reconcile every counted line through the ledger and close the document."""
        count = await self.get(inventory_id)
        INVENTORY_GRAPH.check(count.status, CountStatus.POSTED)

        note = (note or "").strip()
        if not self._note_min <= len(note) <= self._note_max:
            raise ValidationError(
                "note",
                f"must be between {self._note_min} and {self._note_max} characters",
                note,
            )
        if not count.lines:
            raise ValidationError("lines", "the count has no lines")

        postable = [line for line in count.lines if line.is_postable]
        if not postable:
            raise ValidationError("lines", "nothing counted")

        adjusted = 0
        for line in postable:
            result = await self._ledger.reconcile(
                count.location_id,
                line.item_id,
                line.counted_qty,
                ReferenceKind.INVENTORY,
                reference_id=count.number,
                note=note,
                inventory_id=count.id,
            )
            if result.movement is not None:
                adjusted += 1

        count.status = CountStatus.POSTED
        count.posted_at = utc_now()
        count.posted_by = posted_by
        count.note = note
        await self._uow.inventories.update_header(count)

        logger.info(
            "inventory_count_posted",
            inventory_id=inventory_id,
            counted=len(postable),
            adjusted=adjusted,
            posted_by=posted_by,
        )
        return count

    async def cancel(self, inventory_id: int) -> InventoryCount:
        count = await self.get(inventory_id)
        INVENTORY_GRAPH.check(count.status, CountStatus.CANCELLED)
        count.status = CountStatus.CANCELLED
        await self._uow.inventories.update_header(count)
        logger.info("inventory_count_cancelled", inventory_id=inventory_id)
        return count

    async def _resolve_category(self, mode: CountMode, category_id: int | None) -> int | None:
        if mode != CountMode.BY_CATEGORY:
            return None
        if category_id is None:
            raise ValidationError("category_id", "is required for a count by category")
        if await self._uow.master.get_category(category_id) is None:
            raise CategoryNotFoundError(category_id)
        return category_id

    async def _select_items(
        self,
        mode: CountMode,
        category_id: int | None,
        item_ids: list[int] | None,
    ) -> list[Item]:
        if mode == CountMode.FREE and item_ids:
            wanted = list(dict.fromkeys(item_ids))
            found = await self._uow.master.get_items(wanted)
            for item_id in wanted:
                if item_id not in found:
                    raise ItemNotFoundError(item_id)
            return [found[item_id] for item_id in wanted]
        if mode == CountMode.BY_CATEGORY:
            return await self._uow.master.list_active_items(category_id=category_id)
        return await self._uow.master.list_active_items()

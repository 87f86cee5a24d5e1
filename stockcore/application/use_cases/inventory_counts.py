"""Inventory count use cases."""

from stockcore.application.dto.requests import (
    CreateInventoryRequest,
    GenerateLinesRequest,
    PostInventoryRequest,
    RecordCountRequest,
)
from stockcore.application.use_cases.base import StockUseCase
from stockcore.config import get_logger
from stockcore.core.entities import InventoryCount, InventoryLine

logger = get_logger(__name__)


class CreateInventoryUseCase(StockUseCase):
    async def execute(self, request: CreateInventoryRequest) -> InventoryCount:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            counter = await self._inventory_counter(uow)
            return await counter.create(
                request.location_id,
                mode=request.mode,
                category_id=request.category_id,
                note=request.note,
            )


class GenerateInventoryLinesUseCase(StockUseCase):
    """Snapshot expected quantities; only once per document."""

    async def execute(
        self,
        inventory_id: int,
        request: GenerateLinesRequest | None = None,
    ) -> int:
        request = request or GenerateLinesRequest()
        factory = await self._get_uow_factory()
        async with factory() as uow:
            counter = await self._inventory_counter(uow)
            return await counter.generate_lines(
                inventory_id,
                mode=request.mode,
                category_id=request.category_id,
                item_ids=request.item_ids,
            )


class RecordInventoryCountUseCase(StockUseCase):
    async def execute(
        self,
        inventory_id: int,
        line_id: int,
        request: RecordCountRequest,
    ) -> InventoryLine:
        # Omitted keeps the current count; explicit null clears it
        kwargs = {}
        if "counted_qty" in request.model_fields_set:
            kwargs["counted_qty"] = request.counted_qty

        factory = await self._get_uow_factory()
        async with factory() as uow:
            counter = await self._inventory_counter(uow)
            return await counter.record_count(
                inventory_id,
                line_id,
                status=request.status,
                note=request.note,
                **kwargs,
            )


class PostInventoryUseCase(StockUseCase):
    """Reconcile counted lines through the ledger and close the count."""

    async def execute(self, inventory_id: int, request: PostInventoryRequest) -> InventoryCount:
        logger.info("post_inventory_started", inventory_id=inventory_id)
        factory = await self._get_uow_factory()
        async with factory() as uow:
            counter = await self._inventory_counter(uow)
            count = await counter.post(inventory_id, request.note, posted_by=request.posted_by)
        logger.info("post_inventory_complete", inventory_id=inventory_id, number=count.number)
        return count


class CancelInventoryUseCase(StockUseCase):
    async def execute(self, inventory_id: int) -> InventoryCount:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            counter = await self._inventory_counter(uow)
            return await counter.cancel(inventory_id)


class InventoryQueryUseCase(StockUseCase):
    async def get(self, inventory_id: int) -> InventoryCount:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            counter = await self._inventory_counter(uow)
            return await counter.get(inventory_id)

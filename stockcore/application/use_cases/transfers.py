"""Transfer use cases: drafts, journeys, shipping and receiving."""

from stockcore.application.dto.requests import (
    CreateTransferRequest,
    ReceiveTransferRequest,
    ShipTransferRequest,
    to_lines,
)
from stockcore.application.use_cases.base import StockUseCase
from stockcore.config import get_logger
from stockcore.core.entities import Journey, Transfer

logger = get_logger(__name__)


class CreateTransferDraftUseCase(StockUseCase):
    """Create a single DRAFT leg between two user-facing locations."""

    async def execute(self, request: CreateTransferRequest) -> Transfer:
        logger.info(
            "create_transfer_started",
            source_location_id=request.source_location_id,
            destination_location_id=request.destination_location_id,
            lines=len(request.lines),
        )
        factory = await self._get_uow_factory()
        async with factory() as uow:
            engine = await self._transfer_engine(uow)
            transfer = await engine.create_draft(
                request.source_location_id,
                request.destination_location_id,
                to_lines(request.lines),
                purpose=request.purpose,
                note=request.note,
            )
        logger.info("create_transfer_complete", transfer_id=transfer.id)
        return transfer


class CreateJourneyUseCase(StockUseCase):
    """Create both legs of a source -> transit -> destination journey."""

    async def execute(self, request: CreateTransferRequest) -> Journey:
        logger.info(
            "create_journey_started",
            source_location_id=request.source_location_id,
            destination_location_id=request.destination_location_id,
            lines=len(request.lines),
        )
        factory = await self._get_uow_factory()
        async with factory() as uow:
            engine = await self._transfer_engine(uow)
            journey = await engine.create_journey(
                request.source_location_id,
                request.destination_location_id,
                to_lines(request.lines),
                purpose=request.purpose,
                note=request.note,
            )
        logger.info("create_journey_complete", journey_id=journey.journey_id)
        return journey


class ShipTransferUseCase(StockUseCase):
    async def execute(self, transfer_id: int, request: ShipTransferRequest | None = None) -> Transfer:
        note = request.note if request else None
        factory = await self._get_uow_factory()
        async with factory() as uow:
            engine = await self._transfer_engine(uow)
            return await engine.ship(transfer_id, note=note)


class ReceiveTransferUseCase(StockUseCase):
    async def execute(self, transfer_id: int, request: ReceiveTransferRequest) -> Transfer:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            engine = await self._transfer_engine(uow)
            return await engine.receive(transfer_id, to_lines(request.lines), note=request.note)


class PostTransferUseCase(StockUseCase):
    """One-shot direct transfer: create, ship and receive in full."""

    async def execute(self, request: CreateTransferRequest) -> Transfer:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            engine = await self._transfer_engine(uow)
            transfer = await engine.post_direct(
                request.source_location_id,
                request.destination_location_id,
                to_lines(request.lines),
                purpose=request.purpose,
                note=request.note,
            )
        logger.info("transfer_posted", transfer_id=transfer.id)
        return transfer


class TransferQueryUseCase(StockUseCase):
    async def get(self, transfer_id: int) -> Transfer:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            engine = await self._transfer_engine(uow)
            return await engine.get(transfer_id)

    async def list_recent(self, limit: int | None = None) -> list[Transfer]:
        cap = self.settings.stock.transfer_list_limit
        limit = cap if limit is None else max(1, min(limit, cap))
        factory = await self._get_uow_factory()
        async with factory() as uow:
            engine = await self._transfer_engine(uow)
            return await engine.list_recent(limit=limit)

    async def get_journey(self, journey_id: str) -> Journey:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            engine = await self._transfer_engine(uow)
            return await engine.get_journey(journey_id)

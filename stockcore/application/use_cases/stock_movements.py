"""Ledger write use cases: movements, returns, losses and stock corrections."""

from stockcore.application.dto.requests import (
    ApplyMovementRequest,
    RecordLossRequest,
    RecordReturnRequest,
    SetStockLevelRequest,
)
from stockcore.application.use_cases.base import StockUseCase
from stockcore.config import get_logger
from stockcore.core.entities import MovementResult

logger = get_logger(__name__)


class ApplyMovementUseCase(StockUseCase):
    """Apply one IN, OUT or ADJUST movement to a balance."""

    async def execute(self, request: ApplyMovementRequest) -> MovementResult:
        logger.info(
            "apply_movement_started",
            kind=request.kind.value,
            location_id=request.location_id,
            item_id=request.item_id,
            qty_delta=request.qty_delta,
        )
        factory = await self._get_uow_factory()
        async with factory() as uow:
            ledger = await self._ledger(uow)
            result = await ledger.apply_movement(
                request.kind,
                request.location_id,
                request.item_id,
                request.qty_delta,
                request.reference_kind,
                reference_id=request.reference_id,
                note=request.note,
            )

        logger.info(
            "apply_movement_complete",
            movement_id=result.movement.id if result.movement else None,
            quantity=result.balance.quantity,
        )
        return result


class RecordReturnUseCase(StockUseCase):
    async def execute(self, request: RecordReturnRequest) -> MovementResult:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            ledger = await self._ledger(uow)
            result = await ledger.record_return(
                request.location_id,
                request.item_id,
                request.qty,
                reason=request.reason,
                reference_id=request.reference_id,
            )
        logger.info(
            "return_recorded",
            location_id=request.location_id,
            item_id=request.item_id,
            qty=request.qty,
        )
        return result


class RecordLossUseCase(StockUseCase):
    async def execute(self, request: RecordLossRequest) -> MovementResult:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            ledger = await self._ledger(uow)
            result = await ledger.record_loss(
                request.location_id,
                request.item_id,
                request.qty,
                request.note,
                loss_type=request.loss_type,
                reference_id=request.reference_id,
            )
        logger.info(
            "loss_recorded",
            location_id=request.location_id,
            item_id=request.item_id,
            qty=request.qty,
            loss_type=request.loss_type,
        )
        return result


class SetStockLevelUseCase(StockUseCase):
    """Legacy absolute correction; prefer an inventory count."""

    async def execute(self, request: SetStockLevelRequest) -> MovementResult:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            ledger = await self._ledger(uow)
            result = await ledger.set_stock_level(
                request.location_id,
                request.item_id,
                request.counted_qty,
                request.note,
            )
        logger.info(
            "stock_level_set",
            location_id=request.location_id,
            item_id=request.item_id,
            quantity=result.balance.quantity,
            changed=result.movement is not None,
        )
        return result

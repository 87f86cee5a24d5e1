"""Read-only stock queries."""

from stockcore.application.use_cases.base import StockUseCase
from stockcore.core.entities import Balance, Movement
from stockcore.core.exceptions import LocationNotFoundError
from stockcore.core.interfaces import IUnitOfWork


class StockQueryUseCase(StockUseCase):
    """Balances and movement history."""

    async def get_balance(self, location_id: int, item_id: int) -> int:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            ledger = await self._ledger(uow)
            return await ledger.get_balance(location_id, item_id)

    async def get_balances_batch(self, location_id: int, item_ids: list[int]) -> dict[int, int]:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            ledger = await self._ledger(uow)
            return await ledger.get_balances(location_id, item_ids)

    async def list_by_location(self, location_id: int) -> list[Balance]:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            await self._require_location(uow, location_id)
            return await uow.stock.list_balances(location_id)

    async def last_movements(
        self,
        location_id: int,
        item_id: int | None = None,
        limit: int | None = None,
    ) -> list[Movement]:
        """Newest movements first, capped at the configured history limit."""
        cap = self.settings.stock.movement_history_limit
        limit = cap if limit is None else max(1, min(limit, cap))
        factory = await self._get_uow_factory()
        async with factory() as uow:
            await self._require_location(uow, location_id)
            return await uow.stock.list_movements(location_id, item_id=item_id, limit=limit)

    @staticmethod
    async def _require_location(uow: IUnitOfWork, location_id: int) -> None:
        if await uow.master.get_location(location_id) is None:
            raise LocationNotFoundError(location_id)

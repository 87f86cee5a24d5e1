"""Shared wiring for stock use cases."""

from stockcore.config import get_settings
from stockcore.config.settings import Settings
from stockcore.core.entities import TransitLocation
from stockcore.core.interfaces import INumberAllocator, IUnitOfWork, UnitOfWorkFactory
from stockcore.core.services import (
    DeliveryWorkflow,
    EventBus,
    InventoryCounter,
    MovementLedger,
    OrderWorkflow,
    PurchaseOrderWorkflow,
    SaleWorkflow,
    TransferEngine,
)


class StockUseCase:
    """
    Base for use cases that run one unit of work.

    Every dependency is injectable; missing ones are resolved lazily from
    the application service factories.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory | None = None,
        transit: TransitLocation | None = None,
        event_bus: EventBus | None = None,
        allocator: INumberAllocator | None = None,
        settings: Settings | None = None,
    ):
        self._uow_factory = uow_factory
        self._transit = transit
        self._event_bus = event_bus
        self._allocator = allocator
        self._settings = settings

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    async def _get_uow_factory(self) -> UnitOfWorkFactory:
        """
        Unit-of-work factory, with the transit location already resolved.

        Resolving the transit location runs its own transaction, so it has
        to finish before the caller opens a unit of work.
        """
        if self._uow_factory is None:
            from stockcore.application.services import get_unit_of_work_factory

            self._uow_factory = await get_unit_of_work_factory()
        if self._transit is None:
            from stockcore.application.services import get_transit_location

            self._transit = await get_transit_location(self._uow_factory)
        return self._uow_factory

    async def _get_transit(self) -> TransitLocation:
        if self._transit is None:
            await self._get_uow_factory()
        return self._transit

    def _get_event_bus(self) -> EventBus:
        if self._event_bus is None:
            from stockcore.application.services import get_event_bus

            self._event_bus = get_event_bus()
        return self._event_bus

    def _get_allocator(self) -> INumberAllocator:
        if self._allocator is None:
            from stockcore.application.services import get_number_allocator

            self._allocator = get_number_allocator()
        return self._allocator

    # Engine builders, bound to one unit of work

    async def _ledger(self, uow: IUnitOfWork) -> MovementLedger:
        return MovementLedger(uow, await self._get_transit())

    async def _transfer_engine(self, uow: IUnitOfWork) -> TransferEngine:
        transit = await self._get_transit()
        return TransferEngine(uow, MovementLedger(uow, transit), transit, self._get_event_bus())

    async def _inventory_counter(self, uow: IUnitOfWork) -> InventoryCounter:
        stock = self.settings.stock
        return InventoryCounter(
            uow,
            await self._ledger(uow),
            self._get_allocator(),
            numbering_attempts=stock.numbering_attempts,
            note_min_length=stock.post_note_min_length,
            note_max_length=stock.post_note_max_length,
        )

    async def _sale_workflow(self, uow: IUnitOfWork) -> SaleWorkflow:
        return SaleWorkflow(
            uow, await self._ledger(uow), self._get_allocator(),
            self.settings.stock.numbering_attempts,
        )

    async def _purchase_order_workflow(self, uow: IUnitOfWork) -> PurchaseOrderWorkflow:
        return PurchaseOrderWorkflow(
            uow, await self._ledger(uow), self._get_allocator(),
            self.settings.stock.numbering_attempts,
        )

    async def _order_workflow(self, uow: IUnitOfWork) -> OrderWorkflow:
        return OrderWorkflow(
            uow, await self._ledger(uow), self._get_allocator(),
            self.settings.stock.numbering_attempts,
        )

    async def _delivery_workflow(self, uow: IUnitOfWork) -> DeliveryWorkflow:
        transfers = await self._transfer_engine(uow)
        return DeliveryWorkflow(
            uow,
            MovementLedger(uow, await self._get_transit()),
            self._get_allocator(),
            transfers,
            self.settings.stock.numbering_attempts,
        )

"""
Dependency injection container for FastAPI.

Every use case is built from one ``EngineContext``; tests override
``get_engine_context`` to point the whole API at another database.
"""

from dataclasses import dataclass
from typing import TypeVar

from fastapi import Depends

from stockcore.application.services import (
    get_event_bus,
    get_number_allocator,
    get_transit_location,
    get_unit_of_work_factory,
)
from stockcore.application.use_cases import (
    ApplyMovementUseCase,
    CancelInventoryUseCase,
    CancelSaleUseCase,
    CreateDeliveryUseCase,
    CreateInventoryUseCase,
    CreateJourneyUseCase,
    CreateOrderUseCase,
    CreatePurchaseOrderUseCase,
    CreateSaleUseCase,
    CreateTransferDraftUseCase,
    DeliveryQueryUseCase,
    GenerateInventoryLinesUseCase,
    InventoryQueryUseCase,
    OrderQueryUseCase,
    PostInventoryUseCase,
    PostSaleUseCase,
    PostTransferUseCase,
    PurchaseOrderQueryUseCase,
    ReceivePurchaseOrderUseCase,
    ReceiveTransferUseCase,
    RecordInventoryCountUseCase,
    RecordLossUseCase,
    RecordReturnUseCase,
    SaleQueryUseCase,
    SetDeliveryStatusUseCase,
    SetOrderStatusUseCase,
    SetPurchaseOrderStatusUseCase,
    SetStockLevelUseCase,
    ShipTransferUseCase,
    StockQueryUseCase,
    StockUseCase,
    TransferQueryUseCase,
)
from stockcore.config import Settings, get_settings
from stockcore.core.entities import TransitLocation
from stockcore.core.interfaces import INumberAllocator, UnitOfWorkFactory
from stockcore.core.services import EventBus

U = TypeVar("U", bound=StockUseCase)


@dataclass
class EngineContext:
    """Everything a use case needs, resolved once per request."""

    uow_factory: UnitOfWorkFactory
    transit: TransitLocation
    event_bus: EventBus
    allocator: INumberAllocator
    settings: Settings

    def build(self, use_case_cls: type[U]) -> U:
        return use_case_cls(
            uow_factory=self.uow_factory,
            transit=self.transit,
            event_bus=self.event_bus,
            allocator=self.allocator,
            settings=self.settings,
        )


async def get_engine_context() -> EngineContext:
    """Resolve the engine context from the application singletons."""
    factory = await get_unit_of_work_factory()
    return EngineContext(
        uow_factory=factory,
        transit=await get_transit_location(factory),
        event_bus=get_event_bus(),
        allocator=get_number_allocator(),
        settings=get_settings(),
    )


# Ledger
def get_apply_movement_use_case(ctx: EngineContext = Depends(get_engine_context)) -> ApplyMovementUseCase:
    return ctx.build(ApplyMovementUseCase)


def get_record_return_use_case(ctx: EngineContext = Depends(get_engine_context)) -> RecordReturnUseCase:
    return ctx.build(RecordReturnUseCase)


def get_record_loss_use_case(ctx: EngineContext = Depends(get_engine_context)) -> RecordLossUseCase:
    return ctx.build(RecordLossUseCase)


def get_set_stock_level_use_case(ctx: EngineContext = Depends(get_engine_context)) -> SetStockLevelUseCase:
    return ctx.build(SetStockLevelUseCase)


def get_stock_query_use_case(ctx: EngineContext = Depends(get_engine_context)) -> StockQueryUseCase:
    return ctx.build(StockQueryUseCase)


# Transfers
def get_create_transfer_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> CreateTransferDraftUseCase:
    return ctx.build(CreateTransferDraftUseCase)


def get_create_journey_use_case(ctx: EngineContext = Depends(get_engine_context)) -> CreateJourneyUseCase:
    return ctx.build(CreateJourneyUseCase)


def get_ship_transfer_use_case(ctx: EngineContext = Depends(get_engine_context)) -> ShipTransferUseCase:
    return ctx.build(ShipTransferUseCase)


def get_receive_transfer_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> ReceiveTransferUseCase:
    return ctx.build(ReceiveTransferUseCase)


def get_post_transfer_use_case(ctx: EngineContext = Depends(get_engine_context)) -> PostTransferUseCase:
    return ctx.build(PostTransferUseCase)


def get_transfer_query_use_case(ctx: EngineContext = Depends(get_engine_context)) -> TransferQueryUseCase:
    return ctx.build(TransferQueryUseCase)


# Inventory counts
def get_create_inventory_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> CreateInventoryUseCase:
    return ctx.build(CreateInventoryUseCase)


def get_generate_lines_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> GenerateInventoryLinesUseCase:
    return ctx.build(GenerateInventoryLinesUseCase)


def get_record_count_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> RecordInventoryCountUseCase:
    return ctx.build(RecordInventoryCountUseCase)


def get_post_inventory_use_case(ctx: EngineContext = Depends(get_engine_context)) -> PostInventoryUseCase:
    return ctx.build(PostInventoryUseCase)


def get_cancel_inventory_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> CancelInventoryUseCase:
    return ctx.build(CancelInventoryUseCase)


def get_inventory_query_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> InventoryQueryUseCase:
    return ctx.build(InventoryQueryUseCase)


# Sales
def get_create_sale_use_case(ctx: EngineContext = Depends(get_engine_context)) -> CreateSaleUseCase:
    return ctx.build(CreateSaleUseCase)


def get_post_sale_use_case(ctx: EngineContext = Depends(get_engine_context)) -> PostSaleUseCase:
    return ctx.build(PostSaleUseCase)


def get_cancel_sale_use_case(ctx: EngineContext = Depends(get_engine_context)) -> CancelSaleUseCase:
    return ctx.build(CancelSaleUseCase)


def get_sale_query_use_case(ctx: EngineContext = Depends(get_engine_context)) -> SaleQueryUseCase:
    return ctx.build(SaleQueryUseCase)


# Purchase orders
def get_create_purchase_order_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> CreatePurchaseOrderUseCase:
    return ctx.build(CreatePurchaseOrderUseCase)


def get_set_purchase_order_status_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> SetPurchaseOrderStatusUseCase:
    return ctx.build(SetPurchaseOrderStatusUseCase)


def get_receive_purchase_order_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> ReceivePurchaseOrderUseCase:
    return ctx.build(ReceivePurchaseOrderUseCase)


def get_purchase_order_query_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> PurchaseOrderQueryUseCase:
    return ctx.build(PurchaseOrderQueryUseCase)


# Orders
def get_create_order_use_case(ctx: EngineContext = Depends(get_engine_context)) -> CreateOrderUseCase:
    return ctx.build(CreateOrderUseCase)


def get_set_order_status_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> SetOrderStatusUseCase:
    return ctx.build(SetOrderStatusUseCase)


def get_order_query_use_case(ctx: EngineContext = Depends(get_engine_context)) -> OrderQueryUseCase:
    return ctx.build(OrderQueryUseCase)


# Deliveries
def get_create_delivery_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> CreateDeliveryUseCase:
    return ctx.build(CreateDeliveryUseCase)


def get_set_delivery_status_use_case(
    ctx: EngineContext = Depends(get_engine_context),
) -> SetDeliveryStatusUseCase:
    return ctx.build(SetDeliveryStatusUseCase)


def get_delivery_query_use_case(ctx: EngineContext = Depends(get_engine_context)) -> DeliveryQueryUseCase:
    return ctx.build(DeliveryQueryUseCase)

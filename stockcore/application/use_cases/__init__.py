"""Application use cases."""

from stockcore.application.use_cases.base import StockUseCase
from stockcore.application.use_cases.documents import (
    CancelSaleUseCase,
    CreateDeliveryUseCase,
    CreateOrderUseCase,
    CreatePurchaseOrderUseCase,
    CreateSaleUseCase,
    DeliveryQueryUseCase,
    OrderQueryUseCase,
    PostSaleUseCase,
    PurchaseOrderQueryUseCase,
    ReceivePurchaseOrderUseCase,
    SaleQueryUseCase,
    SetDeliveryStatusUseCase,
    SetOrderStatusUseCase,
    SetPurchaseOrderStatusUseCase,
)
from stockcore.application.use_cases.inventory_counts import (
    CancelInventoryUseCase,
    CreateInventoryUseCase,
    GenerateInventoryLinesUseCase,
    InventoryQueryUseCase,
    PostInventoryUseCase,
    RecordInventoryCountUseCase,
)
from stockcore.application.use_cases.stock_movements import (
    ApplyMovementUseCase,
    RecordLossUseCase,
    RecordReturnUseCase,
    SetStockLevelUseCase,
)
from stockcore.application.use_cases.stock_queries import StockQueryUseCase
from stockcore.application.use_cases.transfers import (
    CreateJourneyUseCase,
    CreateTransferDraftUseCase,
    PostTransferUseCase,
    ReceiveTransferUseCase,
    ShipTransferUseCase,
    TransferQueryUseCase,
)

__all__ = [
    "StockUseCase",
    # Ledger
    "ApplyMovementUseCase",
    "RecordReturnUseCase",
    "RecordLossUseCase",
    "SetStockLevelUseCase",
    "StockQueryUseCase",
    # Transfers
    "CreateTransferDraftUseCase",
    "CreateJourneyUseCase",
    "ShipTransferUseCase",
    "ReceiveTransferUseCase",
    "PostTransferUseCase",
    "TransferQueryUseCase",
    # Inventory
    "CreateInventoryUseCase",
    "GenerateInventoryLinesUseCase",
    "RecordInventoryCountUseCase",
    "PostInventoryUseCase",
    "CancelInventoryUseCase",
    "InventoryQueryUseCase",
    # Documents
    "CreateSaleUseCase",
    "PostSaleUseCase",
    "CancelSaleUseCase",
    "SaleQueryUseCase",
    "CreatePurchaseOrderUseCase",
    "SetPurchaseOrderStatusUseCase",
    "ReceivePurchaseOrderUseCase",
    "PurchaseOrderQueryUseCase",
    "CreateOrderUseCase",
    "SetOrderStatusUseCase",
    "OrderQueryUseCase",
    "CreateDeliveryUseCase",
    "SetDeliveryStatusUseCase",
    "DeliveryQueryUseCase",
]

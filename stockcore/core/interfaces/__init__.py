"""Core interfaces (ports) for dependency injection."""

from stockcore.core.interfaces.document_store import (
    IDeliveryStore,
    IInventoryCountStore,
    IOrderStore,
    IPurchaseOrderStore,
    ISaleStore,
    ITransferStore,
)
from stockcore.core.interfaces.stock_store import IMasterDataStore, IStockStore
from stockcore.core.interfaces.unit_of_work import (
    INumberAllocator,
    IUnitOfWork,
    UnitOfWorkFactory,
)

__all__ = [
    "IMasterDataStore",
    "IStockStore",
    "ITransferStore",
    "IInventoryCountStore",
    "ISaleStore",
    "IPurchaseOrderStore",
    "IOrderStore",
    "IDeliveryStore",
    "IUnitOfWork",
    "UnitOfWorkFactory",
    "INumberAllocator",
]

"""Abstract unit of work and number allocator."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from types import TracebackType

from stockcore.core.interfaces.document_store import (
    IDeliveryStore,
    IInventoryCountStore,
    IOrderStore,
    IPurchaseOrderStore,
    ISaleStore,
    ITransferStore,
)
from stockcore.core.interfaces.stock_store import IMasterDataStore, IStockStore


class IUnitOfWork(ABC):
    """
    One atomic unit of work.

    Every store exposed here shares the same transaction: leaving the
    context normally commits, leaving it with an exception rolls back.
    """

    master: IMasterDataStore
    stock: IStockStore
    transfers: ITransferStore
    inventories: IInventoryCountStore
    sales: ISaleStore
    purchase_orders: IPurchaseOrderStore
    orders: IOrderStore
    deliveries: IDeliveryStore

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        pass


UnitOfWorkFactory = Callable[[], IUnitOfWork]


class INumberAllocator(ABC):
    """Allocates human-readable document numbers."""

    @abstractmethod
    def next_number(self, prefix: str) -> str:
        """Return a candidate number; uniqueness is enforced by storage."""
        pass

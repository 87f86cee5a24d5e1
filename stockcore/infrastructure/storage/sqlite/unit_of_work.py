"""SQLite unit of work: every store shares one BEGIN IMMEDIATE transaction."""

import sqlite3
from contextlib import AsyncExitStack
from types import TracebackType

from stockcore.config import get_logger
from stockcore.core.exceptions import DatabaseError
from stockcore.core.interfaces import IUnitOfWork
from stockcore.infrastructure.storage.sqlite.connection import ConnectionPool
from stockcore.infrastructure.storage.sqlite.delivery_store import SQLiteDeliveryStore
from stockcore.infrastructure.storage.sqlite.inventory_count_store import SQLiteInventoryCountStore
from stockcore.infrastructure.storage.sqlite.master_data_store import SQLiteMasterDataStore
from stockcore.infrastructure.storage.sqlite.order_store import SQLiteOrderStore
from stockcore.infrastructure.storage.sqlite.purchase_order_store import SQLitePurchaseOrderStore
from stockcore.infrastructure.storage.sqlite.sale_store import SQLiteSaleStore
from stockcore.infrastructure.storage.sqlite.stock_store import SQLiteStockStore
from stockcore.infrastructure.storage.sqlite.transfer_store import SQLiteTransferStore

logger = get_logger(__name__)


class SQLiteUnitOfWork(IUnitOfWork):
    """
    Unit of work over one pooled connection.

    Entering takes SQLite's write lock, so two units of work touching the
    same balances run one after the other. Leaving normally commits;
    leaving with an exception rolls everything back. Driver errors leave
    as ``DatabaseError``.

    Usage:
        async with SQLiteUnitOfWork(pool) as uow:
            await uow.stock.get_balance(location_id, item_id)
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool
        self._stack: AsyncExitStack | None = None

    async def __aenter__(self) -> "SQLiteUnitOfWork":
        if self._stack is not None:
            raise RuntimeError("unit of work is already active")
        stack = AsyncExitStack()
        try:
            conn = await stack.enter_async_context(self._pool.transaction(immediate=True))
        except sqlite3.Error as e:
            await stack.aclose()
            logger.error("unit_of_work_begin_failed", error=str(e))
            raise DatabaseError("begin", str(e)) from e
        self._stack = stack

        self.master = SQLiteMasterDataStore(conn)
        self.stock = SQLiteStockStore(conn)
        self.transfers = SQLiteTransferStore(conn)
        self.inventories = SQLiteInventoryCountStore(conn)
        self.sales = SQLiteSaleStore(conn)
        self.purchase_orders = SQLitePurchaseOrderStore(conn)
        self.orders = SQLiteOrderStore(conn)
        self.deliveries = SQLiteDeliveryStore(conn)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        stack, self._stack = self._stack, None
        if stack is None:
            return
        try:
            await stack.__aexit__(exc_type, exc, tb)
        except sqlite3.Error as e:
            logger.error("unit_of_work_commit_failed", error=str(e))
            raise DatabaseError("commit", str(e)) from e

        if isinstance(exc, sqlite3.Error):
            logger.error("unit_of_work_rolled_back", error=str(exc))
            raise DatabaseError("transaction", str(exc)) from exc

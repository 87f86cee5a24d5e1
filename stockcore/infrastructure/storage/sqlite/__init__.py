"""SQLite storage implementations."""

from stockcore.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from stockcore.infrastructure.storage.sqlite.delivery_store import SQLiteDeliveryStore
from stockcore.infrastructure.storage.sqlite.inventory_count_store import SQLiteInventoryCountStore
from stockcore.infrastructure.storage.sqlite.master_data_store import SQLiteMasterDataStore
from stockcore.infrastructure.storage.sqlite.order_store import SQLiteOrderStore
from stockcore.infrastructure.storage.sqlite.purchase_order_store import SQLitePurchaseOrderStore
from stockcore.infrastructure.storage.sqlite.sale_store import SQLiteSaleStore
from stockcore.infrastructure.storage.sqlite.stock_store import SQLiteStockStore
from stockcore.infrastructure.storage.sqlite.transfer_store import SQLiteTransferStore
from stockcore.infrastructure.storage.sqlite.unit_of_work import SQLiteUnitOfWork

__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Stores
    "SQLiteMasterDataStore",
    "SQLiteStockStore",
    "SQLiteTransferStore",
    "SQLiteInventoryCountStore",
    "SQLiteSaleStore",
    "SQLitePurchaseOrderStore",
    "SQLiteOrderStore",
    "SQLiteDeliveryStore",
    # Transactions
    "SQLiteUnitOfWork",
]

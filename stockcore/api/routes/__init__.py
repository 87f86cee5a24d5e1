"""API route modules."""

from stockcore.api.routes.deliveries import router as deliveries_router
from stockcore.api.routes.health import router as health_router
from stockcore.api.routes.inventories import router as inventories_router
from stockcore.api.routes.orders import router as orders_router
from stockcore.api.routes.purchase_orders import router as purchase_orders_router
from stockcore.api.routes.sales import router as sales_router
from stockcore.api.routes.stock import router as stock_router
from stockcore.api.routes.transfers import router as transfers_router

__all__ = [
    "health_router",
    "stock_router",
    "transfers_router",
    "inventories_router",
    "sales_router",
    "purchase_orders_router",
    "orders_router",
    "deliveries_router",
]

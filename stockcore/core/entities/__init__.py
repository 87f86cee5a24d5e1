"""Core domain entities."""

from stockcore.core.entities.documents import (
    Delivery,
    DeliveryEvent,
    DeliveryLine,
    DeliveryRequestSource,
    DeliverySource,
    DeliveryStatus,
    FromOrder,
    FromSale,
    ItemDeliveryLine,
    Order,
    OrderDeliveryLine,
    OrderLine,
    OrderStatus,
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    Sale,
    SaleDeliveryLine,
    SaleLine,
    SaleStatus,
    Standalone,
)
from stockcore.core.entities.events import (
    TransferEvent,
    TransferPartiallyReceived,
    TransferReceived,
    TransferShipped,
)
from stockcore.core.entities.inventory_count import (
    CountLineStatus,
    CountMode,
    CountStatus,
    InventoryCount,
    InventoryLine,
)
from stockcore.core.entities.location import (
    Category,
    Item,
    Location,
    LocationKind,
    TransitLocation,
)
from stockcore.core.entities.stock import (
    Balance,
    LineQuantity,
    Movement,
    MovementDraft,
    MovementKind,
    MovementResult,
    ReferenceKind,
)
from stockcore.core.entities.transfer import (
    Journey,
    Transfer,
    TransferLine,
    TransferPurpose,
    TransferStatus,
)

__all__ = [
    # Location / master data
    "Category",
    "Item",
    "Location",
    "LocationKind",
    "TransitLocation",
    # Ledger
    "Balance",
    "LineQuantity",
    "Movement",
    "MovementDraft",
    "MovementKind",
    "MovementResult",
    "ReferenceKind",
    # Transfer
    "Journey",
    "Transfer",
    "TransferLine",
    "TransferPurpose",
    "TransferStatus",
    "TransferEvent",
    "TransferShipped",
    "TransferReceived",
    "TransferPartiallyReceived",
    # Inventory count
    "CountLineStatus",
    "CountMode",
    "CountStatus",
    "InventoryCount",
    "InventoryLine",
    # Documents
    "Delivery",
    "DeliveryEvent",
    "DeliveryLine",
    "DeliveryRequestSource",
    "DeliverySource",
    "DeliveryStatus",
    "FromOrder",
    "FromSale",
    "ItemDeliveryLine",
    "Order",
    "OrderDeliveryLine",
    "OrderLine",
    "OrderStatus",
    "PurchaseOrder",
    "PurchaseOrderLine",
    "PurchaseOrderStatus",
    "Sale",
    "SaleDeliveryLine",
    "SaleLine",
    "SaleStatus",
    "Standalone",
]

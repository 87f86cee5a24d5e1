"""
Core engine services.

Layer-pure: these depend only on core entities, interfaces and exceptions.
Each service runs inside a unit of work handed to it by the caller.
"""

from stockcore.core.services.deliveries import (
    DeliveryPlan,
    DeliveryTransferListener,
    DeliveryWorkflow,
    register_delivery_listeners,
)
from stockcore.core.services.events import EventBus
from stockcore.core.services.fulfillment import (
    OrderWorkflow,
    PurchaseOrderWorkflow,
    SaleWorkflow,
)
from stockcore.core.services.inventory_counter import InventoryCounter
from stockcore.core.services.ledger import MovementLedger
from stockcore.core.services.numbering import DatedUUIDNumberAllocator, allocate_unique
from stockcore.core.services.transfer_engine import TransferEngine
from stockcore.core.services.transitions import StatusGraph

__all__ = [
    "DatedUUIDNumberAllocator",
    "DeliveryPlan",
    "DeliveryTransferListener",
    "DeliveryWorkflow",
    "EventBus",
    "InventoryCounter",
    "MovementLedger",
    "OrderWorkflow",
    "PurchaseOrderWorkflow",
    "SaleWorkflow",
    "StatusGraph",
    "TransferEngine",
    "allocate_unique",
    "register_delivery_listeners",
]

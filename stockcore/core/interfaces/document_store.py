"""Abstract interfaces for transfer, inventory and fulfillable document storage."""

from abc import ABC, abstractmethod

from stockcore.core.entities import (
    Delivery,
    DeliveryEvent,
    InventoryCount,
    InventoryLine,
    Order,
    PurchaseOrder,
    Sale,
    Transfer,
)


class ITransferStore(ABC):
    """Interface for transfer persistence."""

    @abstractmethod
    async def create(self, transfer: Transfer) -> Transfer:
        """Create a transfer with its lines."""
        pass

    @abstractmethod
    async def get(self, transfer_id: int) -> Transfer | None:
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 100) -> list[Transfer]:
        pass

    @abstractmethod
    async def list_by_journey(self, journey_id: str) -> list[Transfer]:
        pass

    @abstractmethod
    async def update_status(self, transfer: Transfer) -> None:
        """Persist status, timestamps and note."""
        pass

    @abstractmethod
    async def update_line_received(self, line_id: int, qty_received: int) -> None:
        pass


class IInventoryCountStore(ABC):
    """Interface for inventory count persistence."""

    @abstractmethod
    async def create(self, count: InventoryCount) -> InventoryCount:
        pass

    @abstractmethod
    async def get(self, inventory_id: int) -> InventoryCount | None:
        """Get a count document with its lines."""
        pass

    @abstractmethod
    async def count_lines(self, inventory_id: int) -> int:
        pass

    @abstractmethod
    async def add_lines(self, inventory_id: int, lines: list[InventoryLine]) -> int:
        pass

    @abstractmethod
    async def get_line(self, inventory_id: int, line_id: int) -> InventoryLine | None:
        pass

    @abstractmethod
    async def update_line(self, line: InventoryLine) -> InventoryLine:
        pass

    @abstractmethod
    async def update_header(self, count: InventoryCount) -> None:
        """Persist status, mode, category, note and posting fields."""
        pass


class ISaleStore(ABC):
    @abstractmethod
    async def create(self, sale: Sale) -> Sale:
        pass

    @abstractmethod
    async def get(self, sale_id: int) -> Sale | None:
        pass

    @abstractmethod
    async def update_status(self, sale: Sale) -> None:
        pass

    @abstractmethod
    async def update_line_delivered(self, line_id: int, qty_delivered: int) -> None:
        pass


class IPurchaseOrderStore(ABC):
    @abstractmethod
    async def create(self, order: PurchaseOrder) -> PurchaseOrder:
        pass

    @abstractmethod
    async def get(self, purchase_order_id: int) -> PurchaseOrder | None:
        pass

    @abstractmethod
    async def update_status(self, order: PurchaseOrder) -> None:
        pass

    @abstractmethod
    async def update_line_received(self, line_id: int, qty_received: int) -> None:
        pass


class IOrderStore(ABC):
    @abstractmethod
    async def create(self, order: Order) -> Order:
        pass

    @abstractmethod
    async def get(self, order_id: int) -> Order | None:
        pass

    @abstractmethod
    async def update_status(self, order: Order) -> None:
        pass

    @abstractmethod
    async def update_line_delivered(self, line_id: int, qty_delivered: int) -> None:
        pass


class IDeliveryStore(ABC):
    """Interface for delivery persistence, including the event trail."""

    @abstractmethod
    async def create(self, delivery: Delivery) -> Delivery:
        pass

    @abstractmethod
    async def get(self, delivery_id: int) -> Delivery | None:
        """Get a delivery with lines and events."""
        pass

    @abstractmethod
    async def get_by_transfer(self, transfer_id: int) -> Delivery | None:
        pass

    @abstractmethod
    async def update(self, delivery: Delivery) -> None:
        """Persist status, timestamps and the fulfillment flag."""
        pass

    @abstractmethod
    async def add_event(self, event: DeliveryEvent) -> DeliveryEvent:
        pass

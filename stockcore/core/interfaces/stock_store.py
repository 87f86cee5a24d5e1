"""Abstract interfaces for master data, balances and movements."""

from abc import ABC, abstractmethod

from stockcore.core.entities import (
    Balance,
    Category,
    Item,
    Location,
    LocationKind,
    Movement,
)


class IMasterDataStore(ABC):
    """Read access to locations, items and categories."""

    @abstractmethod
    async def get_location(self, location_id: int) -> Location | None:
        pass

    @abstractmethod
    async def list_locations(self, kind: LocationKind | None = None) -> list[Location]:
        pass

    @abstractmethod
    async def create_location(self, location: Location) -> Location:
        pass

    @abstractmethod
    async def get_item(self, item_id: int) -> Item | None:
        pass

    @abstractmethod
    async def get_items(self, item_ids: list[int]) -> dict[int, Item]:
        """Get items by id; unknown ids are absent from the result."""
        pass

    @abstractmethod
    async def list_active_items(self, category_id: int | None = None) -> list[Item]:
        pass

    @abstractmethod
    async def create_item(self, item: Item) -> Item:
        pass

    @abstractmethod
    async def get_category(self, category_id: int) -> Category | None:
        pass

    @abstractmethod
    async def create_category(self, category: Category) -> Category:
        pass


class IStockStore(ABC):
    """Interface for balance and movement persistence.

    Only the movement ledger writes through this interface.
    """

    @abstractmethod
    async def get_balance(self, location_id: int, item_id: int) -> Balance | None:
        pass

    @abstractmethod
    async def get_balances(self, location_id: int, item_ids: list[int]) -> dict[int, int]:
        """Get quantities for items at a location; missing rows are omitted."""
        pass

    @abstractmethod
    async def upsert_balance(self, location_id: int, item_id: int, quantity: int) -> Balance:
        pass

    @abstractmethod
    async def list_balances(self, location_id: int) -> list[Balance]:
        pass

    @abstractmethod
    async def add_movement(self, movement: Movement) -> Movement:
        """Append a movement to the ledger."""
        pass

    @abstractmethod
    async def list_movements(
        self, location_id: int, item_id: int | None = None, limit: int = 50
    ) -> list[Movement]:
        """Latest movements at a location, newest first."""
        pass

    @abstractmethod
    async def list_movements_for_transfer(self, transfer_id: int) -> list[Movement]:
        pass

    @abstractmethod
    async def list_movements_for_inventory(self, inventory_id: int) -> list[Movement]:
        pass

"""SQLite implementation of master data (locations, categories, items)."""

import aiosqlite

from stockcore.config import get_logger
from stockcore.core.entities import Category, Item, Location, LocationKind
from stockcore.core.entities.common import utc_now
from stockcore.core.interfaces import IMasterDataStore
from stockcore.infrastructure.storage.sqlite.rows import SQLiteStore, parse_datetime, to_iso

logger = get_logger(__name__)


class SQLiteMasterDataStore(SQLiteStore, IMasterDataStore):
    """Locations, categories and items."""

    async def get_location(self, location_id: int) -> Location | None:
        row = await self._fetchone("SELECT * FROM locations WHERE id = ?", (location_id,))
        return self._row_to_location(row) if row else None

    async def list_locations(self, kind: LocationKind | None = None) -> list[Location]:
        if kind is None:
            rows = await self._fetchall("SELECT * FROM locations ORDER BY code")
        else:
            rows = await self._fetchall(
                "SELECT * FROM locations WHERE kind = ? ORDER BY code", (kind.value,)
            )
        return [self._row_to_location(row) for row in rows]

    async def create_location(self, location: Location) -> Location:
        cursor = await self._conn.execute(
            """
            INSERT INTO locations (code, name, kind, active, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                location.code,
                location.name,
                location.kind.value,
                int(location.active),
                to_iso(location.created_at),
            ),
        )
        location.id = cursor.lastrowid
        logger.info("location_created", location_id=location.id, code=location.code)
        return location

    async def get_item(self, item_id: int) -> Item | None:
        row = await self._fetchone("SELECT * FROM items WHERE id = ?", (item_id,))
        return self._row_to_item(row) if row else None

    async def get_items(self, item_ids: list[int]) -> dict[int, Item]:
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        rows = await self._fetchall(
            f"SELECT * FROM items WHERE id IN ({placeholders})", tuple(ids)
        )
        return {row["id"]: self._row_to_item(row) for row in rows}

    async def list_active_items(self, category_id: int | None = None) -> list[Item]:
        if category_id is None:
            rows = await self._fetchall("SELECT * FROM items WHERE active = 1 ORDER BY id")
        else:
            rows = await self._fetchall(
                "SELECT * FROM items WHERE active = 1 AND category_id = ? ORDER BY id",
                (category_id,),
            )
        return [self._row_to_item(row) for row in rows]

    async def create_item(self, item: Item) -> Item:
        cursor = await self._conn.execute(
            """
            INSERT INTO items (sku, name, category_id, active, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (item.sku, item.name, item.category_id, int(item.active), to_iso(item.created_at)),
        )
        item.id = cursor.lastrowid
        logger.info("item_created", item_id=item.id, sku=item.sku)
        return item

    async def get_category(self, category_id: int) -> Category | None:
        row = await self._fetchone("SELECT * FROM categories WHERE id = ?", (category_id,))
        return Category(id=row["id"], name=row["name"]) if row else None

    async def create_category(self, category: Category) -> Category:
        cursor = await self._conn.execute(
            "INSERT INTO categories (name) VALUES (?)", (category.name,)
        )
        category.id = cursor.lastrowid
        return category

    @staticmethod
    def _row_to_location(row: aiosqlite.Row) -> Location:
        return Location(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            kind=LocationKind(row["kind"]),
            active=bool(row["active"]),
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> Item:
        return Item(
            id=row["id"],
            sku=row["sku"],
            name=row["name"],
            category_id=row["category_id"],
            active=bool(row["active"]),
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

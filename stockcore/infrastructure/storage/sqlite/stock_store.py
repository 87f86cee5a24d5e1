"""SQLite implementation of balances and the movement ledger."""

import aiosqlite

from stockcore.core.entities import Balance, Movement, MovementKind, ReferenceKind
from stockcore.core.entities.common import utc_now
from stockcore.core.interfaces import IStockStore
from stockcore.infrastructure.storage.sqlite.rows import SQLiteStore, parse_datetime, to_iso


class SQLiteStockStore(SQLiteStore, IStockStore):
    """Balances keyed by (location, item) plus the append-only movement table."""

    async def get_balance(self, location_id: int, item_id: int) -> Balance | None:
        row = await self._fetchone(
            "SELECT * FROM stock_balances WHERE location_id = ? AND item_id = ?",
            (location_id, item_id),
        )
        return self._row_to_balance(row) if row else None

    async def get_balances(self, location_id: int, item_ids: list[int]) -> dict[int, int]:
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        rows = await self._fetchall(
            f"""
            SELECT item_id, quantity FROM stock_balances
            WHERE location_id = ? AND item_id IN ({placeholders})
            """,
            (location_id, *ids),
        )
        return {row["item_id"]: row["quantity"] for row in rows}

    async def upsert_balance(self, location_id: int, item_id: int, quantity: int) -> Balance:
        balance = Balance(location_id=location_id, item_id=item_id, quantity=quantity)
        await self._conn.execute(
            """
            INSERT INTO stock_balances (location_id, item_id, quantity, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(location_id, item_id) DO UPDATE SET
                quantity = excluded.quantity,
                updated_at = excluded.updated_at
            """,
            (location_id, item_id, quantity, to_iso(balance.updated_at)),
        )
        return balance

    async def list_balances(self, location_id: int) -> list[Balance]:
        rows = await self._fetchall(
            "SELECT * FROM stock_balances WHERE location_id = ? ORDER BY item_id",
            (location_id,),
        )
        return [self._row_to_balance(row) for row in rows]

    async def add_movement(self, movement: Movement) -> Movement:
        cursor = await self._conn.execute(
            """
            INSERT INTO stock_movements (
                kind, location_id, item_id, qty_delta, reference_kind,
                reference_id, transfer_id, inventory_id, note, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                movement.kind.value,
                movement.location_id,
                movement.item_id,
                movement.qty_delta,
                movement.reference_kind.value,
                movement.reference_id,
                movement.transfer_id,
                movement.inventory_id,
                movement.note,
                to_iso(movement.created_at),
            ),
        )
        movement.id = cursor.lastrowid
        return movement

    async def list_movements(
        self, location_id: int, item_id: int | None = None, limit: int = 50
    ) -> list[Movement]:
        if item_id is None:
            rows = await self._fetchall(
                """
                SELECT * FROM stock_movements WHERE location_id = ?
                ORDER BY created_at DESC, id DESC LIMIT ?
                """,
                (location_id, limit),
            )
        else:
            rows = await self._fetchall(
                """
                SELECT * FROM stock_movements WHERE location_id = ? AND item_id = ?
                ORDER BY created_at DESC, id DESC LIMIT ?
                """,
                (location_id, item_id, limit),
            )
        return [self._row_to_movement(row) for row in rows]

    async def list_movements_for_transfer(self, transfer_id: int) -> list[Movement]:
        rows = await self._fetchall(
            "SELECT * FROM stock_movements WHERE transfer_id = ? ORDER BY id", (transfer_id,)
        )
        return [self._row_to_movement(row) for row in rows]

    async def list_movements_for_inventory(self, inventory_id: int) -> list[Movement]:
        rows = await self._fetchall(
            "SELECT * FROM stock_movements WHERE inventory_id = ? ORDER BY id", (inventory_id,)
        )
        return [self._row_to_movement(row) for row in rows]

    @staticmethod
    def _row_to_balance(row: aiosqlite.Row) -> Balance:
        return Balance(
            location_id=row["location_id"],
            item_id=row["item_id"],
            quantity=row["quantity"],
            updated_at=parse_datetime(row["updated_at"]) or utc_now(),
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> Movement:
        return Movement(
            id=row["id"],
            kind=MovementKind(row["kind"]),
            location_id=row["location_id"],
            item_id=row["item_id"],
            qty_delta=row["qty_delta"],
            reference_kind=ReferenceKind(row["reference_kind"]),
            reference_id=row["reference_id"],
            transfer_id=row["transfer_id"],
            inventory_id=row["inventory_id"],
            note=row["note"],
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

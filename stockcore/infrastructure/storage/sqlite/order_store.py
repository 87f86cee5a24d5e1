"""SQLite implementation of customer order storage."""

import aiosqlite

from stockcore.core.entities import Order, OrderLine, OrderStatus
from stockcore.core.entities.common import utc_now
from stockcore.core.exceptions import DuplicateNumberError
from stockcore.core.interfaces import IOrderStore
from stockcore.infrastructure.storage.sqlite.rows import (
    SQLiteStore,
    is_unique_violation,
    parse_datetime,
    to_iso,
)


class SQLiteOrderStore(SQLiteStore, IOrderStore):
    async def create(self, order: Order) -> Order:
        try:
            cursor = await self._conn.execute(
                """
                INSERT INTO orders (
                    number, status, location_id, customer_ref, note, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    order.number,
                    order.status.value,
                    order.location_id,
                    order.customer_ref,
                    order.note,
                    to_iso(order.created_at),
                ),
            )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e, "orders.number"):
                raise DuplicateNumberError("Order", order.number) from e
            raise
        order.id = cursor.lastrowid

        for line in order.lines:
            line.order_id = order.id
            line_cursor = await self._conn.execute(
                "INSERT INTO order_lines (order_id, item_id, qty, qty_delivered) VALUES (?, ?, ?, ?)",
                (order.id, line.item_id, line.qty, line.qty_delivered),
            )
            line.id = line_cursor.lastrowid
        return order

    async def get(self, order_id: int) -> Order | None:
        row = await self._fetchone("SELECT * FROM orders WHERE id = ?", (order_id,))
        if row is None:
            return None
        order = self._row_to_order(row)
        rows = await self._fetchall(
            "SELECT * FROM order_lines WHERE order_id = ? ORDER BY id", (order_id,)
        )
        order.lines = [
            OrderLine(
                id=line["id"],
                order_id=line["order_id"],
                item_id=line["item_id"],
                qty=line["qty"],
                qty_delivered=line["qty_delivered"],
            )
            for line in rows
        ]
        return order

    async def update_status(self, order: Order) -> None:
        await self._conn.execute(
            "UPDATE orders SET status = ? WHERE id = ?", (order.status.value, order.id)
        )

    async def update_line_delivered(self, line_id: int, qty_delivered: int) -> None:
        await self._conn.execute(
            "UPDATE order_lines SET qty_delivered = ? WHERE id = ?", (qty_delivered, line_id)
        )

    @staticmethod
    def _row_to_order(row: aiosqlite.Row) -> Order:
        return Order(
            id=row["id"],
            number=row["number"],
            status=OrderStatus(row["status"]),
            location_id=row["location_id"],
            customer_ref=row["customer_ref"],
            note=row["note"],
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

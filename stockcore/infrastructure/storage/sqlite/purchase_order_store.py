"""SQLite implementation of purchase order storage."""

import aiosqlite

from stockcore.core.entities import PurchaseOrder, PurchaseOrderLine, PurchaseOrderStatus
from stockcore.core.entities.common import utc_now
from stockcore.core.exceptions import DuplicateNumberError
from stockcore.core.interfaces import IPurchaseOrderStore
from stockcore.infrastructure.storage.sqlite.rows import (
    SQLiteStore,
    is_unique_violation,
    parse_datetime,
    to_iso,
)


class SQLitePurchaseOrderStore(SQLiteStore, IPurchaseOrderStore):
    async def create(self, order: PurchaseOrder) -> PurchaseOrder:
        try:
            cursor = await self._conn.execute(
                """
                INSERT INTO purchase_orders (
                    number, status, location_id, supplier_ref, note, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    order.number,
                    order.status.value,
                    order.location_id,
                    order.supplier_ref,
                    order.note,
                    to_iso(order.created_at),
                ),
            )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e, "purchase_orders.number"):
                raise DuplicateNumberError("PurchaseOrder", order.number) from e
            raise
        order.id = cursor.lastrowid

        for line in order.lines:
            line.purchase_order_id = order.id
            line_cursor = await self._conn.execute(
                """
                INSERT INTO purchase_order_lines (
                    purchase_order_id, item_id, qty_ordered, qty_received
                ) VALUES (?, ?, ?, ?)
                """,
                (order.id, line.item_id, line.qty_ordered, line.qty_received),
            )
            line.id = line_cursor.lastrowid
        return order

    async def get(self, purchase_order_id: int) -> PurchaseOrder | None:
        row = await self._fetchone(
            "SELECT * FROM purchase_orders WHERE id = ?", (purchase_order_id,)
        )
        if row is None:
            return None
        order = PurchaseOrder(
            id=row["id"],
            number=row["number"],
            status=PurchaseOrderStatus(row["status"]),
            location_id=row["location_id"],
            supplier_ref=row["supplier_ref"],
            note=row["note"],
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )
        rows = await self._fetchall(
            "SELECT * FROM purchase_order_lines WHERE purchase_order_id = ? ORDER BY id",
            (purchase_order_id,),
        )
        order.lines = [
            PurchaseOrderLine(
                id=line["id"],
                purchase_order_id=line["purchase_order_id"],
                item_id=line["item_id"],
                qty_ordered=line["qty_ordered"],
                qty_received=line["qty_received"],
            )
            for line in rows
        ]
        return order

    async def update_status(self, order: PurchaseOrder) -> None:
        await self._conn.execute(
            "UPDATE purchase_orders SET status = ? WHERE id = ?", (order.status.value, order.id)
        )

    async def update_line_received(self, line_id: int, qty_received: int) -> None:
        await self._conn.execute(
            "UPDATE purchase_order_lines SET qty_received = ? WHERE id = ?",
            (qty_received, line_id),
        )

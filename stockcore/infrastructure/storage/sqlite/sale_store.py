"""SQLite implementation of sale storage."""

import aiosqlite

from stockcore.core.entities import Sale, SaleLine, SaleStatus
from stockcore.core.entities.common import utc_now
from stockcore.core.exceptions import DuplicateNumberError
from stockcore.core.interfaces import ISaleStore
from stockcore.infrastructure.storage.sqlite.rows import (
    SQLiteStore,
    is_unique_violation,
    parse_datetime,
    to_iso,
)


class SQLiteSaleStore(SQLiteStore, ISaleStore):
    async def create(self, sale: Sale) -> Sale:
        try:
            cursor = await self._conn.execute(
                """
                INSERT INTO sales (
                    number, status, location_id, customer_ref, note, posted_at, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    sale.number,
                    sale.status.value,
                    sale.location_id,
                    sale.customer_ref,
                    sale.note,
                    to_iso(sale.posted_at),
                    to_iso(sale.created_at),
                ),
            )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e, "sales.number"):
                raise DuplicateNumberError("Sale", sale.number) from e
            raise
        sale.id = cursor.lastrowid

        for line in sale.lines:
            line.sale_id = sale.id
            line_cursor = await self._conn.execute(
                "INSERT INTO sale_lines (sale_id, item_id, qty, qty_delivered) VALUES (?, ?, ?, ?)",
                (sale.id, line.item_id, line.qty, line.qty_delivered),
            )
            line.id = line_cursor.lastrowid
        return sale

    async def get(self, sale_id: int) -> Sale | None:
        row = await self._fetchone("SELECT * FROM sales WHERE id = ?", (sale_id,))
        if row is None:
            return None
        sale = self._row_to_sale(row)
        rows = await self._fetchall(
            "SELECT * FROM sale_lines WHERE sale_id = ? ORDER BY id", (sale_id,)
        )
        sale.lines = [
            SaleLine(
                id=line["id"],
                sale_id=line["sale_id"],
                item_id=line["item_id"],
                qty=line["qty"],
                qty_delivered=line["qty_delivered"],
            )
            for line in rows
        ]
        return sale

    async def update_status(self, sale: Sale) -> None:
        await self._conn.execute(
            "UPDATE sales SET status = ?, posted_at = ? WHERE id = ?",
            (sale.status.value, to_iso(sale.posted_at), sale.id),
        )

    async def update_line_delivered(self, line_id: int, qty_delivered: int) -> None:
        await self._conn.execute(
            "UPDATE sale_lines SET qty_delivered = ? WHERE id = ?", (qty_delivered, line_id)
        )

    @staticmethod
    def _row_to_sale(row: aiosqlite.Row) -> Sale:
        return Sale(
            id=row["id"],
            number=row["number"],
            status=SaleStatus(row["status"]),
            location_id=row["location_id"],
            customer_ref=row["customer_ref"],
            note=row["note"],
            posted_at=parse_datetime(row["posted_at"]),
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

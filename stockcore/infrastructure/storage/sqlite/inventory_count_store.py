"""SQLite implementation of inventory count storage."""

import aiosqlite

from stockcore.core.entities import (
    CountLineStatus,
    CountMode,
    CountStatus,
    InventoryCount,
    InventoryLine,
)
from stockcore.core.entities.common import utc_now
from stockcore.core.exceptions import DuplicateNumberError
from stockcore.core.interfaces import IInventoryCountStore
from stockcore.infrastructure.storage.sqlite.rows import (
    SQLiteStore,
    is_unique_violation,
    parse_datetime,
    to_iso,
)


class SQLiteInventoryCountStore(SQLiteStore, IInventoryCountStore):
    """Count headers and lines."""

    async def create(self, count: InventoryCount) -> InventoryCount:
        try:
            cursor = await self._conn.execute(
                """
                INSERT INTO inventory_counts (
                    number, status, mode, location_id, category_id,
                    note, posted_at, posted_by, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    count.number,
                    count.status.value,
                    count.mode.value,
                    count.location_id,
                    count.category_id,
                    count.note,
                    to_iso(count.posted_at),
                    count.posted_by,
                    to_iso(count.created_at),
                ),
            )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e, "inventory_counts.number"):
                raise DuplicateNumberError("InventoryCount", count.number) from e
            raise
        count.id = cursor.lastrowid
        if count.lines:
            await self.add_lines(count.id, count.lines)
        return count

    async def get(self, inventory_id: int) -> InventoryCount | None:
        row = await self._fetchone("SELECT * FROM inventory_counts WHERE id = ?", (inventory_id,))
        if row is None:
            return None
        count = self._row_to_count(row)
        rows = await self._fetchall(
            "SELECT * FROM inventory_count_lines WHERE inventory_id = ? ORDER BY id",
            (inventory_id,),
        )
        count.lines = [self._row_to_line(line) for line in rows]
        return count

    async def count_lines(self, inventory_id: int) -> int:
        row = await self._fetchone(
            "SELECT COUNT(*) AS n FROM inventory_count_lines WHERE inventory_id = ?",
            (inventory_id,),
        )
        return row["n"]

    async def add_lines(self, inventory_id: int, lines: list[InventoryLine]) -> int:
        for line in lines:
            line.inventory_id = inventory_id
            cursor = await self._conn.execute(
                """
                INSERT INTO inventory_count_lines (
                    inventory_id, item_id, expected_qty, counted_qty, delta, status, note
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    inventory_id,
                    line.item_id,
                    line.expected_qty,
                    line.counted_qty,
                    line.delta,
                    line.status.value,
                    line.note,
                ),
            )
            line.id = cursor.lastrowid
        return len(lines)

    async def get_line(self, inventory_id: int, line_id: int) -> InventoryLine | None:
        row = await self._fetchone(
            "SELECT * FROM inventory_count_lines WHERE inventory_id = ? AND id = ?",
            (inventory_id, line_id),
        )
        return self._row_to_line(row) if row else None

    async def update_line(self, line: InventoryLine) -> InventoryLine:
        await self._conn.execute(
            """
            UPDATE inventory_count_lines SET
                expected_qty = ?, counted_qty = ?, delta = ?, status = ?, note = ?
            WHERE id = ?
            """,
            (
                line.expected_qty,
                line.counted_qty,
                line.delta,
                line.status.value,
                line.note,
                line.id,
            ),
        )
        return line

    async def update_header(self, count: InventoryCount) -> None:
        await self._conn.execute(
            """
            UPDATE inventory_counts SET
                status = ?, mode = ?, category_id = ?, note = ?, posted_at = ?, posted_by = ?
            WHERE id = ?
            """,
            (
                count.status.value,
                count.mode.value,
                count.category_id,
                count.note,
                to_iso(count.posted_at),
                count.posted_by,
                count.id,
            ),
        )

    @staticmethod
    def _row_to_count(row: aiosqlite.Row) -> InventoryCount:
        return InventoryCount(
            id=row["id"],
            number=row["number"],
            status=CountStatus(row["status"]),
            mode=CountMode(row["mode"]),
            location_id=row["location_id"],
            category_id=row["category_id"],
            note=row["note"],
            posted_at=parse_datetime(row["posted_at"]),
            posted_by=row["posted_by"],
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

    @staticmethod
    def _row_to_line(row: aiosqlite.Row) -> InventoryLine:
        return InventoryLine(
            id=row["id"],
            inventory_id=row["inventory_id"],
            item_id=row["item_id"],
            expected_qty=row["expected_qty"],
            counted_qty=row["counted_qty"],
            delta=row["delta"],
            status=CountLineStatus(row["status"]),
            note=row["note"],
        )

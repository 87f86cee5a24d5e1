"""SQLite implementation of transfer storage."""

import aiosqlite

from stockcore.config import get_logger
from stockcore.core.entities import Transfer, TransferLine, TransferPurpose, TransferStatus
from stockcore.core.entities.common import utc_now
from stockcore.core.interfaces import ITransferStore
from stockcore.infrastructure.storage.sqlite.rows import SQLiteStore, parse_datetime, to_iso

logger = get_logger(__name__)


class SQLiteTransferStore(SQLiteStore, ITransferStore):
    """Transfer headers and lines."""

    async def create(self, transfer: Transfer) -> Transfer:
        cursor = await self._conn.execute(
            """
            INSERT INTO stock_transfers (
                status, source_location_id, destination_location_id, journey_id,
                purpose, note, shipped_at, received_at, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                transfer.status.value,
                transfer.source_location_id,
                transfer.destination_location_id,
                transfer.journey_id,
                transfer.purpose.value,
                transfer.note,
                to_iso(transfer.shipped_at),
                to_iso(transfer.received_at),
                to_iso(transfer.created_at),
            ),
        )
        transfer.id = cursor.lastrowid

        for line in transfer.lines:
            line.transfer_id = transfer.id
            line_cursor = await self._conn.execute(
                """
                INSERT INTO stock_transfer_lines (
                    transfer_id, item_id, qty_requested, qty_received, note
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (transfer.id, line.item_id, line.qty_requested, line.qty_received, line.note),
            )
            line.id = line_cursor.lastrowid

        logger.debug("transfer_stored", transfer_id=transfer.id, lines=len(transfer.lines))
        return transfer

    async def get(self, transfer_id: int) -> Transfer | None:
        row = await self._fetchone("SELECT * FROM stock_transfers WHERE id = ?", (transfer_id,))
        if row is None:
            return None
        transfer = self._row_to_transfer(row)
        transfer.lines = await self._load_lines(transfer_id)
        return transfer

    async def list_recent(self, limit: int = 100) -> list[Transfer]:
        rows = await self._fetchall(
            "SELECT * FROM stock_transfers ORDER BY created_at DESC, id DESC LIMIT ?", (limit,)
        )
        transfers = []
        for row in rows:
            transfer = self._row_to_transfer(row)
            transfer.lines = await self._load_lines(transfer.id)
            transfers.append(transfer)
        return transfers

    async def list_by_journey(self, journey_id: str) -> list[Transfer]:
        rows = await self._fetchall(
            "SELECT * FROM stock_transfers WHERE journey_id = ? ORDER BY id", (journey_id,)
        )
        transfers = []
        for row in rows:
            transfer = self._row_to_transfer(row)
            transfer.lines = await self._load_lines(transfer.id)
            transfers.append(transfer)
        return transfers

    async def update_status(self, transfer: Transfer) -> None:
        await self._conn.execute(
            """
            UPDATE stock_transfers SET
                status = ?, note = ?, shipped_at = ?, received_at = ?
            WHERE id = ?
            """,
            (
                transfer.status.value,
                transfer.note,
                to_iso(transfer.shipped_at),
                to_iso(transfer.received_at),
                transfer.id,
            ),
        )

    async def update_line_received(self, line_id: int, qty_received: int) -> None:
        await self._conn.execute(
            "UPDATE stock_transfer_lines SET qty_received = ? WHERE id = ?",
            (qty_received, line_id),
        )

    async def _load_lines(self, transfer_id: int) -> list[TransferLine]:
        rows = await self._fetchall(
            "SELECT * FROM stock_transfer_lines WHERE transfer_id = ? ORDER BY id",
            (transfer_id,),
        )
        return [
            TransferLine(
                id=row["id"],
                transfer_id=row["transfer_id"],
                item_id=row["item_id"],
                qty_requested=row["qty_requested"],
                qty_received=row["qty_received"],
                note=row["note"],
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_transfer(row: aiosqlite.Row) -> Transfer:
        return Transfer(
            id=row["id"],
            status=TransferStatus(row["status"]),
            source_location_id=row["source_location_id"],
            destination_location_id=row["destination_location_id"],
            journey_id=row["journey_id"],
            purpose=TransferPurpose(row["purpose"]),
            note=row["note"],
            shipped_at=parse_datetime(row["shipped_at"]),
            received_at=parse_datetime(row["received_at"]),
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

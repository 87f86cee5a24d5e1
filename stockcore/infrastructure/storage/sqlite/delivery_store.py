"""SQLite implementation of delivery storage, lines and event trail."""

import json

import aiosqlite

from stockcore.core.entities import (
    Delivery,
    DeliveryEvent,
    DeliveryLine,
    DeliverySource,
    DeliveryStatus,
)
from stockcore.core.entities.common import utc_now
from stockcore.core.exceptions import DuplicateNumberError
from stockcore.core.interfaces import IDeliveryStore
from stockcore.infrastructure.storage.sqlite.rows import (
    SQLiteStore,
    is_unique_violation,
    parse_datetime,
    to_iso,
)


class SQLiteDeliveryStore(SQLiteStore, IDeliveryStore):
    """Deliveries with their lines and append-only events."""

    async def create(self, delivery: Delivery) -> Delivery:
        try:
            cursor = await self._conn.execute(
                """
                INSERT INTO deliveries (
                    number, status, source, sale_id, order_id, origin_location_id,
                    destination_location_id, transfer_id, tracking_token,
                    fulfillment_applied, note, dispatched_at, delivered_at, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    delivery.number,
                    delivery.status.value,
                    delivery.source.value,
                    delivery.sale_id,
                    delivery.order_id,
                    delivery.origin_location_id,
                    delivery.destination_location_id,
                    delivery.transfer_id,
                    delivery.tracking_token,
                    int(delivery.fulfillment_applied),
                    delivery.note,
                    to_iso(delivery.dispatched_at),
                    to_iso(delivery.delivered_at),
                    to_iso(delivery.created_at),
                ),
            )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e, "deliveries.number"):
                raise DuplicateNumberError("Delivery", delivery.number) from e
            raise
        delivery.id = cursor.lastrowid

        for line in delivery.lines:
            line.delivery_id = delivery.id
            line_cursor = await self._conn.execute(
                """
                INSERT INTO delivery_lines (
                    delivery_id, item_id, qty, sale_line_id, order_line_id
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (delivery.id, line.item_id, line.qty, line.sale_line_id, line.order_line_id),
            )
            line.id = line_cursor.lastrowid

        for event in delivery.events:
            event.delivery_id = delivery.id
            await self.add_event(event)
        return delivery

    async def get(self, delivery_id: int) -> Delivery | None:
        row = await self._fetchone("SELECT * FROM deliveries WHERE id = ?", (delivery_id,))
        return await self._load(row) if row else None

    async def get_by_transfer(self, transfer_id: int) -> Delivery | None:
        row = await self._fetchone(
            "SELECT * FROM deliveries WHERE transfer_id = ?", (transfer_id,)
        )
        return await self._load(row) if row else None

    async def update(self, delivery: Delivery) -> None:
        await self._conn.execute(
            """
            UPDATE deliveries SET
                status = ?, fulfillment_applied = ?, dispatched_at = ?, delivered_at = ?
            WHERE id = ?
            """,
            (
                delivery.status.value,
                int(delivery.fulfillment_applied),
                to_iso(delivery.dispatched_at),
                to_iso(delivery.delivered_at),
                delivery.id,
            ),
        )

    async def add_event(self, event: DeliveryEvent) -> DeliveryEvent:
        cursor = await self._conn.execute(
            """
            INSERT INTO delivery_events (delivery_id, type, status, message, meta, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                event.delivery_id,
                event.type,
                event.status.value if event.status else None,
                event.message,
                json.dumps(event.meta) if event.meta is not None else None,
                to_iso(event.created_at),
            ),
        )
        event.id = cursor.lastrowid
        return event

    async def _load(self, row: aiosqlite.Row) -> Delivery:
        delivery = Delivery(
            id=row["id"],
            number=row["number"],
            status=DeliveryStatus(row["status"]),
            source=DeliverySource(row["source"]),
            sale_id=row["sale_id"],
            order_id=row["order_id"],
            origin_location_id=row["origin_location_id"],
            destination_location_id=row["destination_location_id"],
            transfer_id=row["transfer_id"],
            tracking_token=row["tracking_token"],
            fulfillment_applied=bool(row["fulfillment_applied"]),
            note=row["note"],
            dispatched_at=parse_datetime(row["dispatched_at"]),
            delivered_at=parse_datetime(row["delivered_at"]),
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )
        line_rows = await self._fetchall(
            "SELECT * FROM delivery_lines WHERE delivery_id = ? ORDER BY id", (delivery.id,)
        )
        delivery.lines = [
            DeliveryLine(
                id=line["id"],
                delivery_id=line["delivery_id"],
                item_id=line["item_id"],
                qty=line["qty"],
                sale_line_id=line["sale_line_id"],
                order_line_id=line["order_line_id"],
            )
            for line in line_rows
        ]
        event_rows = await self._fetchall(
            "SELECT * FROM delivery_events WHERE delivery_id = ? ORDER BY id", (delivery.id,)
        )
        delivery.events = [self._row_to_event(event) for event in event_rows]
        return delivery

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> DeliveryEvent:
        return DeliveryEvent(
            id=row["id"],
            delivery_id=row["delivery_id"],
            type=row["type"],
            status=DeliveryStatus(row["status"]) if row["status"] else None,
            message=row["message"],
            meta=json.loads(row["meta"]) if row["meta"] else None,
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

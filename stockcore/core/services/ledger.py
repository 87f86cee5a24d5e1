"""
Movement ledger.

The ledger is the only writer of balances. Every change is an appended
movement plus a balance upsert, performed inside the caller's unit of
work so both land or neither does.
"""

from collections import defaultdict

from stockcore.config import get_logger
from stockcore.core.entities import (
    Balance,
    Item,
    Location,
    LocationKind,
    Movement,
    MovementDraft,
    MovementKind,
    MovementResult,
    ReferenceKind,
    TransitLocation,
)
from stockcore.core.entities.stock import (
    NOTE_REQUIRED_REFERENCES,
    STORE_FORBIDDEN_REFERENCES,
)
from stockcore.core.exceptions import (
    InsufficientQuantityError,
    ItemNotFoundError,
    LocationNotFoundError,
    ValidationError,
)
from stockcore.core.interfaces import IUnitOfWork

logger = get_logger(__name__)


def validate_delta(kind: MovementKind, qty_delta: object) -> int:
    """Check that qty_delta is a non-zero integer whose sign matches kind."""
    if isinstance(qty_delta, bool) or not isinstance(qty_delta, int):
        raise ValidationError("qty_delta", "must be an integer", qty_delta, kind=kind.value)
    if qty_delta == 0:
        raise ValidationError("qty_delta", "must not be zero", qty_delta, kind=kind.value)
    if kind == MovementKind.IN and qty_delta < 0:
        raise ValidationError("qty_delta", "IN requires a positive delta", qty_delta, kind=kind.value)
    if kind == MovementKind.OUT and qty_delta > 0:
        raise ValidationError("qty_delta", "OUT requires a negative delta", qty_delta, kind=kind.value)
    return qty_delta


def normalize_note(note: str | None) -> str | None:
    if note is None:
        return None
    note = note.strip()
    return note or None


class MovementLedger:
    """
    Append-only movement log and sole writer of the balance store.

    Enforces:
    - delta sign matches the movement kind
    - balances never go negative
    - manual corrections and losses carry a note
    - stores do not take purchase receipts
    - the in-transit location only moves through transfers
    """

    def __init__(self, uow: IUnitOfWork, transit: TransitLocation | None = None):
        self._uow = uow
        self._transit = transit
        self._locations: dict[int, Location] = {}
        self._items: dict[int, Item] = {}

    # Reads

    async def get_balance(self, location_id: int, item_id: int) -> int:
        balance = await self._uow.stock.get_balance(location_id, item_id)
        return balance.quantity if balance else 0

    async def get_balances(self, location_id: int, item_ids: list[int]) -> dict[int, int]:
        """Quantities for items at a location; 0 where no balance row exists."""
        unique_ids = list(dict.fromkeys(item_ids))
        if not unique_ids:
            return {}
        found = await self._uow.stock.get_balances(location_id, unique_ids)
        return {item_id: found.get(item_id, 0) for item_id in unique_ids}

    # Writes

    async def apply_movement(
        self,
        kind: MovementKind,
        location_id: int,
        item_id: int,
        qty_delta: int,
        reference_kind: ReferenceKind,
        reference_id: str | None = None,
        note: str | None = None,
        transfer_id: int | None = None,
        inventory_id: int | None = None,
    ) -> MovementResult:
        """Apply a single movement and update the balance it touches."""
        draft = MovementDraft(
            kind=kind,
            location_id=location_id,
            item_id=item_id,
            qty_delta=qty_delta,
            reference_kind=reference_kind,
            reference_id=reference_id,
            note=note,
            transfer_id=transfer_id,
            inventory_id=inventory_id,
        )
        await self._validate(draft)
        return await self._apply(draft)

    async def apply_batch(self, drafts: list[MovementDraft]) -> list[MovementResult]:
        """
        Apply several movements as one group.

        Every draft is validated and every balance is checked before the
        first movement is written; one insufficient line fails the batch.
        """
        for draft in drafts:
            await self._validate(draft)
        await self.check_available(drafts)
        return [await self._apply(draft) for draft in drafts]

    async def check_available(self, drafts: list[MovementDraft]) -> None:
        """Raise InsufficientQuantityError if applying drafts in order would go negative."""
        keys_by_location: dict[int, list[int]] = defaultdict(list)
        for draft in drafts:
            keys_by_location[draft.location_id].append(draft.item_id)

        running: dict[tuple[int, int], int] = {}
        for location_id, item_ids in keys_by_location.items():
            current = await self.get_balances(location_id, item_ids)
            for item_id, qty in current.items():
                running[(location_id, item_id)] = qty

        starting = dict(running)
        requested: dict[tuple[int, int], int] = defaultdict(int)
        for draft in drafts:
            key = (draft.location_id, draft.item_id)
            if draft.qty_delta < 0:
                requested[key] += -draft.qty_delta
            running[key] += draft.qty_delta
            if running[key] < 0:
                raise InsufficientQuantityError(
                    draft.location_id, draft.item_id, starting[key], requested[key]
                )

    async def reconcile(
        self,
        location_id: int,
        item_id: int,
        target_qty: int,
        reference_kind: ReferenceKind,
        reference_id: str | None = None,
        note: str | None = None,
        inventory_id: int | None = None,
    ) -> MovementResult:
        """
        Set a balance to an absolute quantity.

        Reads the current balance, appends an ADJUST for the difference
        when there is one, then upserts the balance to target_qty.
        """
        if isinstance(target_qty, bool) or not isinstance(target_qty, int) or target_qty < 0:
            raise ValidationError("target_qty", "must be a non-negative integer", target_qty)
        await self._get_location(location_id)
        await self._get_item(item_id)

        current = await self.get_balance(location_id, item_id)
        delta = target_qty - current
        movement = None
        if delta != 0:
            draft = MovementDraft(
                kind=MovementKind.ADJUST,
                location_id=location_id,
                item_id=item_id,
                qty_delta=delta,
                reference_kind=reference_kind,
                reference_id=reference_id,
                note=note,
                inventory_id=inventory_id,
            )
            await self._validate(draft)
            movement = await self._append(draft)

        balance = await self._uow.stock.upsert_balance(location_id, item_id, target_qty)
        logger.info(
            "stock_reconciled",
            location_id=location_id,
            item_id=item_id,
            previous=current,
            target=target_qty,
            reference_kind=reference_kind.value,
        )
        return MovementResult(balance=balance, movement=movement)

    # Convenience wrappers

    async def record_return(
        self,
        location_id: int,
        item_id: int,
        qty: int,
        reason: str | None = None,
        reference_id: str | None = None,
    ) -> MovementResult:
        """Customer return: IN with a default note."""
        note = f"Customer return: {reason}" if reason else "Customer return"
        return await self.apply_movement(
            MovementKind.IN, location_id, item_id, qty,
            ReferenceKind.RETURN, reference_id=reference_id, note=note,
        )

    async def record_loss(
        self,
        location_id: int,
        item_id: int,
        qty: int,
        note: str,
        loss_type: str | None = None,
        reference_id: str | None = None,
    ) -> MovementResult:
        """Breakage, theft or expiry: OUT with a mandatory note."""
        validate_delta(MovementKind.IN, qty)
        note = normalize_note(note)
        if note and loss_type:
            note = f"{note} (type: {loss_type})"
        return await self.apply_movement(
            MovementKind.OUT, location_id, item_id, -qty,
            ReferenceKind.LOSS, reference_id=reference_id, note=note,
        )

    async def set_stock_level(
        self,
        location_id: int,
        item_id: int,
        counted_qty: int,
        note: str,
    ) -> MovementResult:
        """Legacy absolute set; no movement when the quantity already matches."""
        if isinstance(counted_qty, bool) or not isinstance(counted_qty, int) or counted_qty < 0:
            raise ValidationError("counted_qty", "must be a non-negative integer", counted_qty)
        if not normalize_note(note):
            raise ValidationError("note", "is required for a stock level correction")
        await self._get_location(location_id)
        await self._get_item(item_id)

        current = await self.get_balance(location_id, item_id)
        delta = counted_qty - current
        if delta == 0:
            return MovementResult(
                balance=Balance(location_id=location_id, item_id=item_id, quantity=current),
                movement=None,
            )
        return await self.apply_movement(
            MovementKind.ADJUST, location_id, item_id, delta,
            ReferenceKind.LEGACY_INVENTORY, note=note,
        )

    # Internals

    async def _get_location(self, location_id: int) -> Location:
        location = self._locations.get(location_id)
        if location is None:
            location = await self._uow.master.get_location(location_id)
            if location is None:
                raise LocationNotFoundError(location_id)
            self._locations[location_id] = location
        return location

    async def _get_item(self, item_id: int) -> Item:
        item = self._items.get(item_id)
        if item is None:
            item = await self._uow.master.get_item(item_id)
            if item is None:
                raise ItemNotFoundError(item_id)
            self._items[item_id] = item
        return item

    def _is_transit(self, location: Location) -> bool:
        if self._transit is not None:
            return self._transit.matches(location.id)
        return location.kind == LocationKind.IN_TRANSIT

    async def _validate(self, draft: MovementDraft) -> None:
        validate_delta(draft.kind, draft.qty_delta)
        draft.note = normalize_note(draft.note)
        if draft.reference_kind in NOTE_REQUIRED_REFERENCES and not draft.note:
            raise ValidationError(
                "note",
                f"is required for {draft.reference_kind.value} movements",
                reference_kind=draft.reference_kind.value,
            )

        location = await self._get_location(draft.location_id)
        await self._get_item(draft.item_id)

        if location.kind == LocationKind.STORE and draft.reference_kind in STORE_FORBIDDEN_REFERENCES:
            raise ValidationError(
                "reference_kind",
                "stores cannot receive purchases directly",
                draft.reference_kind.value,
                location_id=draft.location_id,
            )
        if self._is_transit(location) and draft.transfer_id is None:
            raise ValidationError(
                "location_id",
                "the in-transit location only moves through transfers",
                draft.location_id,
            )

    async def _apply(self, draft: MovementDraft) -> MovementResult:
        current = await self.get_balance(draft.location_id, draft.item_id)
        next_qty = current + draft.qty_delta
        if next_qty < 0:
            raise InsufficientQuantityError(
                draft.location_id, draft.item_id, current, abs(draft.qty_delta)
            )

        balance = await self._uow.stock.upsert_balance(draft.location_id, draft.item_id, next_qty)
        movement = await self._append(draft)
        return MovementResult(balance=balance, movement=movement)

    async def _append(self, draft: MovementDraft) -> Movement:
        movement = await self._uow.stock.add_movement(
            Movement(
                kind=draft.kind,
                location_id=draft.location_id,
                item_id=draft.item_id,
                qty_delta=draft.qty_delta,
                reference_kind=draft.reference_kind,
                reference_id=draft.reference_id,
                transfer_id=draft.transfer_id,
                inventory_id=draft.inventory_id,
                note=draft.note,
            )
        )
        logger.info(
            "stock_movement_recorded",
            movement_id=movement.id,
            kind=draft.kind.value,
            location_id=draft.location_id,
            item_id=draft.item_id,
            qty_delta=draft.qty_delta,
            reference_kind=draft.reference_kind.value,
            reference_id=draft.reference_id,
        )
        return movement

"""Validation helpers for submitted document lines."""

from stockcore.core.entities import LineQuantity
from stockcore.core.exceptions import ItemNotFoundError, ValidationError
from stockcore.core.interfaces import IUnitOfWork


def check_quantity(field: str, value: object, allow_zero: bool = False) -> int:
    """Require an integer quantity, positive unless allow_zero."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, "must be an integer", value)
    if value < 0:
        raise ValidationError(field, "must not be negative", value)
    if value == 0 and not allow_zero:
        raise ValidationError(field, "must be positive", value)
    return value


def merge_lines(lines: list[LineQuantity]) -> list[LineQuantity]:
    """Sum quantities of lines that repeat an item, keeping first-seen order."""
    if not lines:
        raise ValidationError("lines", "at least one line is required")
    merged: dict[int, LineQuantity] = {}
    for line in lines:
        check_quantity("qty", line.qty)
        if line.item_id in merged:
            merged[line.item_id].qty += line.qty
        else:
            merged[line.item_id] = LineQuantity(item_id=line.item_id, qty=line.qty, note=line.note)
    return list(merged.values())


async def ensure_items_exist(uow: IUnitOfWork, item_ids: list[int]) -> None:
    found = await uow.master.get_items(item_ids)
    for item_id in item_ids:
        if item_id not in found:
            raise ItemNotFoundError(item_id)

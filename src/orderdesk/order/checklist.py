"""Fulfillment checklist queries.

Staff tick each line item as it is physically gathered. The checklist is a
sparse mapping of 0-based item position to a boolean; missing positions
count as unchecked. These helpers are pure so the state machine, the next
action logic and the board can share them.
"""

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class UncheckedItem:
    position: int
    name: str
    quantity: int
    price: float


def parse_checked_items(raw: str | dict | None) -> dict[int, bool]:
    """Decode the persisted checklist into a position -> bool mapping."""
    if not raw:
        return {}
    data = json.loads(raw) if isinstance(raw, str) else raw
    return {int(position): bool(value) for position, value in data.items()}


def dump_checked_items(checked_items: dict[int, bool]) -> str:
    return json.dumps({str(position): value for position, value in sorted(checked_items.items())})


def checked_count(checked_items: dict[int, bool], total_items: int) -> int:
    """Number of positions in range whose value is true."""
    return sum(1 for position, value in checked_items.items() if value and 0 <= position < total_items)


def is_fully_checked(checked_items: dict[int, bool], total_items: int) -> bool:
    """True when the order has items and every one of them is ticked."""
    if total_items == 0:
        return False
    return checked_count(checked_items, total_items) >= total_items


def unchecked_items(checked_items: dict[int, bool], items) -> list[UncheckedItem]:
    """Items whose position is not ticked, in position order.

    `items` is any sequence of objects with position, name, quantity and
    price attributes (order items or their board snapshots).
    """
    return [
        UncheckedItem(
            position=item.position,
            name=item.name,
            quantity=item.quantity,
            price=item.price or 0.0,
        )
        for item in sorted(items, key=lambda i: i.position)
        if not checked_items.get(item.position, False)
    ]


class Checklist:
    """Read-only checklist view over a persisted order."""

    def __init__(self, order) -> None:
        self._items = list(order.line_items)
        self._checked = parse_checked_items(order.checked_items)

    @property
    def total(self) -> int:
        return len(self._items)

    @property
    def checked_count(self) -> int:
        return checked_count(self._checked, self.total)

    @property
    def is_fully_checked(self) -> bool:
        return is_fully_checked(self._checked, self.total)

    @property
    def has_any_checked(self) -> bool:
        return self.checked_count > 0

    def unchecked_items(self) -> list[UncheckedItem]:
        return unchecked_items(self._checked, self._items)

    def is_checked(self, position: int) -> bool:
        return self._checked.get(position, False)

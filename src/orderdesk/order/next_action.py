"""Recommended next action for an order.

Staff screens show one primary button per order. Which one depends on the
status, the order type and, while the order is pending, on the checklist:
nothing can be accepted until at least one item has been gathered.
"""

from dataclasses import dataclass
from enum import Enum

from orderdesk.order.order import OrderStatus, OrderType


class NextActionKey(Enum):
    ACCEPT = "accept"
    ACCEPT_WITH_SHORTFALL = "accept_with_shortfall"
    START_PREPARING = "start_preparing"
    MARK_READY = "mark_ready"
    MARK_SERVED = "mark_served"


@dataclass(frozen=True)
class NextAction:
    key: NextActionKey
    target: OrderStatus
    has_unavailable: bool = False


def recommended_next_action(order) -> NextAction | None:
    """Return the one action staff should take next, or None."""
    status = OrderStatus(order.status)

    if status == OrderStatus.PENDING:
        checklist = order.checklist
        if checklist.total == 0 or not checklist.has_any_checked:
            return None
        if checklist.is_fully_checked:
            return NextAction(NextActionKey.ACCEPT, OrderStatus.ACCEPTED)
        return NextAction(NextActionKey.ACCEPT_WITH_SHORTFALL, OrderStatus.ACCEPTED, has_unavailable=True)

    if status == OrderStatus.ACCEPTED:
        return NextAction(NextActionKey.START_PREPARING, OrderStatus.PREPARING)

    if status == OrderStatus.PREPARING:
        return NextAction(NextActionKey.MARK_READY, OrderStatus.READY)

    # Dine-in service is recorded as delivered; "served" is how staff see it.
    if status == OrderStatus.READY and OrderType(order.order_type) == OrderType.DINE_IN:
        return NextAction(NextActionKey.MARK_SERVED, OrderStatus.DELIVERED)

    return None

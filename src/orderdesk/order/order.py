"""Order aggregate (CQRS) — the core of the order desk.

The Order aggregate is the single document a business works on from intake
to a terminal state. It owns the fulfillment checklist, the status state
machine and the audit trail left by every transition. Side effects of a
transition (refunds, customer notifications, scoring) are handled outside
the aggregate by reacting to OrderStatusChanged.

State Machine (guarded moves):
    PENDING → ACCEPTED → PREPARING → READY
    READY → ON_THE_WAY → DELIVERED          (delivery)
    READY → DELIVERED                       (pickup, dine-in)
    READY → SERVED                          (dine-in)
    {DELIVERED, SERVED} → COMPLETED
    {PENDING, ACCEPTED, PREPARING, READY, ON_THE_WAY} → CANCELLED

Administrative overrides may move an order to any status, except that a
dine-in order can never go out for delivery.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Integer,
    String,
    Text,
)

from orderdesk.domain import orderdesk
from orderdesk.order.actor import Actor
from orderdesk.order.checklist import (
    Checklist,
    dump_checked_items,
    parse_checked_items,
)
from orderdesk.order.events import (
    CourierAssigned,
    OrderItemChecked,
    OrderPlaced,
    OrderStatusChanged,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"
    ON_THE_WAY = "onTheWay"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderType(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"
    DINE_IN = "dine_in"


class PaymentStatus(Enum):
    PAID = "paid"
    UNPAID = "unpaid"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.ACCEPTED, OrderStatus.CANCELLED},
    OrderStatus.ACCEPTED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.ON_THE_WAY: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SERVED: {OrderStatus.COMPLETED},
    OrderStatus.DELIVERED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

# Where a ready order may go depends on how it leaves the business.
_READY_TRANSITIONS = {
    OrderType.DELIVERY: {OrderStatus.ON_THE_WAY, OrderStatus.CANCELLED},
    OrderType.PICKUP: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderType.DINE_IN: {OrderStatus.SERVED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
}

_COURIER_CLEARING_STATUSES = {
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.READY,
}

_SERVICE_STAMPING_STATUSES = {
    OrderStatus.SERVED,
    OrderStatus.DELIVERED,
}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@orderdesk.entity(part_of="Order")
class OrderItem:
    """A single line of the order. Position is the 0-based line index."""

    position = Integer(required=True, min_value=0)
    product_id = String(max_length=100)
    name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(default=0.0)
    unit = String(max_length=30)
    modifiers = Text()  # JSON list of {"name", "price"}
    note = String(max_length=500)

    @property
    def line_total(self) -> float:
        return round((self.price or 0.0) * self.quantity, 2)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@orderdesk.aggregate
class Order:
    order_number = String(max_length=50)
    business_id = String(max_length=100)
    business_name = String(max_length=255)
    customer_id = String(max_length=100)
    customer_name = String(max_length=255)
    customer_phone = String(max_length=50)
    items = HasMany(OrderItem)
    subtotal = Float(default=0.0)
    delivery_fee = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="EUR")
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    order_type = String(choices=OrderType, default=OrderType.PICKUP.value)
    created_at = DateTime()
    updated_at = DateTime()
    scheduled_at = DateTime()
    delivery_address = String(max_length=500)
    notes = String(max_length=1000)

    # Dine-in and payment
    table_number = String(max_length=20)
    waiter_name = String(max_length=255)
    table_session_id = String(max_length=100)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.UNPAID.value)
    payment_method = String(max_length=50)
    payment_reference = String(max_length=255)

    # Courier claim
    courier_id = String(max_length=100)
    courier_name = String(max_length=255)
    courier_phone = String(max_length=50)
    claimed_at = DateTime()

    # Audit trail
    served_by_name = String(max_length=255)
    served_by_id = String(max_length=100)
    served_at = DateTime()
    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=255)
    cancelled_at = DateTime()
    unavailable_items = Text()  # JSON list of 1-based unavailable item records
    status_history = Text()  # JSON map of status -> ISO time first entered
    checked_items = Text()  # JSON map of 0-based position -> bool

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        items_data: list[dict],
        order_id: str | None = None,
        checked_items: dict[int, bool] | None = None,
        **attributes,
    ):
        """Create a new order from canonical field values.

        Items are positioned in the order given; positions never change
        afterwards. Imported orders may arrive with part of the checklist done.
        """
        now = datetime.now(UTC)
        created_at = attributes.pop("created_at", None) or now
        status = attributes.pop("status", None) or OrderStatus.PENDING.value
        if order_id:
            attributes["id"] = order_id

        order = cls(
            status=status,
            created_at=created_at,
            updated_at=now,
            status_history=json.dumps({status: created_at.isoformat()}),
            **attributes,
        )
        if not order.order_number:
            order.order_number = str(order.id)[:6].upper()

        for position, item_data in enumerate(items_data):
            item_data = {k: v for k, v in item_data.items() if k != "position"}
            order.add_items(OrderItem(position=position, **item_data))
        if checked_items:
            order.checked_items = dump_checked_items(checked_items)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                business_id=order.business_id,
                business_name=order.business_name,
                customer_id=order.customer_id,
                customer_name=order.customer_name,
                status=order.status,
                order_type=order.order_type,
                total=order.total,
                currency=order.currency,
                item_count=len(items_data),
                checked_count=order.checklist.checked_count,
                table_number=order.table_number,
                payment_status=order.payment_status,
                courier_name=order.courier_name or order.courier_id,
                served_by_name=order.served_by_name,
                created_at=created_at,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def line_items(self) -> list[OrderItem]:
        return sorted(self.items or [], key=lambda item: item.position)

    @property
    def checklist(self) -> Checklist:
        return Checklist(self)

    @property
    def history(self) -> dict[str, str]:
        return json.loads(self.status_history) if self.status_history else {}

    @property
    def unavailable(self) -> list[dict]:
        return json.loads(self.unavailable_items) if self.unavailable_items else []

    @property
    def has_courier(self) -> bool:
        return bool(self.courier_id or self.courier_name or self.courier_phone or self.claimed_at)

    def allowed_targets(self) -> set[OrderStatus]:
        """Statuses reachable from the current one by a guarded move."""
        current = OrderStatus(self.status)
        if current == OrderStatus.READY:
            return _READY_TRANSITIONS[OrderType(self.order_type)]
        return _VALID_TRANSITIONS[current]

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in self.allowed_targets():
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _unavailable_records(self, positions) -> list[dict]:
        items_by_position = {item.position: item for item in self.line_items}
        records = []
        for position in sorted(set(positions)):
            item = items_by_position.get(position)
            if item is None:
                raise ValidationError({"unavailable_positions": [f"Order has no item at position {position}"]})
            records.append(
                {
                    "position_number": position + 1,
                    "product_name": item.name,
                    "quantity": item.quantity,
                    "price": item.price or 0.0,
                }
            )
        return records

    # -------------------------------------------------------------------
    # Status workflow
    # -------------------------------------------------------------------
    def transition_to(
        self,
        target: OrderStatus | str,
        actor: Actor | None = None,
        cancellation_reason: str | None = None,
        unavailable_positions: list[int] | None = None,
        administrative: bool = False,
    ) -> None:
        """Move the order to `target` and record everything the move implies.

        Guarded moves follow the transition table and, for acceptance, the
        checklist. Administrative overrides skip both.
        """
        target = OrderStatus(target)
        actor = actor or Actor()
        current = OrderStatus(self.status)

        if target == OrderStatus.ON_THE_WAY and OrderType(self.order_type) == OrderType.DINE_IN:
            raise ValidationError({"status": ["Dine-in orders cannot be sent out for delivery"]})
        if not administrative:
            self._assert_can_transition(target)

        reason = (cancellation_reason or "").strip()
        if target == OrderStatus.CANCELLED and not reason:
            raise ValidationError({"cancellation_reason": ["A cancellation reason is required"]})

        unavailable = []
        if target == OrderStatus.ACCEPTED:
            checklist = self.checklist
            if not administrative:
                if not checklist.has_any_checked:
                    raise ValidationError({"checked_items": ["At least one item must be checked before accepting"]})
                if unavailable_positions is None:
                    unavailable_positions = [item.position for item in checklist.unchecked_items()]
            unavailable = self._unavailable_records(unavailable_positions or [])

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        courier_cleared = False
        if target in _COURIER_CLEARING_STATUSES and self.has_courier:
            self.courier_id = None
            self.courier_name = None
            self.courier_phone = None
            self.claimed_at = None
            courier_cleared = True

        if target in _SERVICE_STAMPING_STATUSES:
            self.served_by_name = actor.display_name
            self.served_by_id = actor.actor_id or None
            self.served_at = now

        if target == OrderStatus.CANCELLED:
            self.cancellation_reason = reason
            self.cancelled_by = actor.display_name
            self.cancelled_at = now

        if target == OrderStatus.ACCEPTED:
            self.unavailable_items = json.dumps(unavailable)

        history = self.history
        history.setdefault(target.value, now.isoformat())
        self.status_history = json.dumps(history)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                business_id=self.business_id,
                order_type=self.order_type,
                from_status=current.value,
                to_status=target.value,
                administrative=administrative,
                actor_id=actor.actor_id,
                actor_name=actor.display_name,
                cancellation_reason=reason or None,
                unavailable_items=json.dumps(unavailable),
                courier_cleared=courier_cleared,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Checklist
    # -------------------------------------------------------------------
    def mark_item_checked(self, position: int, checked: bool) -> None:
        """Tick or untick one line item. Re-applying the same value is a no-op."""
        if not 0 <= position < len(self.items or []):
            raise ValidationError({"position": [f"Order has no item at position {position}"]})

        checked_map = parse_checked_items(self.checked_items)
        if position in checked_map and checked_map[position] == checked:
            return
        if position not in checked_map and not checked:
            return

        now = datetime.now(UTC)
        checked_map[position] = checked
        self.checked_items = dump_checked_items(checked_map)
        self.updated_at = now
        self.raise_(
            OrderItemChecked(
                order_id=str(self.id),
                position=position,
                checked=checked,
                checked_count=self.checklist.checked_count,
                item_count=len(self.items),
                checked_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Courier
    # -------------------------------------------------------------------
    def assign_courier(self, courier_id: str, courier_name: str | None = None, courier_phone: str | None = None):
        """Record a courier claiming a ready delivery order."""
        if OrderType(self.order_type) != OrderType.DELIVERY:
            raise ValidationError({"order_type": ["Only delivery orders can be claimed by a courier"]})
        if OrderStatus(self.status) != OrderStatus.READY:
            raise ValidationError({"status": ["Only ready orders can be claimed by a courier"]})
        if self.courier_id and self.courier_id != courier_id:
            raise ValidationError({"courier_id": ["Order is already claimed by another courier"]})

        now = datetime.now(UTC)
        self.courier_id = courier_id
        self.courier_name = courier_name
        self.courier_phone = courier_phone
        self.claimed_at = now
        self.updated_at = now
        self.raise_(
            CourierAssigned(
                order_id=str(self.id),
                courier_id=courier_id,
                courier_name=courier_name,
                courier_phone=courier_phone,
                claimed_at=now,
            )
        )

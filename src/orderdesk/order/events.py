"""Order domain events — immutable facts about order state changes.

All events are past tense, versioned, and carry the data the live board
projector and the side-effect handler need without reloading the order.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from orderdesk.domain import orderdesk


@orderdesk.event(part_of="Order")
class OrderPlaced:
    """A new order entered the system through the ordering channel."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    business_id = String()
    business_name = String()
    customer_id = String()
    customer_name = String()
    status = String(required=True)
    order_type = String(required=True)
    total = Float()
    currency = String()
    item_count = Integer()
    checked_count = Integer()
    table_number = String()
    payment_status = String()
    courier_name = String()
    served_by_name = String()
    created_at = DateTime(required=True)


@orderdesk.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new status, guarded or by administrative override."""

    __version__ = 1

    order_id = Identifier(required=True)
    business_id = String()
    order_type = String()
    from_status = String(required=True)
    to_status = String(required=True)
    administrative = Boolean(default=False)
    actor_id = String()
    actor_name = String()
    cancellation_reason = String()
    unavailable_items = Text()  # JSON list of unavailable item records
    courier_cleared = Boolean(default=False)
    changed_at = DateTime(required=True)


@orderdesk.event(part_of="Order")
class OrderItemChecked:
    """A kitchen line item was ticked or unticked on the checklist."""

    __version__ = 1

    order_id = Identifier(required=True)
    position = Integer(required=True)
    checked = Boolean(required=True)
    checked_count = Integer(required=True)
    item_count = Integer(required=True)
    checked_at = DateTime(required=True)


@orderdesk.event(part_of="Order")
class CourierAssigned:
    """A courier claimed a ready delivery order."""

    __version__ = 1

    order_id = Identifier(required=True)
    courier_id = String(required=True)
    courier_name = String()
    courier_phone = String()
    claimed_at = DateTime(required=True)

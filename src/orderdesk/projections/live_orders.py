"""Live order cards — one row per order for the staff kanban board.

Every change to a card is followed by a publish to the live board feed so
subscribed screens get a freshly derived board in event order.
"""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk
from orderdesk.live.feed import get_feed
from orderdesk.order.events import (
    CourierAssigned,
    OrderItemChecked,
    OrderPlaced,
    OrderStatusChanged,
)
from orderdesk.order.order import Order, OrderStatus

_SERVICE_STATUSES = {OrderStatus.SERVED.value, OrderStatus.DELIVERED.value}
_COURIER_CLEARING_STATUSES = {OrderStatus.PENDING.value, OrderStatus.PREPARING.value, OrderStatus.READY.value}


@orderdesk.projection
class LiveOrderCard:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(max_length=50)
    business_id = String(max_length=100)
    business_name = String(max_length=255)
    customer_name = String(max_length=255)
    status = String(required=True, max_length=20)
    order_type = String(max_length=20)
    total = Float(default=0.0)
    currency = String(max_length=3)
    item_count = Integer(default=0)
    checked_count = Integer(default=0)
    unavailable_count = Integer(default=0)
    table_number = String(max_length=20)
    payment_status = String(max_length=20)
    courier_name = String(max_length=255)
    served_by_name = String(max_length=255)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()


@orderdesk.projector(projector_for=LiveOrderCard, aggregates=[Order])
class LiveOrderCardProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(LiveOrderCard).add(
            LiveOrderCard(
                order_id=event.order_id,
                order_number=event.order_number,
                business_id=event.business_id,
                business_name=event.business_name,
                customer_name=event.customer_name,
                status=event.status,
                order_type=event.order_type,
                total=event.total or 0.0,
                currency=event.currency,
                item_count=event.item_count or 0,
                checked_count=event.checked_count or 0,
                table_number=event.table_number,
                payment_status=event.payment_status,
                courier_name=event.courier_name,
                served_by_name=event.served_by_name,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )
        get_feed().publish(str(event.order_id))

    def _update(self, order_id, **changes):
        repo = current_domain.repository_for(LiveOrderCard)
        card = repo.get(str(order_id))
        for name, value in changes.items():
            setattr(card, name, value)
        repo.add(card)
        get_feed().publish(str(order_id))

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        changes = {"status": event.to_status, "updated_at": event.changed_at}
        if event.to_status in _SERVICE_STATUSES:
            changes["served_by_name"] = event.actor_name
        if event.to_status == OrderStatus.CANCELLED.value:
            changes["cancellation_reason"] = event.cancellation_reason
        if event.to_status == OrderStatus.ACCEPTED.value:
            changes["unavailable_count"] = len(json.loads(event.unavailable_items or "[]"))
        if event.to_status in _COURIER_CLEARING_STATUSES:
            changes["courier_name"] = None
        self._update(event.order_id, **changes)

    @on(OrderItemChecked)
    def on_order_item_checked(self, event):
        self._update(event.order_id, checked_count=event.checked_count, updated_at=event.checked_at)

    @on(CourierAssigned)
    def on_courier_assigned(self, event):
        self._update(event.order_id, courier_name=event.courier_name or event.courier_id, updated_at=event.claimed_at)

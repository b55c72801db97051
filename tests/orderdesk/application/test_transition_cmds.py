"""Application tests for TransitionOrder and PerformNextAction."""

import json

import pytest
from orderdesk.order.checking import SetItemChecked
from orderdesk.order.intake import ImportOrder
from orderdesk.order.order import Order, OrderStatus
from orderdesk.order.transition import PerformNextAction, TransitionOrder
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _import_order(order_type="pickup", status="pending", item_count=3, **fields):
    document = {
        "businessId": "biz-1",
        "customerId": "cust-1",
        "orderType": order_type,
        "status": status,
        "items": [{"name": f"Item {i}", "quantity": 1, "price": 5.0} for i in range(item_count)],
        **fields,
    }
    return current_domain.process(ImportOrder(document=json.dumps(document)), asynchronous=False)


def _check(order_id, *positions):
    for position in positions:
        current_domain.process(SetItemChecked(order_id=order_id, position=position), asynchronous=False)


def _transition(order_id, target, **kwargs):
    return current_domain.process(
        TransitionOrder(order_id=order_id, target_status=target, actor_name="Elif", actor_id="staff-7", **kwargs),
        asynchronous=False,
    )


def _get(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestTransitionOrder:
    def test_guarded_transition_persists(self):
        order_id = _import_order(status="accepted")
        result = _transition(order_id, "preparing")

        assert result == "preparing"
        assert _get(order_id).status == OrderStatus.PREPARING.value

    def test_accept_with_partial_checklist(self):
        order_id = _import_order()
        _check(order_id, 0, 2)
        _transition(order_id, "accepted")

        order = _get(order_id)
        assert order.status == "accepted"
        assert [record["product_name"] for record in order.unavailable] == ["Item 1"]

    def test_invalid_transition_rejected(self):
        order_id = _import_order()
        with pytest.raises(ValidationError) as exc:
            _transition(order_id, "ready")
        assert "status" in exc.value.messages
        assert _get(order_id).status == "pending"

    def test_unknown_target_rejected(self):
        order_id = _import_order()
        with pytest.raises(ValidationError) as exc:
            _transition(order_id, "teleported")
        assert "target_status" in exc.value.messages

    def test_cancel_without_reason_fails_before_loading(self):
        with pytest.raises(ValidationError) as exc:
            _transition("no-such-order", "cancelled")
        assert "cancellation_reason" in exc.value.messages

    def test_cancel_with_reason(self):
        order_id = _import_order()
        _transition(order_id, "cancelled", cancellation_reason="Closed early")

        order = _get(order_id)
        assert order.status == "cancelled"
        assert order.cancelled_by == "Elif"

    def test_missing_order(self):
        with pytest.raises(ObjectNotFoundError):
            _transition("no-such-order", "accepted")

    def test_administrative_override_with_positions(self):
        order_id = _import_order()
        _transition(order_id, "accepted", administrative=True, unavailable_positions=json.dumps([1]))

        order = _get(order_id)
        assert order.status == "accepted"
        assert order.unavailable[0]["position_number"] == 2

    def test_malformed_positions_rejected(self):
        order_id = _import_order()
        with pytest.raises(ValidationError) as exc:
            _transition(order_id, "accepted", administrative=True, unavailable_positions='["one"]')
        assert "unavailable_positions" in exc.value.messages

    def test_status_change_event_is_stored(self):
        order_id = _import_order(status="preparing")
        _transition(order_id, "ready")

        messages = current_domain.event_store.store.read(f"orderdesk::order-{order_id}")
        changes = [m for m in messages if m.metadata.headers.type == "Orderdesk.OrderStatusChanged.v1"]
        assert len(changes) == 1


class TestPerformNextAction:
    def test_nothing_checked_means_no_action(self):
        order_id = _import_order()
        with pytest.raises(ValidationError) as exc:
            current_domain.process(PerformNextAction(order_id=order_id), asynchronous=False)
        assert "status" in exc.value.messages

    def test_shortfall_acceptance(self):
        order_id = _import_order()
        _check(order_id, 0, 1)
        action = current_domain.process(PerformNextAction(order_id=order_id, actor_name="Elif"), asynchronous=False)

        assert action == "accept_with_shortfall"
        order = _get(order_id)
        assert order.status == "accepted"
        assert len(order.unavailable) == 1

    def test_walks_the_kitchen_flow(self):
        order_id = _import_order(item_count=1)
        _check(order_id, 0)

        actions = [
            current_domain.process(PerformNextAction(order_id=order_id), asynchronous=False) for _ in range(3)
        ]
        assert actions == ["accept", "start_preparing", "mark_ready"]
        assert _get(order_id).status == "ready"

    def test_ready_dine_in_is_served(self):
        order_id = _import_order(order_type="dine_in", status="ready", tableNumber="7")
        action = current_domain.process(
            PerformNextAction(order_id=order_id, actor_id="staff-7", actor_name="Elif"),
            asynchronous=False,
        )

        order = _get(order_id)
        assert action == "mark_served"
        assert order.status == "delivered"
        assert order.served_by_name == "Elif"
        assert order.served_by_id == "staff-7"

    def test_ready_pickup_has_no_action(self):
        order_id = _import_order(status="ready")
        with pytest.raises(ValidationError):
            current_domain.process(PerformNextAction(order_id=order_id), asynchronous=False)

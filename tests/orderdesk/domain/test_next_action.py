import pytest
from orderdesk.order.next_action import NextActionKey, recommended_next_action
from orderdesk.order.order import Order, OrderStatus


def _make_order(status="pending", order_type="pickup", item_count=3):
    order = Order.create(
        items_data=[{"name": f"Item {i}", "quantity": 1, "price": 4.0} for i in range(item_count)],
        status=status,
        order_type=order_type,
    )
    order._events.clear()
    return order


class TestPendingOrders:
    def test_nothing_checked_means_no_action(self):
        assert recommended_next_action(_make_order()) is None

    def test_order_without_items_has_no_action(self):
        assert recommended_next_action(_make_order(item_count=0)) is None

    def test_partially_checked_suggests_shortfall_acceptance(self):
        order = _make_order()
        order.mark_item_checked(0, True)
        order.mark_item_checked(1, True)

        action = recommended_next_action(order)
        assert action.key == NextActionKey.ACCEPT_WITH_SHORTFALL
        assert action.target == OrderStatus.ACCEPTED
        assert action.has_unavailable is True

    def test_fully_checked_suggests_plain_acceptance(self):
        order = _make_order()
        for position in range(3):
            order.mark_item_checked(position, True)

        action = recommended_next_action(order)
        assert action.key == NextActionKey.ACCEPT
        assert action.has_unavailable is False

    def test_unchecking_everything_removes_the_action(self):
        order = _make_order()
        order.mark_item_checked(0, True)
        order.mark_item_checked(0, False)
        assert recommended_next_action(order) is None


class TestLaterStatuses:
    @pytest.mark.parametrize(
        "status,key,target",
        [
            ("accepted", NextActionKey.START_PREPARING, OrderStatus.PREPARING),
            ("preparing", NextActionKey.MARK_READY, OrderStatus.READY),
        ],
    )
    def test_kitchen_progression(self, status, key, target):
        action = recommended_next_action(_make_order(status=status))
        assert action.key == key
        assert action.target == target

    def test_ready_dine_in_is_marked_served_as_delivered(self):
        action = recommended_next_action(_make_order(status="ready", order_type="dine_in"))
        assert action.key == NextActionKey.MARK_SERVED
        assert action.target == OrderStatus.DELIVERED

    @pytest.mark.parametrize("order_type", ["pickup", "delivery"])
    def test_ready_takeaway_orders_have_no_action(self, order_type):
        assert recommended_next_action(_make_order(status="ready", order_type=order_type)) is None

    @pytest.mark.parametrize("status", ["onTheWay", "served", "delivered", "completed", "cancelled"])
    def test_late_statuses_have_no_action(self, status):
        assert recommended_next_action(_make_order(status=status, order_type="delivery")) is None

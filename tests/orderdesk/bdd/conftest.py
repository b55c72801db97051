"""Shared BDD fixtures and step definitions for the order desk."""

import json

import pytest
from orderdesk.live.board import DateWindow, build_board
from orderdesk.order.intake import ImportOrder
from orderdesk.order.next_action import recommended_next_action
from orderdesk.order.order import Order
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def business_id():
    return "biz-001"


@pytest.fixture()
def error():
    """Container for a captured validation error."""
    return {"exc": None}


def _load(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


@pytest.fixture()
def run_command(error):
    """Process a command, capturing a ValidationError instead of raising it."""

    def run(command):
        try:
            return current_domain.process(command, asynchronous=False)
        except ValidationError as exc:
            error["exc"] = exc
            return None

    return run


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a pending pickup order with items "{names}"'),
    target_fixture="order_id",
)
def _(names, business_id):
    document = {
        "businessId": business_id,
        "orderType": "pickup",
        "items": [{"productName": name.strip(), "quantity": 1, "price": 4.0} for name in names.split(",")],
    }
    return current_domain.process(ImportOrder(document=json.dumps(document)), asynchronous=False)


@given(
    parsers.cfparse('a ready dine-in order for table "{table_number}"'),
    target_fixture="order_id",
)
def _(table_number, business_id):
    document = {
        "businessId": business_id,
        "orderType": "dineIn",
        "status": "ready",
        "tableNumber": table_number,
        "totalPrice": 18.0,
        "items": [{"productName": "Iskender", "quantity": 1, "price": 18.0}],
    }
    return current_domain.process(ImportOrder(document=json.dumps(document)), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("no next action is recommended")
def _(order_id):
    assert recommended_next_action(_load(order_id)) is None


@then(parsers.cfparse('the recommended next action is "{key}"'))
def _(order_id, key):
    action = recommended_next_action(_load(order_id))
    assert action is not None
    assert action.key.value == key


@then(parsers.cfparse('the order status is "{status}"'))
def _(order_id, status):
    assert _load(order_id).status == status


@then(parsers.cfparse('the command is rejected on "{field}"'))
def _(error, field):
    assert error["exc"] is not None
    assert field in error["exc"].messages


@then(parsers.cfparse('the order is in the "{bucket}" column of the board'))
def _(order_id, bucket):
    board = build_board(DateWindow.ALL)
    assert board.bucket_of(order_id).value == bucket

"""BDD tests for dine-in table service."""

from orderdesk.order.order import Order
from orderdesk.order.transition import PerformNextAction, TransitionOrder
from protean import current_domain
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/table_service.feature")


@when(parsers.cfparse('waiter "{name}" performs the next action'))
def _(order_id, name, run_command):
    run_command(PerformNextAction(order_id=order_id, actor_id="waiter-1", actor_name=name))


@when(parsers.cfparse('an administrator moves the order to "{status}"'))
def _(order_id, status, run_command):
    run_command(TransitionOrder(order_id=order_id, target_status=status, administrative=True))


@then(parsers.cfparse('the order was served by "{name}"'))
def _(order_id, name):
    order = current_domain.repository_for(Order).get(order_id)
    assert order.served_by_name == name
    assert order.served_at is not None

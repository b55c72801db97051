"""Order status workflow — commands and handler.

TransitionOrder moves an order to an explicit status, either as a guarded
move or as an administrative override. PerformNextAction executes whatever
recommended_next_action() suggests for the order right now.

Every command here results in exactly one write of the order. Validation
that needs only the command (a cancellation without a reason, an unknown
status) fails before the order is loaded.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk
from orderdesk.order.actor import Actor
from orderdesk.order.next_action import recommended_next_action
from orderdesk.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@orderdesk.command(part_of="Order")
class TransitionOrder:
    """Move an order to a new status."""

    order_id = Identifier(required=True)
    target_status = String(required=True, max_length=20)
    cancellation_reason = String(max_length=500)
    unavailable_positions = Text()  # JSON list of 0-based item positions
    administrative = Boolean(default=False)
    actor_id = String(max_length=100)
    actor_name = String(max_length=255)
    actor_email = String(max_length=255)


@orderdesk.command(part_of="Order")
class PerformNextAction:
    """Execute the recommended next action for an order."""

    order_id = Identifier(required=True)
    actor_id = String(max_length=100)
    actor_name = String(max_length=255)
    actor_email = String(max_length=255)


def _parse_target(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as exc:
        raise ValidationError({"target_status": [f"Unknown order status: {value}"]}) from exc


def _parse_positions(raw: str | None) -> list[int] | None:
    if raw is None or raw == "":
        return None
    try:
        positions = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError({"unavailable_positions": ["Must be a JSON list of item positions"]}) from exc
    if not isinstance(positions, list) or not all(isinstance(p, int) and not isinstance(p, bool) for p in positions):
        raise ValidationError({"unavailable_positions": ["Must be a JSON list of item positions"]})
    return positions


@orderdesk.command_handler(part_of=Order)
class OrderWorkflowHandler:
    @handle(TransitionOrder)
    def transition_order(self, command):
        target = _parse_target(command.target_status)
        if target == OrderStatus.CANCELLED and not (command.cancellation_reason or "").strip():
            raise ValidationError({"cancellation_reason": ["A cancellation reason is required"]})
        positions = _parse_positions(command.unavailable_positions)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        from_status = order.status
        order.transition_to(
            target,
            actor=Actor.from_command(command),
            cancellation_reason=command.cancellation_reason,
            unavailable_positions=positions,
            administrative=bool(command.administrative),
        )
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            from_status=from_status,
            to_status=order.status,
            administrative=bool(command.administrative),
        )
        return order.status

    @handle(PerformNextAction)
    def perform_next_action(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        action = recommended_next_action(order)
        if action is None:
            raise ValidationError({"status": [f"No action is available for an order in {order.status}"]})

        order.transition_to(action.target, actor=Actor.from_command(command))
        repo.add(order)

        logger.info(
            "Next action performed",
            order_id=str(order.id),
            action=action.key.value,
            to_status=order.status,
        )
        return action.key.value

"""Administrative order deletion — command and handler.

Deletion is a hard delete. The live card goes with the order, subscribed
boards are refreshed, and an open table session for the order is closed
on a best-effort basis.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from orderdesk.directory import get_table_sessions
from orderdesk.domain import orderdesk
from orderdesk.live.feed import get_feed
from orderdesk.order.actor import Actor
from orderdesk.order.order import Order
from orderdesk.projections.live_orders import LiveOrderCard

logger = structlog.get_logger(__name__)


@orderdesk.command(part_of="Order")
class DeleteOrder:
    """Permanently remove an order."""

    order_id = Identifier(required=True)
    reason = String(max_length=500)
    actor_id = String(max_length=100)
    actor_name = String(max_length=255)
    actor_email = String(max_length=255)


@orderdesk.command_handler(part_of=Order)
class DeletionHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        actor = Actor.from_command(command)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order_id = str(order.id)
        session_id = order.table_session_id
        repo._dao.delete(order)

        card_repo = current_domain.repository_for(LiveOrderCard)
        try:
            card_repo._dao.delete(card_repo.get(order_id))
        except ObjectNotFoundError:
            pass  # Never projected
        get_feed().publish(order_id)

        if session_id:
            try:
                get_table_sessions().close(session_id, reason="Order deleted", closed_by=actor.display_name)
            except Exception as exc:
                logger.warning(
                    "Could not close table session for deleted order",
                    order_id=order_id,
                    table_session_id=session_id,
                    error=str(exc),
                )

        logger.info(
            "Order deleted",
            order_id=order_id,
            deleted_by=actor.display_name,
            reason=command.reason,
        )

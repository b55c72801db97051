"""Kitchen checklist — command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Integer
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk
from orderdesk.order.order import Order


@orderdesk.command(part_of="Order")
class SetItemChecked:
    """Tick or untick the line item at a 0-based position."""

    order_id = Identifier(required=True)
    position = Integer(required=True)
    checked = Boolean(default=True)


@orderdesk.command_handler(part_of=Order)
class ChecklistHandler:
    @handle(SetItemChecked)
    def set_item_checked(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_item_checked(command.position, bool(command.checked))
        repo.add(order)

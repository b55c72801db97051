"""Courier claims — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk
from orderdesk.order.order import Order


@orderdesk.command(part_of="Order")
class ClaimDelivery:
    """A courier takes a ready delivery order."""

    order_id = Identifier(required=True)
    courier_id = String(required=True, max_length=100)
    courier_name = String(max_length=255)
    courier_phone = String(max_length=50)


@orderdesk.command_handler(part_of=Order)
class CourierHandler:
    @handle(ClaimDelivery)
    def claim_delivery(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.assign_courier(command.courier_id, command.courier_name, command.courier_phone)
        repo.add(order)

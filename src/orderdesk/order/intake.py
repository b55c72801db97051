"""Order intake — command and handler.

Orders are created by the ordering channels, which write documents in
whatever shape their generation used. ImportOrder accepts such a raw
document, normalizes it and persists it as a canonical Order.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk
from orderdesk.order.normalizer import normalize_order_record
from orderdesk.order.order import Order

logger = structlog.get_logger(__name__)


@orderdesk.command(part_of="Order")
class ImportOrder:
    """Create an order from a raw ordering-channel document."""

    order_id = Identifier()
    document = Text(required=True)  # JSON object
    source = String(max_length=50, default="api")


def _decode_document(raw: str) -> dict:
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError({"document": [f"Order document is not valid JSON: {exc.msg}"]}) from exc
    if not isinstance(document, dict):
        raise ValidationError({"document": ["Order document must be a JSON object"]})
    return document


@orderdesk.command_handler(part_of=Order)
class IntakeHandler:
    @handle(ImportOrder)
    def import_order(self, command):
        document = _decode_document(command.document)
        canonical = normalize_order_record(document, document_id=command.order_id)

        repo = current_domain.repository_for(Order)
        if canonical.order_id:
            try:
                repo.get(canonical.order_id)
            except ObjectNotFoundError:
                pass
            else:
                raise ValidationError({"order_id": [f"Order {canonical.order_id} already exists"]})

        order = Order.create(
            items_data=[item.to_dict() for item in canonical.items],
            order_id=canonical.order_id or None,
            checked_items=canonical.checked_items,
            **canonical.aggregate_attributes(),
        )
        repo.add(order)

        logger.info(
            "Order imported",
            order_id=str(order.id),
            order_number=order.order_number,
            business_id=order.business_id,
            status=order.status,
            source=command.source,
        )
        return str(order.id)

"""Application tests for order intake from raw ordering-channel documents."""

import json

import pytest
from orderdesk.order.intake import ImportOrder
from orderdesk.order.order import Order
from orderdesk.projections.live_orders import LiveOrderCard
from protean import current_domain
from protean.exceptions import ValidationError

LEGACY_DOCUMENT = {
    "butcherId": "biz-1",
    "butcherName": "Kasap Ali",
    "userId": "cust-1",
    "userDisplayName": "Ayse",
    "deliveryMethod": "delivery",
    "totalPrice": 23.5,
    "paymentStatus": "paid",
    "paymentMethod": "card",
    "stripePaymentIntentId": "pi_123",
    "createdAt": {"seconds": 1_780_000_000},
    "checkedItems": {"0": True},
    "items": [
        {"productName": "Lamb Chops", "quantity": 2, "price": 9.5},
        {"name": "Bread", "quantity": 1, "price": 2.0},
        {"productName": "Ayran", "quantity": 1, "price": 2.5},
    ],
}


def _import(document, order_id=None):
    return current_domain.process(
        ImportOrder(order_id=order_id, document=json.dumps(document), source="test"),
        asynchronous=False,
    )


class TestImportOrder:
    def test_import_persists_canonical_order(self):
        order_id = _import(LEGACY_DOCUMENT, order_id="ord-legacy-1")
        order = current_domain.repository_for(Order).get(order_id)

        assert order_id == "ord-legacy-1"
        assert order.business_id == "biz-1"
        assert order.business_name == "Kasap Ali"
        assert order.customer_name == "Ayse"
        assert order.order_type == "delivery"
        assert order.total == 23.5
        assert order.payment_reference == "pi_123"
        assert order.status == "pending"
        assert order.order_number == "ORD-LE"

    def test_items_keep_document_order(self):
        order_id = _import(LEGACY_DOCUMENT)
        order = current_domain.repository_for(Order).get(order_id)
        assert [(item.position, item.name) for item in order.line_items] == [
            (0, "Lamb Chops"),
            (1, "Bread"),
            (2, "Ayran"),
        ]

    def test_checklist_is_carried_over(self):
        order_id = _import(LEGACY_DOCUMENT)
        order = current_domain.repository_for(Order).get(order_id)
        assert order.checklist.checked_count == 1
        assert order.checklist.is_checked(0)

    def test_document_id_field_is_used(self):
        order_id = _import({"id": "ord-from-doc", "items": []})
        assert order_id == "ord-from-doc"

    def test_id_is_generated_when_missing(self):
        order_id = _import({"items": [{"name": "Bread"}]})
        assert order_id
        assert current_domain.repository_for(Order).get(order_id).order_number == order_id[:6].upper()

    def test_import_projects_a_live_card(self):
        order_id = _import(LEGACY_DOCUMENT)
        card = current_domain.repository_for(LiveOrderCard).get(order_id)
        assert card.status == "pending"
        assert card.item_count == 3
        assert card.business_name == "Kasap Ali"

    def test_duplicate_id_is_rejected(self):
        _import(LEGACY_DOCUMENT, order_id="ord-dup")
        with pytest.raises(ValidationError) as exc:
            _import(LEGACY_DOCUMENT, order_id="ord-dup")
        assert "order_id" in exc.value.messages


class TestImportOrderValidation:
    def test_invalid_json_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            current_domain.process(ImportOrder(document="{not json"), asynchronous=False)
        assert "document" in exc.value.messages

    def test_non_object_document_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            current_domain.process(ImportOrder(document="[1, 2, 3]"), asynchronous=False)
        assert "document" in exc.value.messages

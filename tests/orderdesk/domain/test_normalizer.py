"""Tests for the order record normalizer — alias precedence, defaults and totality."""

from datetime import UTC, datetime

import pytest
from orderdesk.order.normalizer import (
    CanonicalOrder,
    normalize_order_record,
    normalize_order_type,
    normalize_status,
    parse_timestamp,
)


class TestAliasPrecedence:
    def test_butcher_fields_map_to_business(self):
        canonical = normalize_order_record({"butcherId": "b-1", "butcherName": "Kasap Ali"})
        assert canonical.business_id == "b-1"
        assert canonical.business_name == "Kasap Ali"

    def test_business_id_wins_over_butcher_id(self):
        canonical = normalize_order_record({"businessId": "biz-new", "butcherId": "b-old"})
        assert canonical.business_id == "biz-new"

    def test_falsy_alias_falls_through_to_next(self):
        canonical = normalize_order_record({"businessId": "", "butcherId": "b-1"})
        assert canonical.business_id == "b-1"

    def test_user_id_wins_over_customer_id(self):
        canonical = normalize_order_record({"userId": "u-1", "customerId": "c-1"})
        assert canonical.customer_id == "u-1"

    def test_customer_name_falls_back_to_display_name(self):
        canonical = normalize_order_record({"userDisplayName": "Ayse", "userName": "ayse42"})
        assert canonical.customer_name == "Ayse"

    def test_total_prefers_total_price(self):
        canonical = normalize_order_record({"totalPrice": 30.5, "totalAmount": 29.0, "total": 10})
        assert canonical.total == 30.5

    def test_total_falls_back_to_total_field(self):
        canonical = normalize_order_record({"total": "12.40"})
        assert canonical.total == pytest.approx(12.40)

    def test_order_type_from_delivery_method(self):
        canonical = normalize_order_record({"deliveryMethod": "delivery"})
        assert canonical.order_type == "delivery"

    def test_order_type_prefers_order_type_field(self):
        canonical = normalize_order_record({"orderType": "dine_in", "deliveryMethod": "delivery"})
        assert canonical.order_type == "dine_in"

    def test_group_session_maps_to_table_session(self):
        canonical = normalize_order_record({"groupSessionId": "sess-9"})
        assert canonical.table_session_id == "sess-9"

    def test_payment_intent_maps_to_reference(self):
        canonical = normalize_order_record({"stripePaymentIntentId": "pi_123"})
        assert canonical.payment_reference == "pi_123"

    def test_cancel_reason_alias(self):
        canonical = normalize_order_record({"cancelReason": "Closed early"})
        assert canonical.cancellation_reason == "Closed early"


class TestDefaults:
    def test_empty_document_gets_defaults(self):
        canonical = normalize_order_record({})
        assert canonical.status == "pending"
        assert canonical.order_type == "pickup"
        assert canonical.payment_status == "unpaid"
        assert canonical.currency == "EUR"
        assert canonical.total == 0.0
        assert canonical.items == []
        assert canonical.business_id == ""

    def test_order_number_derived_from_id(self):
        canonical = normalize_order_record({}, document_id="abcdef123")
        assert canonical.order_number == "ABCDEF"

    def test_explicit_order_number_kept(self):
        canonical = normalize_order_record({"orderNumber": "A-77"}, document_id="abcdef123")
        assert canonical.order_number == "A-77"

    @pytest.mark.parametrize("document", [None, [], "not an order", 42])
    def test_non_mapping_input_is_tolerated(self, document):
        assert isinstance(normalize_order_record(document), CanonicalOrder)


class TestStatusAndType:
    def test_dine_in_camel_case_normalized(self):
        assert normalize_order_type("dineIn") == "dine_in"

    def test_unknown_type_defaults_to_pickup(self):
        assert normalize_order_type("drone") == "pickup"

    def test_on_the_way_kept(self):
        assert normalize_status("onTheWay") == "onTheWay"

    def test_unknown_status_defaults_to_pending(self):
        assert normalize_status("lost") == "pending"

    def test_american_spelling_of_cancelled(self):
        assert normalize_status("canceled") == "cancelled"


class TestItems:
    def test_product_name_wins_over_name(self):
        canonical = normalize_order_record({"items": [{"productName": "Lamb Chops", "name": "lamb"}]})
        assert canonical.items[0].name == "Lamb Chops"

    def test_quantity_is_at_least_one(self):
        canonical = normalize_order_record({"items": [{"name": "Bread", "quantity": 0}]})
        assert canonical.items[0].quantity == 1

    def test_garbage_quantity_becomes_one(self):
        canonical = normalize_order_record({"items": [{"name": "Bread", "quantity": "lots"}]})
        assert canonical.items[0].quantity == 1

    def test_price_and_modifiers(self):
        canonical = normalize_order_record(
            {"items": [{"name": "Kebab", "price": "7.5", "modifiers": [{"name": "Extra sauce", "price": 0.5}]}]}
        )
        item = canonical.items[0]
        assert item.price == 7.5
        assert item.modifiers == [{"name": "Extra sauce", "price": 0.5}]

    def test_item_order_is_preserved(self):
        canonical = normalize_order_record({"items": [{"name": "A"}, {"name": "B"}, {"name": "C"}]})
        assert [item.name for item in canonical.items] == ["A", "B", "C"]

    def test_items_not_a_list_yields_no_items(self):
        assert normalize_order_record({"items": "oops"}).items == []


class TestChecklistAndAddress:
    def test_checked_items_map_with_string_keys(self):
        canonical = normalize_order_record({"checkedItems": {"0": True, "2": False, "x": True}})
        assert canonical.checked_items == {0: True, 2: False}

    def test_structured_address_is_flattened(self):
        canonical = normalize_order_record(
            {"deliveryAddress": {"street": "Hauptstr.", "houseNumber": "5", "postalCode": "10115", "city": "Berlin"}}
        )
        assert canonical.delivery_address == "Hauptstr., 5, 10115, Berlin"

    def test_string_address_kept(self):
        canonical = normalize_order_record({"address": "Main St 1"})
        assert canonical.delivery_address == "Main St 1"


class TestTimestamps:
    def test_iso_string_with_z(self):
        assert parse_timestamp("2026-03-01T10:00:00Z") == datetime(2026, 3, 1, 10, 0, tzinfo=UTC)

    def test_epoch_seconds(self):
        assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=UTC)

    def test_epoch_milliseconds(self):
        assert parse_timestamp(1_700_000_000_000) == datetime.fromtimestamp(1_700_000_000, tz=UTC)

    def test_seconds_map(self):
        assert parse_timestamp({"seconds": 60, "nanoseconds": 0}) == datetime(1970, 1, 1, 0, 1, tzinfo=UTC)

    def test_naive_datetime_assumed_utc(self):
        assert parse_timestamp(datetime(2026, 1, 1, 8, 0)).tzinfo == UTC

    def test_unparseable_string_is_none(self):
        assert parse_timestamp("yesterday-ish") is None

    def test_created_at_read_from_document(self):
        canonical = normalize_order_record({"createdAt": {"seconds": 1_700_000_000}})
        assert canonical.created_at == datetime.fromtimestamp(1_700_000_000, tz=UTC)


class TestAggregateAttributes:
    def test_empty_values_are_dropped(self):
        attributes = normalize_order_record({"butcherId": "b-1"}).aggregate_attributes()
        assert attributes["business_id"] == "b-1"
        assert "business_name" not in attributes
        assert "items" not in attributes
        assert "order_id" not in attributes

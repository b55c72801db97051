"""Order record normalizer.

Order documents arrive from several generations of ordering channels and
name the same fact differently (``butcherId`` vs ``businessId``,
``deliveryMethod`` vs ``orderType``, ``totalPrice`` vs ``total``...). This
module maps any such document to one canonical shape. It is pure and
total: every input yields a CanonicalOrder, with defaults for what is
missing, and nothing here raises.

For every canonical field the alias table lists legacy keys in priority
order; the first alias holding a truthy value wins.
"""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime

_ALIASES: dict[str, tuple[str, ...]] = {
    "order_number": ("orderNumber", "order_number"),
    "business_id": ("businessId", "butcherId", "business_id"),
    "business_name": ("businessName", "butcherName", "business_name"),
    "customer_id": ("userId", "customerId", "customer_id"),
    "customer_name": ("customerName", "userDisplayName", "userName", "customer_name"),
    "customer_phone": ("customerPhone", "userPhone", "customer_phone"),
    "subtotal": ("subtotal", "totalPrice", "totalAmount"),
    "delivery_fee": ("deliveryFee", "delivery_fee"),
    "total": ("totalPrice", "totalAmount", "total"),
    "currency": ("currency",),
    "status": ("status",),
    "order_type": ("orderType", "deliveryMethod", "deliveryType", "fulfillmentType", "order_type"),
    "created_at": ("createdAt", "created_at"),
    "updated_at": ("updatedAt", "updated_at"),
    "scheduled_at": ("deliveryDate", "scheduledDateTime", "scheduledAt"),
    "notes": ("notes", "orderNote", "customerNote"),
    "table_number": ("tableNumber", "table_number"),
    "waiter_name": ("waiterName", "waiter_name"),
    "table_session_id": ("groupSessionId", "tableSessionId", "table_session_id"),
    "payment_status": ("paymentStatus", "payment_status"),
    "payment_method": ("paymentMethod", "payment_method"),
    "payment_reference": ("stripePaymentIntentId", "paymentIntentId", "payment_reference"),
    "courier_id": ("courierId", "courier_id"),
    "courier_name": ("courierName", "courier_name"),
    "courier_phone": ("courierPhone", "courier_phone"),
    "claimed_at": ("claimedAt", "claimed_at"),
    "served_by_name": ("servedByName", "served_by_name"),
    "served_by_id": ("servedById", "served_by_id"),
    "served_at": ("servedAt", "served_at"),
    "cancellation_reason": ("cancellationReason", "cancelReason", "cancellation_reason"),
}

_ITEM_ALIASES: dict[str, tuple[str, ...]] = {
    "product_id": ("productId", "sku", "id", "product_id"),
    "name": ("productName", "name"),
    "quantity": ("quantity", "qty"),
    "price": ("unitPrice", "price"),
    "unit": ("unit",),
    "note": ("note", "itemNote"),
}

_STATUSES = {
    "pending",
    "accepted",
    "preparing",
    "ready",
    "served",
    "onTheWay",
    "delivered",
    "completed",
    "cancelled",
}

_STATUS_SYNONYMS = {
    "on_the_way": "onTheWay",
    "ontheway": "onTheWay",
    "canceled": "cancelled",
}

_ORDER_TYPES = {"pickup", "delivery", "dine_in"}

_ORDER_TYPE_SYNONYMS = {
    "dineIn": "dine_in",
    "dinein": "dine_in",
    "dine-in": "dine_in",
    "pick_up": "pickup",
    "pick-up": "pickup",
}

DEFAULT_STATUS = "pending"
DEFAULT_ORDER_TYPE = "pickup"
DEFAULT_PAYMENT_STATUS = "unpaid"
DEFAULT_CURRENCY = "EUR"


@dataclass
class CanonicalItem:
    product_id: str = ""
    name: str = ""
    quantity: int = 1
    price: float = 0.0
    unit: str | None = None
    modifiers: list[dict] = field(default_factory=list)
    note: str | None = None

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
            "unit": self.unit,
            "modifiers": json.dumps(self.modifiers) if self.modifiers else None,
            "note": self.note,
        }


@dataclass
class CanonicalOrder:
    order_id: str = ""
    order_number: str = ""
    business_id: str = ""
    business_name: str = ""
    customer_id: str = ""
    customer_name: str = ""
    customer_phone: str = ""
    items: list[CanonicalItem] = field(default_factory=list)
    subtotal: float = 0.0
    delivery_fee: float = 0.0
    total: float = 0.0
    currency: str = DEFAULT_CURRENCY
    status: str = DEFAULT_STATUS
    order_type: str = DEFAULT_ORDER_TYPE
    created_at: datetime | None = None
    updated_at: datetime | None = None
    scheduled_at: datetime | None = None
    delivery_address: str = ""
    notes: str = ""
    table_number: str = ""
    waiter_name: str = ""
    table_session_id: str = ""
    payment_status: str = DEFAULT_PAYMENT_STATUS
    payment_method: str = ""
    payment_reference: str = ""
    courier_id: str = ""
    courier_name: str = ""
    courier_phone: str = ""
    claimed_at: datetime | None = None
    served_by_name: str = ""
    served_by_id: str = ""
    served_at: datetime | None = None
    cancellation_reason: str = ""
    checked_items: dict[int, bool] = field(default_factory=dict)

    def aggregate_attributes(self) -> dict:
        """Field values for Order.create, with empty values dropped."""
        skip = {"order_id", "items", "checked_items", "updated_at"}
        return {
            name: value
            for name, value in self.__dict__.items()
            if name not in skip and value not in ("", None)
        }


# ---------------------------------------------------------------------------
# Scalar coercion
# ---------------------------------------------------------------------------
def _first(document: dict, aliases: tuple[str, ...]):
    for alias in aliases:
        value = document.get(alias)
        if value:
            return value
    return None


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _number(value) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _quantity(value) -> int:
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(quantity, 1)


def parse_timestamp(value) -> datetime | None:
    """Read a timestamp from a datetime, ISO string, epoch number or ``{"seconds": ...}`` map."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if seconds is None:
            return None
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        return parse_timestamp(_number(seconds) + _number(nanos) / 1e9)
    if isinstance(value, int | float) and not isinstance(value, bool):
        # Millisecond epochs are far beyond any plausible second epoch.
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def normalize_status(value) -> str:
    token = _text(value)
    if token in _STATUSES:
        return token
    return _STATUS_SYNONYMS.get(token.lower(), DEFAULT_STATUS)


def normalize_order_type(value) -> str:
    token = _text(value)
    if token in _ORDER_TYPES:
        return token
    return _ORDER_TYPE_SYNONYMS.get(token, _ORDER_TYPE_SYNONYMS.get(token.lower(), DEFAULT_ORDER_TYPE))


def _payment_status(value) -> str:
    token = _text(value).lower()
    return token if token in ("paid", "unpaid") else DEFAULT_PAYMENT_STATUS


def _address(document: dict) -> str:
    raw = document.get("deliveryAddress") or document.get("address")
    if isinstance(raw, dict):
        parts = [raw.get(key) for key in ("street", "houseNumber", "postalCode", "city")]
        return ", ".join(_text(part) for part in parts if part) or _text(raw.get("formatted"))
    return _text(raw)


def _checked_items(raw) -> dict[int, bool]:
    if isinstance(raw, list):
        return {position: bool(value) for position, value in enumerate(raw) if value is not None}
    if not isinstance(raw, dict):
        return {}
    checked = {}
    for key, value in raw.items():
        try:
            checked[int(key)] = bool(value)
        except (TypeError, ValueError):
            continue
    return checked


def _modifiers(raw) -> list[dict]:
    if not isinstance(raw, list):
        return []
    modifiers = []
    for entry in raw:
        if isinstance(entry, dict):
            modifiers.append({"name": _text(entry.get("name")), "price": _number(entry.get("price"))})
        elif entry:
            modifiers.append({"name": _text(entry), "price": 0.0})
    return modifiers


def normalize_item(raw) -> CanonicalItem:
    if not isinstance(raw, dict):
        return CanonicalItem(name=_text(raw))
    return CanonicalItem(
        product_id=_text(_first(raw, _ITEM_ALIASES["product_id"])),
        name=_text(_first(raw, _ITEM_ALIASES["name"])),
        quantity=_quantity(_first(raw, _ITEM_ALIASES["quantity"])),
        price=_number(_first(raw, _ITEM_ALIASES["price"])),
        unit=_text(_first(raw, _ITEM_ALIASES["unit"])) or None,
        modifiers=_modifiers(raw.get("modifiers") or raw.get("options")),
        note=_text(_first(raw, _ITEM_ALIASES["note"])) or None,
    )


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------
def normalize_order_record(document, document_id: str | None = None) -> CanonicalOrder:
    """Map a raw order document of any known generation to a CanonicalOrder."""
    if not isinstance(document, dict):
        document = {}

    order_id = _text(document_id or document.get("id") or document.get("orderId"))
    raw_items = document.get("items")
    items = [normalize_item(item) for item in raw_items] if isinstance(raw_items, list) else []

    def text(name: str) -> str:
        return _text(_first(document, _ALIASES[name]))

    def number(name: str) -> float:
        return _number(_first(document, _ALIASES[name]))

    def timestamp(name: str) -> datetime | None:
        return parse_timestamp(_first(document, _ALIASES[name]))

    return CanonicalOrder(
        order_id=order_id,
        order_number=text("order_number") or order_id[:6].upper(),
        business_id=text("business_id"),
        business_name=text("business_name"),
        customer_id=text("customer_id"),
        customer_name=text("customer_name"),
        customer_phone=text("customer_phone"),
        items=items,
        subtotal=number("subtotal"),
        delivery_fee=number("delivery_fee"),
        total=number("total"),
        currency=text("currency").upper() or DEFAULT_CURRENCY,
        status=normalize_status(_first(document, _ALIASES["status"])),
        order_type=normalize_order_type(_first(document, _ALIASES["order_type"])),
        created_at=timestamp("created_at"),
        updated_at=timestamp("updated_at"),
        scheduled_at=timestamp("scheduled_at"),
        delivery_address=_address(document),
        notes=text("notes"),
        table_number=text("table_number"),
        waiter_name=text("waiter_name"),
        table_session_id=text("table_session_id"),
        payment_status=_payment_status(_first(document, _ALIASES["payment_status"])),
        payment_method=text("payment_method").lower(),
        payment_reference=text("payment_reference"),
        courier_id=text("courier_id"),
        courier_name=text("courier_name"),
        courier_phone=text("courier_phone"),
        claimed_at=timestamp("claimed_at"),
        served_by_name=text("served_by_name"),
        served_by_id=text("served_by_id"),
        served_at=timestamp("served_at"),
        cancellation_reason=text("cancellation_reason"),
        checked_items=_checked_items(document.get("checkedItems") or document.get("checked_items")),
    )

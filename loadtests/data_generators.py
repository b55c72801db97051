"""Faker-based data generators for the order desk load scenarios.

Documents deliberately mix the field names of the different ordering-channel
generations (butcherId vs businessId, deliveryMethod vs orderType, ...) so
that intake normalization is exercised under load.
"""

import random
import uuid

from faker import Faker

fake = Faker("de_DE")

BUSINESS_IDS = [f"biz-lt-{n:02d}" for n in range(1, 11)]

_MENU = [
    ("Lamb Chops", 9.5, "kg"),
    ("Beef Mince", 7.9, "kg"),
    ("Chicken Breast", 6.5, "kg"),
    ("Sucuk", 4.2, None),
    ("Flatbread", 2.0, None),
    ("Ayran", 1.8, None),
    ("Doner Plate", 11.0, None),
    ("Lahmacun", 4.5, None),
]


def unique_order_id() -> str:
    return f"ord-lt-{uuid.uuid4().hex[:12]}"


def _item(legacy: bool) -> dict:
    name, price, unit = random.choice(_MENU)
    item = {
        "productName" if legacy else "name": name,
        "quantity": random.randint(1, 3),
        "price": price,
    }
    if unit:
        item["unit"] = unit
    if random.random() < 0.2:
        item["modifiers"] = [{"name": "Extra spicy", "price": 0.5}]
    return item


def order_document(order_type: str = "pickup", item_count: int | None = None, paid_by_card: bool = True) -> dict:
    """An ordering-channel document in either the legacy or the current shape."""
    legacy = random.random() < 0.5
    items = [_item(legacy) for _ in range(item_count or random.randint(2, 5))]
    total = round(sum(item["price"] * item["quantity"] for item in items), 2)
    business_id = random.choice(BUSINESS_IDS)

    document = {
        "butcherId" if legacy else "businessId": business_id,
        "butcherName" if legacy else "businessName": fake.company()[:255],
        "userId" if legacy else "customerId": f"cust-lt-{uuid.uuid4().hex[:8]}",
        "userDisplayName" if legacy else "customerName": fake.name()[:255],
        "deliveryMethod" if legacy else "orderType": order_type,
        "totalPrice": total,
        "items": items,
        "createdAt": fake.date_time_this_month(tzinfo=None).isoformat() + "Z",
    }
    if paid_by_card:
        document["paymentStatus"] = "paid"
        document["paymentMethod"] = random.choice(["card", "apple_pay", "google_pay"])
        document["stripePaymentIntentId"] = f"pi_lt_{uuid.uuid4().hex[:16]}"
    else:
        document["paymentStatus"] = "unpaid"
        document["paymentMethod"] = "cash"
    if order_type == "delivery":
        document["deliveryAddress"] = {
            "street": fake.street_name(),
            "houseNumber": fake.building_number(),
            "postalCode": fake.postcode(),
            "city": fake.city(),
        }
    if order_type == "dine_in":
        document["tableNumber"] = str(random.randint(1, 30))
        document["groupSessionId"] = f"sess-lt-{uuid.uuid4().hex[:8]}"
    return document


def import_payload(order_type: str = "pickup", **kwargs) -> dict:
    """POST /orders body."""
    return {
        "order_id": unique_order_id(),
        "document": order_document(order_type, **kwargs),
        "source": "loadtest",
    }


def staff_headers() -> dict:
    return {
        "X-Actor-Id": f"staff-lt-{random.randint(1, 40):02d}",
        "X-Actor-Name": fake.first_name(),
    }


def courier_data() -> dict:
    return {
        "courier_id": f"courier-lt-{random.randint(1, 25):02d}",
        "courier_name": fake.first_name(),
        "courier_phone": fake.phone_number()[:50],
    }


def cancellation_reason() -> str:
    return random.choice(
        [
            "Out of stock",
            "Shop closing early",
            "Customer asked to cancel",
            "Kitchen overloaded",
        ]
    )

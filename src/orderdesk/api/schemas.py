"""Pydantic API schemas for the order desk.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from datetime import datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class ImportOrderRequest(BaseModel):
    order_id: str | None = None
    document: dict
    source: str = "api"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "ord-1001",
                    "document": {
                        "butcherId": "biz-1",
                        "butcherName": "Kasap Ali",
                        "userId": "cust-1",
                        "deliveryMethod": "pickup",
                        "totalPrice": 21.0,
                        "items": [{"productName": "Lamb Chops", "quantity": 2, "price": 9.5}],
                    },
                }
            ]
        }
    }


class SetItemCheckedRequest(BaseModel):
    checked: bool = True


class TransitionRequest(BaseModel):
    target_status: str
    cancellation_reason: str | None = None
    unavailable_positions: list[int] | None = None
    administrative: bool = False


class ClaimDeliveryRequest(BaseModel):
    courier_id: str
    courier_name: str | None = None
    courier_phone: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str


class NextActionResponse(BaseModel):
    action: str
    status: str


class OrderItemResponse(BaseModel):
    position: int
    product_id: str | None = None
    name: str
    quantity: int
    price: float
    unit: str | None = None
    note: str | None = None
    checked: bool


class NextActionInfo(BaseModel):
    key: str
    target: str
    has_unavailable: bool


class OrderResponse(BaseModel):
    order_id: str
    order_number: str | None = None
    business_id: str | None = None
    business_name: str | None = None
    customer_id: str | None = None
    customer_name: str | None = None
    status: str
    order_type: str
    payment_status: str | None = None
    payment_method: str | None = None
    subtotal: float
    delivery_fee: float
    total: float
    currency: str
    items: list[OrderItemResponse]
    checked_count: int
    fully_checked: bool
    unavailable_items: list[dict]
    status_history: dict[str, str]
    courier_name: str | None = None
    served_by_name: str | None = None
    served_at: datetime | None = None
    cancellation_reason: str | None = None
    next_action: NextActionInfo | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BoardCardResponse(BaseModel):
    order_id: str
    order_number: str
    business_name: str
    customer_name: str
    status: str
    order_type: str
    total: float
    item_count: int
    checked_count: int
    unavailable_count: int
    table_number: str
    courier_name: str
    served_by_name: str
    created_at: datetime | None = None


class BoardStatsResponse(BaseModel):
    total: int
    pending: int
    preparing: int
    ready: int
    in_transit: int
    completed: int
    cancelled: int
    revenue: float
    average_order_value: float


class BoardResponse(BaseModel):
    window: str
    generated_at: datetime
    buckets: dict[str, list[BoardCardResponse]]
    stats: BoardStatsResponse


class SideEffectEntryResponse(BaseModel):
    effect: str
    status: str
    trigger_status: str | None = None
    detail: str | None = None
    recorded_at: datetime

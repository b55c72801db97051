"""FastAPI routes for the order desk."""

import json
from dataclasses import asdict

from fastapi import APIRouter, Header, HTTPException
from protean.utils.globals import current_domain

from orderdesk.api.schemas import (
    BoardCardResponse,
    BoardResponse,
    BoardStatsResponse,
    ClaimDeliveryRequest,
    ImportOrderRequest,
    NextActionInfo,
    NextActionResponse,
    OrderIdResponse,
    OrderItemResponse,
    OrderResponse,
    SetItemCheckedRequest,
    SideEffectEntryResponse,
    StatusResponse,
    TransitionRequest,
)
from orderdesk.live.board import DateWindow, build_board
from orderdesk.order.checking import SetItemChecked
from orderdesk.order.courier import ClaimDelivery
from orderdesk.order.deletion import DeleteOrder
from orderdesk.order.intake import ImportOrder
from orderdesk.order.next_action import recommended_next_action
from orderdesk.order.order import Order
from orderdesk.order.transition import PerformNextAction, TransitionOrder
from orderdesk.projections.side_effect_log import SideEffectLog

order_router = APIRouter(prefix="/orders", tags=["orders"])


def _actor(actor_id: str, actor_name: str, actor_email: str) -> dict:
    return {"actor_id": actor_id, "actor_name": actor_name, "actor_email": actor_email}


def _order_response(order: Order) -> OrderResponse:
    checklist = order.checklist
    action = recommended_next_action(order)
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        business_id=order.business_id,
        business_name=order.business_name,
        customer_id=order.customer_id,
        customer_name=order.customer_name,
        status=order.status,
        order_type=order.order_type,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        subtotal=order.subtotal or 0.0,
        delivery_fee=order.delivery_fee or 0.0,
        total=order.total or 0.0,
        currency=order.currency or "EUR",
        items=[
            OrderItemResponse(
                position=item.position,
                product_id=item.product_id,
                name=item.name,
                quantity=item.quantity,
                price=item.price or 0.0,
                unit=item.unit,
                note=item.note,
                checked=checklist.is_checked(item.position),
            )
            for item in order.line_items
        ],
        checked_count=checklist.checked_count,
        fully_checked=checklist.is_fully_checked,
        unavailable_items=order.unavailable,
        status_history=order.history,
        courier_name=order.courier_name,
        served_by_name=order.served_by_name,
        served_at=order.served_at,
        cancellation_reason=order.cancellation_reason,
        next_action=(
            NextActionInfo(key=action.key.value, target=action.target.value, has_unavailable=action.has_unavailable)
            if action
            else None
        ),
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ---------------------------------------------------------------------------
# Intake and reads
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def import_order(body: ImportOrderRequest) -> OrderIdResponse:
    """Create an order from a raw ordering-channel document."""
    command = ImportOrder(
        order_id=body.order_id,
        document=json.dumps(body.document, default=str),
        source=body.source,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("/board", response_model=BoardResponse)
async def get_board(
    window: str = "today",
    business_id: str | None = None,
    status: str | None = None,
    order_type: str | None = None,
) -> BoardResponse:
    """Live kanban board for a creation-time window."""
    try:
        date_window = DateWindow(window)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown window: {window}") from exc

    board = build_board(date_window, business_id=business_id, status=status, order_type=order_type)
    return BoardResponse(
        window=board.window.value,
        generated_at=board.generated_at,
        buckets={
            bucket.value: [
                BoardCardResponse(**{k: v for k, v in asdict(card).items() if k in BoardCardResponse.model_fields})
                for card in cards
            ]
            for bucket, cards in board.buckets.items()
        },
        stats=BoardStatsResponse(**asdict(board.stats)),
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    """Canonical view of one order, with its checklist and next action."""
    order = current_domain.repository_for(Order).get(order_id)
    return _order_response(order)


@order_router.get("/{order_id}/side-effects", response_model=list[SideEffectEntryResponse])
async def get_side_effects(order_id: str) -> list[SideEffectEntryResponse]:
    """Outcomes of the side effects triggered by the order's status changes."""
    entries = (
        current_domain.repository_for(SideEffectLog)._dao.query.filter(order_id=order_id).limit(500).all().items
    )
    entries = sorted(entries, key=lambda entry: entry.recorded_at)
    return [
        SideEffectEntryResponse(
            effect=entry.effect,
            status=entry.status,
            trigger_status=entry.trigger_status,
            detail=entry.detail,
            recorded_at=entry.recorded_at,
        )
        for entry in entries
    ]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@order_router.put("/{order_id}/items/{position}/check", response_model=StatusResponse)
async def set_item_checked(order_id: str, position: int, body: SetItemCheckedRequest) -> StatusResponse:
    """Tick or untick one line item on the kitchen checklist."""
    command = SetItemChecked(order_id=order_id, position=position, checked=body.checked)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="checked" if body.checked else "unchecked")


@order_router.post("/{order_id}/transition", response_model=StatusResponse)
async def transition_order(
    order_id: str,
    body: TransitionRequest,
    x_actor_id: str = Header(default=""),
    x_actor_name: str = Header(default=""),
    x_actor_email: str = Header(default=""),
) -> StatusResponse:
    """Move the order to a new status."""
    command = TransitionOrder(
        order_id=order_id,
        target_status=body.target_status,
        cancellation_reason=body.cancellation_reason,
        unavailable_positions=(
            json.dumps(body.unavailable_positions) if body.unavailable_positions is not None else None
        ),
        administrative=body.administrative,
        **_actor(x_actor_id, x_actor_name, x_actor_email),
    )
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)


@order_router.post("/{order_id}/next-action", response_model=NextActionResponse)
async def perform_next_action(
    order_id: str,
    x_actor_id: str = Header(default=""),
    x_actor_name: str = Header(default=""),
    x_actor_email: str = Header(default=""),
) -> NextActionResponse:
    """Execute the recommended next action for the order."""
    command = PerformNextAction(order_id=order_id, **_actor(x_actor_id, x_actor_name, x_actor_email))
    action = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return NextActionResponse(action=action, status=order.status)


@order_router.post("/{order_id}/courier", response_model=StatusResponse)
async def claim_delivery(order_id: str, body: ClaimDeliveryRequest) -> StatusResponse:
    """Record a courier claiming a ready delivery order."""
    command = ClaimDelivery(
        order_id=order_id,
        courier_id=body.courier_id,
        courier_name=body.courier_name,
        courier_phone=body.courier_phone,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="claimed")


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(
    order_id: str,
    reason: str | None = None,
    x_actor_id: str = Header(default=""),
    x_actor_name: str = Header(default=""),
    x_actor_email: str = Header(default=""),
) -> StatusResponse:
    """Permanently delete an order."""
    command = DeleteOrder(order_id=order_id, reason=reason, **_actor(x_actor_id, x_actor_name, x_actor_email))
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deleted")

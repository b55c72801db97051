"""Status-change side effects.

Reacts to OrderStatusChanged after the order write has committed and runs
the follow-up work the new status calls for:

    cancelled                      → cancellation notification,
                                     close the table session (dine-in)
    accepted with unavailable items → partial refund, then shortfall notification;
                                     fulfillment issue count for the business
    ready                          → ready notification

The handler resolves every collaborator and snapshots the order on the
calling thread, then hands plain closures to the SideEffectOrchestrator.
Outcomes are written to the SideEffectLog projection. A step that finishes
after its timeout gets a second entry with its real outcome.
"""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from orderdesk.channel import get_notification_service
from orderdesk.channel.port import NotificationService, NotificationType
from orderdesk.directory import get_business_directory, get_customer_directory, get_table_sessions
from orderdesk.directory.port import BusinessDirectory, CustomerDirectory, TableSessions
from orderdesk.domain import orderdesk
from orderdesk.order.events import OrderStatusChanged
from orderdesk.order.orchestrator import (
    EffectFailed,
    EffectOutcome,
    EffectSkipped,
    SideEffect,
    SideEffectOrchestrator,
)
from orderdesk.order.order import Order, OrderStatus, OrderType, PaymentStatus
from orderdesk.projections.side_effect_log import SideEffectLog
from orderdesk.refunds import get_refund_service
from orderdesk.refunds.port import RefundLine, RefundResult, RefundService, refund_amount_for
from orderdesk.scoreboard import get_scoreboard
from orderdesk.scoreboard.port import FulfillmentScoreboard
from orderdesk.templates import render_payload
from orderdesk.utils.config import custom_setting

logger = structlog.get_logger(__name__)

CARD_PAYMENT_METHODS = {"card", "credit_card", "debit_card", "apple_pay", "google_pay"}


@dataclass(frozen=True)
class Collaborators:
    refunds: RefundService
    notifications: NotificationService
    customers: CustomerDirectory
    businesses: BusinessDirectory
    table_sessions: TableSessions
    scoreboard: FulfillmentScoreboard

    @classmethod
    def from_registries(cls) -> "Collaborators":
        return cls(
            refunds=get_refund_service(),
            notifications=get_notification_service(),
            customers=get_customer_directory(),
            businesses=get_business_directory(),
            table_sessions=get_table_sessions(),
            scoreboard=get_scoreboard(),
        )


@dataclass(frozen=True)
class OrderSnapshot:
    """Plain copy of what the effects need, safe to hand to worker threads."""

    order_id: str
    order_number: str
    business_id: str
    business_name: str
    customer_id: str
    order_type: str
    payment_status: str
    payment_method: str
    payment_reference: str
    table_session_id: str
    currency: str
    cancellation_reason: str
    actor_name: str
    occurred_at: datetime
    unavailable: list[dict] = field(default_factory=list)

    @classmethod
    def from_order(cls, order: Order, event: OrderStatusChanged) -> "OrderSnapshot":
        return cls(
            order_id=str(order.id),
            order_number=order.order_number or "",
            business_id=order.business_id or "",
            business_name=order.business_name or "",
            customer_id=order.customer_id or "",
            order_type=order.order_type,
            payment_status=order.payment_status or "",
            payment_method=(order.payment_method or "").lower(),
            payment_reference=order.payment_reference or "",
            table_session_id=order.table_session_id or "",
            currency=order.currency or "EUR",
            cancellation_reason=event.cancellation_reason or "",
            actor_name=event.actor_name or "",
            occurred_at=event.changed_at or datetime.now(UTC),
            unavailable=json.loads(event.unavailable_items) if event.unavailable_items else [],
        )

    @property
    def is_dine_in(self) -> bool:
        return self.order_type == OrderType.DINE_IN.value

    @property
    def refund_eligible(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value and self.payment_method in CARD_PAYMENT_METHODS

    def refund_lines(self) -> list[RefundLine]:
        return [
            RefundLine(
                product_name=record["product_name"],
                quantity=record["quantity"],
                price=record["price"],
            )
            for record in self.unavailable
        ]


# ---------------------------------------------------------------------------
# Effect actions
# ---------------------------------------------------------------------------
def _notify(
    ports: Collaborators,
    snapshot: OrderSnapshot,
    notification_type: NotificationType,
    context: dict,
) -> str:
    if not snapshot.customer_id:
        raise EffectSkipped("Order has no customer")
    address = ports.customers.push_address_for(snapshot.customer_id)
    if not address:
        raise EffectSkipped("Customer has no push address")

    payload = render_payload(notification_type, {"order_id": snapshot.order_id, **context})
    result = ports.notifications.notify(snapshot.order_id, notification_type, address, payload)
    if not result.success:
        raise EffectFailed(result.error or "Notification was not delivered")
    return f"Notification {result.message_id} sent"


def _cancellation_notification(ports: Collaborators, snapshot: OrderSnapshot) -> SideEffect:
    def action(_previous):
        return _notify(
            ports,
            snapshot,
            NotificationType.ORDER_CANCELLED,
            {
                "order_number": snapshot.order_number,
                "business_name": snapshot.business_name,
                "reason": snapshot.cancellation_reason,
            },
        )

    return SideEffect("cancellation_notification", action)


def _close_table_session(ports: Collaborators, snapshot: OrderSnapshot, reason: str) -> SideEffect:
    def action(_previous):
        ports.table_sessions.close(snapshot.table_session_id, reason=reason, closed_by=snapshot.actor_name)
        return f"Table session {snapshot.table_session_id} closed"

    return SideEffect("table_session_close", action)


def _refund_then_notify(ports: Collaborators, snapshot: OrderSnapshot) -> SideEffect:
    lines = snapshot.refund_lines()

    def refund(_previous):
        if not snapshot.refund_eligible:
            raise EffectSkipped(
                f"No refund for {snapshot.payment_method or 'unknown'} payment in status {snapshot.payment_status}"
            )
        if refund_amount_for(lines) <= 0:
            raise EffectSkipped("Unavailable items have no value to refund")
        result = ports.refunds.request_partial_refund(snapshot.order_id, lines, snapshot.payment_reference)
        if not result.refunded:
            raise EffectFailed(result.failure_reason or "Refund was not issued")
        return result

    def notify(previous):
        refunded = previous.refund_amount if isinstance(previous, RefundResult) and previous.refunded else 0.0
        return _notify(
            ports,
            snapshot,
            NotificationType.ORDER_ACCEPTED_WITH_UNAVAILABLE,
            {
                "order_number": snapshot.order_number,
                "unavailable_names": [line.product_name for line in lines],
                "unavailable_items": snapshot.unavailable,
                "refund_amount": refunded,
                "currency": snapshot.currency,
            },
        )

    return SideEffect("partial_refund", refund, follow_up=SideEffect("shortfall_notification", notify))


def _fulfillment_score(ports: Collaborators, snapshot: OrderSnapshot) -> SideEffect:
    count = len(snapshot.unavailable)

    def action(_previous):
        if not snapshot.business_id:
            raise EffectSkipped("Order has no business")
        ports.scoreboard.record_issues(snapshot.business_id, count, snapshot.occurred_at)
        return f"Recorded {count} fulfillment issue(s)"

    return SideEffect("fulfillment_score", action)


def _ready_notification(ports: Collaborators, snapshot: OrderSnapshot) -> SideEffect:
    def action(_previous):
        profile = ports.businesses.profile_for(snapshot.business_id) if snapshot.business_id else None
        return _notify(
            ports,
            snapshot,
            NotificationType.ORDER_READY,
            {
                "order_number": snapshot.order_number,
                "business_name": snapshot.business_name or (profile.name if profile else ""),
                "has_table_service": bool(profile and profile.has_table_service),
                "is_dine_in": snapshot.is_dine_in,
            },
        )

    return SideEffect("ready_notification", action)


def build_effects(snapshot: OrderSnapshot, to_status: OrderStatus, ports: Collaborators) -> list[SideEffect]:
    """The independent effects a move to `to_status` calls for."""
    if to_status == OrderStatus.CANCELLED:
        effects = [_cancellation_notification(ports, snapshot)]
        if snapshot.table_session_id:
            reason = f"Order cancelled: {snapshot.cancellation_reason}"
            effects.append(_close_table_session(ports, snapshot, reason))
        return effects

    if to_status == OrderStatus.ACCEPTED and snapshot.unavailable:
        return [
            _refund_then_notify(ports, snapshot),
            _fulfillment_score(ports, snapshot),
        ]

    if to_status == OrderStatus.READY:
        return [_ready_notification(ports, snapshot)]

    return []


def record_outcomes(snapshot: OrderSnapshot, to_status: OrderStatus, outcomes: list[EffectOutcome]) -> None:
    repo = current_domain.repository_for(SideEffectLog)
    now = datetime.now(UTC)
    for outcome in outcomes:
        detail = f"Finished after timeout. {outcome.detail}".strip() if outcome.late else outcome.detail
        repo.add(
            SideEffectLog(
                entry_id=str(uuid4()),
                order_id=snapshot.order_id,
                business_id=snapshot.business_id,
                trigger_status=to_status.value,
                effect=outcome.effect,
                status=outcome.status.value,
                detail=detail[:1000],
                recorded_at=now,
            )
        )


@orderdesk.event_handler(part_of=Order)
class OrderSideEffectsHandler:
    """Runs the side effects of committed status changes."""

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> list[EffectOutcome]:
        to_status = OrderStatus(event.to_status)
        try:
            order = current_domain.repository_for(Order).get(event.order_id)
        except ObjectNotFoundError:
            logger.warning(
                "Order vanished before its side effects ran",
                order_id=str(event.order_id),
                to_status=to_status.value,
            )
            return []

        snapshot = OrderSnapshot.from_order(order, event)
        effects = build_effects(snapshot, to_status, Collaborators.from_registries())
        if not effects:
            return []

        def record_late(outcome: EffectOutcome) -> None:
            # Runs on the worker thread that finished the step.
            with orderdesk.domain_context():
                record_outcomes(snapshot, to_status, [outcome])

        orchestrator = SideEffectOrchestrator(
            timeout_seconds=float(custom_setting("side_effect_timeout_seconds")),
            on_late_outcome=record_late,
        )
        outcomes = orchestrator.run(effects, order_id=snapshot.order_id, to_status=to_status.value)
        record_outcomes(snapshot, to_status, outcomes)

        logger.info(
            "Order side effects completed",
            order_id=snapshot.order_id,
            to_status=to_status.value,
            outcomes={outcome.effect: outcome.status.value for outcome in outcomes},
        )
        return outcomes

"""Configurable fake refund service for development and testing.

Records every request and succeeds or fails as configured, without any
external calls.
"""

import time
from uuid import uuid4

from orderdesk.refunds.port import RefundLine, RefundResult, RefundService, refund_amount_for


class FakeRefundService(RefundService):
    """Configurable fake refund service."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Refund declined"
        self.delay_seconds: float = 0.0
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Refund declined",
        delay_seconds: float = 0.0,
    ) -> None:
        """Configure refund behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.delay_seconds = delay_seconds

    def request_partial_refund(
        self,
        order_id: str,
        items: list[RefundLine],
        payment_reference: str | None = None,
    ) -> RefundResult:
        amount = refund_amount_for(items)
        self.calls.append(
            {
                "method": "request_partial_refund",
                "order_id": order_id,
                "items": list(items),
                "payment_reference": payment_reference,
                "amount": amount,
            }
        )
        if self.delay_seconds:
            time.sleep(self.delay_seconds)

        if not payment_reference:
            return RefundResult(refunded=False, failure_reason="No payment reference on order")
        if amount <= 0:
            return RefundResult(refunded=False, failure_reason="Nothing to refund")
        if self.should_succeed:
            return RefundResult(
                refunded=True,
                refund_amount=amount,
                refund_id=f"fake_re_{uuid4().hex[:12]}",
            )
        return RefundResult(refunded=False, failure_reason=self.failure_reason)

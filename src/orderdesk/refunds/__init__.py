"""Refund service factory.

Provides get_refund_service() / set_refund_service() to swap
implementations. FakeRefundService is the default.
"""

from orderdesk.refunds.fake_adapter import FakeRefundService
from orderdesk.refunds.port import RefundService

_current_service: RefundService | None = None


def get_refund_service() -> RefundService:
    """Return the current refund service. Defaults to FakeRefundService."""
    global _current_service
    if _current_service is None:
        _current_service = FakeRefundService()
    return _current_service


def set_refund_service(service: RefundService) -> None:
    """Override the active refund service (useful for tests)."""
    global _current_service
    _current_service = service


def reset_refund_service() -> None:
    """Reset to default refund service."""
    global _current_service
    _current_service = None

"""Refund service port (abstract interface).

Defines the contract for partial refunds of items a business could not
supply. Capturing payments is someone else's job; the order desk only asks
for money back on lines it did not deliver.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RefundLine:
    """One unavailable line to refund."""

    product_name: str
    quantity: int
    price: float


@dataclass(frozen=True)
class RefundResult:
    """Result of a partial refund attempt."""

    refunded: bool
    refund_amount: float = 0.0
    refund_id: str | None = None
    failure_reason: str | None = None


def refund_amount_for(lines: list[RefundLine]) -> float:
    """Sum of price times quantity, rounded to cents."""
    return round(sum(line.price * line.quantity for line in lines), 2)


class RefundService(ABC):
    """Abstract partial refund interface."""

    @abstractmethod
    def request_partial_refund(
        self,
        order_id: str,
        items: list[RefundLine],
        payment_reference: str | None = None,
    ) -> RefundResult:
        """Refund the given lines of an already captured payment."""
        ...

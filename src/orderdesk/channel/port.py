"""Customer notification port — abstract interface for push dispatch."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class NotificationType(Enum):
    ORDER_CANCELLED = "order_cancelled"
    ORDER_ACCEPTED_WITH_UNAVAILABLE = "order_accepted_with_unavailable"
    ORDER_READY = "order_ready"


@dataclass(frozen=True)
class NotificationResult:
    """Result of a notification dispatch attempt."""

    success: bool
    message_id: str | None = None
    error: str | None = None


class NotificationService(ABC):
    """Abstract interface for customer notification adapters."""

    @abstractmethod
    def notify(
        self,
        order_id: str,
        notification_type: NotificationType,
        recipient_address: str,
        payload: dict,
    ) -> NotificationResult:
        """Send a notification about an order to one customer device."""
        ...

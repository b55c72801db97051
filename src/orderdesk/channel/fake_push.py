"""Fake push notification adapter — records sent pushes for testing."""

import time
from uuid import uuid4

from orderdesk.channel.port import NotificationResult, NotificationService, NotificationType


class FakePushNotificationService(NotificationService):
    """Push adapter that records notifications in memory for test assertions."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Push delivery failed"
        self.delay_seconds = 0.0

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Push delivery failed",
        delay_seconds: float = 0.0,
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.delay_seconds = delay_seconds

    def notify(
        self,
        order_id: str,
        notification_type: NotificationType,
        recipient_address: str,
        payload: dict,
    ) -> NotificationResult:
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if not self.should_succeed:
            return NotificationResult(success=False, error=self.failure_reason)

        message_id = f"push-{uuid4().hex[:12]}"
        self.sent.append(
            {
                "message_id": message_id,
                "order_id": order_id,
                "type": NotificationType(notification_type).value,
                "recipient_address": recipient_address,
                "payload": payload,
            }
        )
        return NotificationResult(success=True, message_id=message_id)

    def sent_of_type(self, notification_type: NotificationType) -> list[dict]:
        return [record for record in self.sent if record["type"] == notification_type.value]

    def reset(self):
        """Clear sent notifications (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Push delivery failed"
        self.delay_seconds = 0.0

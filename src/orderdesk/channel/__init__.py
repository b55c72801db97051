"""Notification service registry — pluggable customer notification dispatch.

Uses the fake push adapter by default; a real push provider can be
configured with the NOTIFICATION_ADAPTER environment variable.
"""

import os

from orderdesk.channel.port import NotificationService

_service_instance: NotificationService | None = None


def get_notification_service() -> NotificationService:
    """Return the configured notification service (singleton)."""
    global _service_instance
    if _service_instance is None:
        adapter = os.environ.get("NOTIFICATION_ADAPTER", "fake")
        if adapter == "fake":
            from orderdesk.channel.fake_push import FakePushNotificationService

            _service_instance = FakePushNotificationService()
        else:
            raise ValueError(f"Unknown notification adapter: {adapter}")
    return _service_instance


def set_notification_service(service: NotificationService) -> None:
    """Override the active notification service (useful for tests)."""
    global _service_instance
    _service_instance = service


def reset_notification_service() -> None:
    """Reset the notification service singleton (useful for testing)."""
    global _service_instance
    _service_instance = None

"""Template registry — maps NotificationType to template classes."""

from orderdesk.channel.port import NotificationType
from orderdesk.templates.order_accepted_with_unavailable import OrderAcceptedWithUnavailableTemplate
from orderdesk.templates.order_cancelled import OrderCancelledTemplate
from orderdesk.templates.order_ready import OrderReadyTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_CANCELLED.value: OrderCancelledTemplate,
    NotificationType.ORDER_ACCEPTED_WITH_UNAVAILABLE.value: OrderAcceptedWithUnavailableTemplate,
    NotificationType.ORDER_READY.value: OrderReadyTemplate,
}


def get_template(notification_type: NotificationType | str):
    """Look up a template class by notification type."""
    key = notification_type.value if isinstance(notification_type, NotificationType) else notification_type
    template_cls = TEMPLATE_REGISTRY.get(key)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {key}")
    return template_cls


def render_payload(notification_type: NotificationType, context: dict) -> dict:
    """Rendered title/body plus the structured context the client app reads."""
    return {**context, **get_template(notification_type).render(context)}

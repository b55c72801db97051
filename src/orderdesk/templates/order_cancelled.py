"""Order cancelled template — sent when a business cancels an order."""

from orderdesk.channel.port import NotificationType


class OrderCancelledTemplate:
    notification_type = NotificationType.ORDER_CANCELLED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "")
        business_name = context.get("business_name") or "The business"
        reason = context.get("reason", "")
        body = f"{business_name} cancelled your order #{order_number}."
        if reason:
            body += f" Reason: {reason}"
        return {
            "title": "Order cancelled",
            "body": body,
        }

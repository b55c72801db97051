"""Order ready template — the wording depends on how the customer gets the order."""

from orderdesk.channel.port import NotificationType


class OrderReadyTemplate:
    notification_type = NotificationType.ORDER_READY.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "")
        if context.get("is_dine_in") and context.get("has_table_service"):
            body = f"Your order #{order_number} is ready and is coming to your table."
        elif context.get("is_dine_in"):
            body = f"Your order #{order_number} is ready. Please pick it up at the counter."
        else:
            body = f"Your order #{order_number} is ready. You can pick it up now."
        return {
            "title": "Order ready",
            "body": body,
        }

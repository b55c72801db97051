"""Shortfall template — sent when an order is accepted without some items."""

from orderdesk.channel.port import NotificationType


class OrderAcceptedWithUnavailableTemplate:
    notification_type = NotificationType.ORDER_ACCEPTED_WITH_UNAVAILABLE.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "")
        names = context.get("unavailable_names") or []
        refund_amount = context.get("refund_amount", 0.0) or 0.0
        currency = context.get("currency", "EUR")

        body = f"Your order #{order_number} was accepted, but some items are unavailable: {', '.join(names)}."
        if refund_amount > 0:
            body += f" {refund_amount:.2f} {currency} has been refunded to your card."
        return {
            "title": "Some items are unavailable",
            "body": body,
        }

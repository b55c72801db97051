"""Side-effect log — what happened after each status change.

Staff need to tell "refund failed" apart from "notification failed", so
every effect outcome is kept as its own row.
"""

from protean.fields import DateTime, Identifier, String

from orderdesk.domain import orderdesk


@orderdesk.projection
class SideEffectLog:
    entry_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    business_id = String(max_length=100)
    trigger_status = String(max_length=20)
    effect = String(required=True, max_length=50)
    status = String(required=True, max_length=20)
    detail = String(max_length=1000)
    recorded_at = DateTime(required=True)

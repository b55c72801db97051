"""OrderDesk bounded context — Order Fulfillment for food and retail businesses.

Tracks an order from intake through the kitchen checklist, the fulfillment
state machine and its side effects (refunds, customer notifications,
business scoring), and keeps a live board of the orders staff are working.
Uses CQRS: the order document is the source of truth, the board is a
projection.
"""

from protean.domain import Domain

from orderdesk.utils.logging import configure_logging

configure_logging()

orderdesk = Domain(name="orderdesk")

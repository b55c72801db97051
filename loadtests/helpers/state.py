"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; nothing is shared between
users. State tracks the order a journey works on so later steps can refer
to it.
"""

from dataclasses import dataclass, field


@dataclass
class OrderDeskState:
    """Tracks a single order through a staff journey."""

    order_id: str | None = None
    order_type: str = "pickup"
    item_count: int = 0
    checked_positions: list[int] = field(default_factory=list)
    current_status: str = "pending"
    headers: dict = field(default_factory=dict)


@dataclass
class BoardWatcherState:
    """Tracks what a board screen is looking at."""

    business_id: str | None = None
    window: str = "today"
    refreshes: int = 0

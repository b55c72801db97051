"""Fulfillment scoreboard port.

Each business carries a running count of fulfillment issues (lines it
accepted an order without) and the time of the latest one. Concurrent
acceptances for the same business must never lose an increment, so
adapters implement record_issues() as an atomic add in their store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FulfillmentScore:
    business_id: str
    fulfillment_issues: int = 0
    last_fulfillment_issue: datetime | None = None


class FulfillmentScoreboard(ABC):
    @abstractmethod
    def record_issues(self, business_id: str, count: int, occurred_at: datetime) -> None:
        """Atomically add `count` issues to the business and stamp the latest issue time."""
        ...

    @abstractmethod
    def score_for(self, business_id: str) -> FulfillmentScore:
        """Current score of a business (zero when it has none)."""
        ...

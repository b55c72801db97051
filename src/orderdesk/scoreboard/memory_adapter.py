"""In-memory fulfillment scoreboard."""

import threading
from datetime import datetime

from orderdesk.scoreboard.port import FulfillmentScore, FulfillmentScoreboard


class InMemoryFulfillmentScoreboard(FulfillmentScoreboard):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._scores: dict[str, FulfillmentScore] = {}

    def record_issues(self, business_id: str, count: int, occurred_at: datetime) -> None:
        with self._lock:
            current = self._scores.get(business_id, FulfillmentScore(business_id=business_id))
            self._scores[business_id] = FulfillmentScore(
                business_id=business_id,
                fulfillment_issues=current.fulfillment_issues + count,
                last_fulfillment_issue=occurred_at,
            )

    def score_for(self, business_id: str) -> FulfillmentScore:
        with self._lock:
            return self._scores.get(business_id, FulfillmentScore(business_id=business_id))

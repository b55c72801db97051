"""Live board feed — pushes freshly derived boards to subscribed screens.

The LiveOrderCard projector publishes after every card change. Each
subscriber is called, in publish order, with a board rebuilt from the
projection for its own window and filters. A failing subscriber is logged
and does not affect the others.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class Subscription:
    callback: Callable
    window: str = "today"
    business_id: str | None = None
    status: str | None = None
    order_type: str | None = None
    subscription_id: str = field(default_factory=lambda: uuid4().hex)
    _feed: "LiveBoardFeed | None" = field(default=None, repr=False)

    @property
    def query(self) -> dict:
        return {
            "window": self.window,
            "business_id": self.business_id,
            "status": self.status,
            "order_type": self.order_type,
        }

    def unsubscribe(self) -> None:
        if self._feed is not None:
            self._feed.unsubscribe(self.subscription_id)
            self._feed = None


class LiveBoardFeed:
    def __init__(self, board_builder: Callable) -> None:
        self._board_builder = board_builder
        self._lock = threading.Lock()
        self._subscriptions: dict[str, Subscription] = {}

    def subscribe(
        self,
        callback: Callable,
        window: str = "today",
        business_id: str | None = None,
        status: str | None = None,
        order_type: str | None = None,
    ) -> Subscription:
        subscription = Subscription(
            callback=callback,
            window=window,
            business_id=business_id,
            status=status,
            order_type=order_type,
            _feed=self,
        )
        with self._lock:
            self._subscriptions[subscription.subscription_id] = subscription
        logger.info("Live board subscription added", subscription_id=subscription.subscription_id, **subscription.query)
        return subscription

    def unsubscribe(self, subscription_id: str) -> None:
        with self._lock:
            self._subscriptions.pop(subscription_id, None)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, order_id: str) -> None:
        """Push a rebuilt board to every subscriber after a change to `order_id`."""
        with self._lock:
            subscriptions = list(self._subscriptions.values())

        for subscription in subscriptions:
            try:
                board = self._board_builder(**subscription.query)
                subscription.callback(board)
            except Exception as exc:
                logger.error(
                    "Live board subscriber failed",
                    subscription_id=subscription.subscription_id,
                    order_id=order_id,
                    error=str(exc),
                )


_feed_instance: LiveBoardFeed | None = None


def get_feed() -> LiveBoardFeed:
    """Return the process-wide live board feed (singleton)."""
    global _feed_instance
    if _feed_instance is None:
        from orderdesk.live.board import build_board

        _feed_instance = LiveBoardFeed(board_builder=build_board)
    return _feed_instance


def reset_feed() -> None:
    """Drop all subscriptions (useful for testing)."""
    global _feed_instance
    _feed_instance = None

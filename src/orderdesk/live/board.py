"""Live order board — kanban buckets and summary counters.

The board is always derived from the LiveOrderCard projection, never
patched incrementally, so it cannot drift from the order stream. Orders
are selected by a rolling creation-time window and optional filters,
then grouped into five display buckets. Cancelled orders belong to no
bucket; they are only counted.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.utils.globals import current_domain

from orderdesk.order.order import OrderStatus
from orderdesk.projections.live_orders import LiveOrderCard
from orderdesk.utils.config import custom_setting


class DateWindow(Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    def start(self, now: datetime) -> datetime | None:
        """Earliest creation time inside the window, or None for no bound."""
        if self == DateWindow.TODAY:
            return now.replace(hour=0, minute=0, second=0, microsecond=0)
        if self == DateWindow.WEEK:
            return now - timedelta(days=7)
        if self == DateWindow.MONTH:
            return now - timedelta(days=30)
        return None


class DisplayBucket(Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"


BUCKET_FOR_STATUS = {
    OrderStatus.PENDING.value: DisplayBucket.PENDING,
    OrderStatus.ACCEPTED.value: DisplayBucket.PENDING,
    OrderStatus.PREPARING.value: DisplayBucket.PREPARING,
    OrderStatus.READY.value: DisplayBucket.READY,
    OrderStatus.ON_THE_WAY.value: DisplayBucket.IN_TRANSIT,
    OrderStatus.DELIVERED.value: DisplayBucket.COMPLETED,
    OrderStatus.SERVED.value: DisplayBucket.COMPLETED,
    OrderStatus.COMPLETED.value: DisplayBucket.COMPLETED,
}


@dataclass(frozen=True)
class BoardCard:
    order_id: str
    order_number: str
    business_id: str
    business_name: str
    customer_name: str
    status: str
    order_type: str
    total: float
    currency: str
    item_count: int
    checked_count: int
    unavailable_count: int
    table_number: str
    payment_status: str
    courier_name: str
    served_by_name: str
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_record(cls, record: LiveOrderCard) -> "BoardCard":
        return cls(
            order_id=str(record.order_id),
            order_number=record.order_number or "",
            business_id=record.business_id or "",
            business_name=record.business_name or "",
            customer_name=record.customer_name or "",
            status=record.status,
            order_type=record.order_type or "",
            total=record.total or 0.0,
            currency=record.currency or "EUR",
            item_count=record.item_count or 0,
            checked_count=record.checked_count or 0,
            unavailable_count=record.unavailable_count or 0,
            table_number=record.table_number or "",
            payment_status=record.payment_status or "",
            courier_name=record.courier_name or "",
            served_by_name=record.served_by_name or "",
            created_at=_aware(record.created_at),
            updated_at=_aware(record.updated_at),
        )

    @property
    def bucket(self) -> DisplayBucket | None:
        return BUCKET_FOR_STATUS.get(self.status)


@dataclass(frozen=True)
class BoardStats:
    total: int = 0
    pending: int = 0
    preparing: int = 0
    ready: int = 0
    in_transit: int = 0
    completed: int = 0
    cancelled: int = 0
    revenue: float = 0.0
    average_order_value: float = 0.0


@dataclass(frozen=True)
class Board:
    window: DateWindow
    generated_at: datetime
    buckets: dict[DisplayBucket, list[BoardCard]]
    cancelled: list[BoardCard] = field(default_factory=list)
    stats: BoardStats = field(default_factory=BoardStats)

    def bucket(self, bucket: DisplayBucket) -> list[BoardCard]:
        return self.buckets[bucket]

    def bucket_of(self, order_id: str) -> DisplayBucket | None:
        for bucket, cards in self.buckets.items():
            if any(card.order_id == order_id for card in cards):
                return bucket
        return None


def _aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def compute_stats(buckets: dict[DisplayBucket, list[BoardCard]], cancelled: list[BoardCard]) -> BoardStats:
    """Counters for a bucketed order set.

    Revenue counts delivered orders only; the average divides it by the
    size of the completed bucket.
    """
    revenue = round(
        sum(card.total for card in buckets[DisplayBucket.COMPLETED] if card.status == OrderStatus.DELIVERED.value),
        2,
    )
    completed = len(buckets[DisplayBucket.COMPLETED])
    return BoardStats(
        total=sum(len(cards) for cards in buckets.values()) + len(cancelled),
        pending=len(buckets[DisplayBucket.PENDING]),
        preparing=len(buckets[DisplayBucket.PREPARING]),
        ready=len(buckets[DisplayBucket.READY]),
        in_transit=len(buckets[DisplayBucket.IN_TRANSIT]),
        completed=completed,
        cancelled=len(cancelled),
        revenue=revenue,
        average_order_value=round(revenue / completed, 2) if completed else 0.0,
    )


def bucket_cards(cards: list[BoardCard]) -> tuple[dict[DisplayBucket, list[BoardCard]], list[BoardCard]]:
    """Split cards into the five display buckets plus the cancelled ones."""
    buckets: dict[DisplayBucket, list[BoardCard]] = {bucket: [] for bucket in DisplayBucket}
    cancelled = []
    for card in cards:
        bucket = card.bucket
        if bucket is None:
            cancelled.append(card)
        else:
            buckets[bucket].append(card)
    return buckets, cancelled


def _load_cards(
    start: datetime | None,
    business_id: str | None = None,
    status: str | None = None,
    order_type: str | None = None,
) -> list[BoardCard]:
    """Every card created since `start` that matches the filters.

    Filtering happens in the store and results are read page by page, so
    `board_scan_limit` bounds a single read, never the board.
    """
    criteria = {}
    if start is not None:
        criteria["created_at__gte"] = start
    if business_id:
        criteria["business_id"] = business_id
    if status:
        criteria["status"] = status
    if order_type:
        criteria["order_type"] = order_type

    query = current_domain.repository_for(LiveOrderCard)._dao.query
    if criteria:
        query = query.filter(**criteria)
    query = query.order_by("-created_at")

    page_size = int(custom_setting("board_scan_limit"))
    cards: list[BoardCard] = []
    offset = 0
    while True:
        page = query.offset(offset).limit(page_size).all()
        cards.extend(BoardCard.from_record(record) for record in page.items)
        if not page.items or not page.has_next:
            return cards
        offset += page_size


def build_board(
    window: DateWindow | str = DateWindow.TODAY,
    business_id: str | None = None,
    status: str | None = None,
    order_type: str | None = None,
    now: datetime | None = None,
) -> Board:
    """Derive the board for a window and optional business, status and type filters."""
    window = DateWindow(window)
    now = now or datetime.now(UTC)
    start = window.start(now)

    selected = _load_cards(start, business_id=business_id, status=status, order_type=order_type)
    # Undated cards only show up in the "all" window; they go last.
    epoch = datetime.min.replace(tzinfo=UTC)
    selected.sort(key=lambda card: card.created_at or epoch, reverse=True)

    buckets, cancelled = bucket_cards(selected)
    return Board(
        window=window,
        generated_at=now,
        buckets=buckets,
        cancelled=cancelled,
        stats=compute_stats(buckets, cancelled),
    )

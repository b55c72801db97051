"""SQLAlchemy-backed fulfillment scoreboard.

Increments are a single ``UPDATE ... SET fulfillment_issues =
fulfillment_issues + :count`` so the database serializes concurrent
writers. The first issue for a business inserts its row inside a
savepoint; losing that race falls back to the update.
"""

from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from orderdesk.scoreboard.port import FulfillmentScore, FulfillmentScoreboard

metadata = MetaData()

business_fulfillment_scores = Table(
    "business_fulfillment_scores",
    metadata,
    Column("business_id", String(100), primary_key=True),
    Column("fulfillment_issues", Integer, nullable=False, default=0),
    Column("last_fulfillment_issue", DateTime(timezone=True)),
)


def engine_for(database_uri: str) -> Engine:
    # In-memory SQLite lives in one connection; share it across threads.
    if database_uri in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_uri,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_engine(database_uri)


class SqlFulfillmentScoreboard(FulfillmentScoreboard):
    def __init__(self, database_uri: str | None = None, engine: Engine | None = None) -> None:
        if engine is None and database_uri is None:
            raise ValueError("SqlFulfillmentScoreboard needs a database_uri or an engine")
        self.engine = engine or engine_for(database_uri)

    def create_schema(self) -> None:
        metadata.create_all(self.engine)

    def drop_schema(self) -> None:
        metadata.drop_all(self.engine)

    def _increment(self, conn, business_id: str, count: int, occurred_at: datetime) -> int:
        table = business_fulfillment_scores
        result = conn.execute(
            update(table)
            .where(table.c.business_id == business_id)
            .values(
                fulfillment_issues=table.c.fulfillment_issues + count,
                last_fulfillment_issue=occurred_at,
            )
        )
        return result.rowcount

    def record_issues(self, business_id: str, count: int, occurred_at: datetime) -> None:
        with self.engine.begin() as conn:
            if self._increment(conn, business_id, count, occurred_at):
                return
            try:
                with conn.begin_nested():
                    conn.execute(
                        insert(business_fulfillment_scores).values(
                            business_id=business_id,
                            fulfillment_issues=count,
                            last_fulfillment_issue=occurred_at,
                        )
                    )
            except IntegrityError:
                self._increment(conn, business_id, count, occurred_at)

    def score_for(self, business_id: str) -> FulfillmentScore:
        table = business_fulfillment_scores
        with self.engine.connect() as conn:
            row = conn.execute(select(table).where(table.c.business_id == business_id)).first()
        if row is None:
            return FulfillmentScore(business_id=business_id)
        return FulfillmentScore(
            business_id=row.business_id,
            fulfillment_issues=row.fulfillment_issues,
            last_fulfillment_issue=row.last_fulfillment_issue,
        )

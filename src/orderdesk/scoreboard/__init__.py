"""Fulfillment scoreboard registry.

Uses the in-memory scoreboard by default. Set SCOREBOARD_ADAPTER=sql to
use the SQLAlchemy adapter against SCOREBOARD_DATABASE_URI (or the
domain's ``scoreboard_database_uri`` setting).
"""

import os

from orderdesk.scoreboard.port import FulfillmentScoreboard

_scoreboard_instance: FulfillmentScoreboard | None = None


def get_scoreboard() -> FulfillmentScoreboard:
    """Return the configured scoreboard (singleton)."""
    global _scoreboard_instance
    if _scoreboard_instance is None:
        adapter = os.environ.get("SCOREBOARD_ADAPTER", "memory")
        if adapter == "memory":
            from orderdesk.scoreboard.memory_adapter import InMemoryFulfillmentScoreboard

            _scoreboard_instance = InMemoryFulfillmentScoreboard()
        elif adapter == "sql":
            from orderdesk.scoreboard.sql_adapter import SqlFulfillmentScoreboard
            from orderdesk.utils.config import custom_setting

            uri = os.environ.get("SCOREBOARD_DATABASE_URI") or custom_setting("scoreboard_database_uri")
            scoreboard = SqlFulfillmentScoreboard(database_uri=uri)
            scoreboard.create_schema()
            _scoreboard_instance = scoreboard
        else:
            raise ValueError(f"Unknown scoreboard adapter: {adapter}")
    return _scoreboard_instance


def set_scoreboard(scoreboard: FulfillmentScoreboard) -> None:
    """Override the active scoreboard (useful for tests)."""
    global _scoreboard_instance
    _scoreboard_instance = scoreboard


def reset_scoreboard() -> None:
    """Reset the scoreboard singleton (useful for testing)."""
    global _scoreboard_instance
    _scoreboard_instance = None

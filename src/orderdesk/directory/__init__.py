"""Directory registry.

Provides get_/set_/reset_ accessors for the customer directory, the
business directory and the table-session store. In-memory adapters are
the default.
"""

from orderdesk.directory.memory_adapter import (
    InMemoryBusinessDirectory,
    InMemoryCustomerDirectory,
    InMemoryTableSessions,
)
from orderdesk.directory.port import BusinessDirectory, CustomerDirectory, TableSessions

_customers: CustomerDirectory | None = None
_businesses: BusinessDirectory | None = None
_table_sessions: TableSessions | None = None


def get_customer_directory() -> CustomerDirectory:
    global _customers
    if _customers is None:
        _customers = InMemoryCustomerDirectory()
    return _customers


def set_customer_directory(directory: CustomerDirectory) -> None:
    global _customers
    _customers = directory


def get_business_directory() -> BusinessDirectory:
    global _businesses
    if _businesses is None:
        _businesses = InMemoryBusinessDirectory()
    return _businesses


def set_business_directory(directory: BusinessDirectory) -> None:
    global _businesses
    _businesses = directory


def get_table_sessions() -> TableSessions:
    global _table_sessions
    if _table_sessions is None:
        _table_sessions = InMemoryTableSessions()
    return _table_sessions


def set_table_sessions(sessions: TableSessions) -> None:
    global _table_sessions
    _table_sessions = sessions


def reset_directories() -> None:
    """Reset all directory singletons (useful for testing)."""
    global _customers, _businesses, _table_sessions
    _customers = None
    _businesses = None
    _table_sessions = None

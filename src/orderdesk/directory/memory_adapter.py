"""In-memory directory adapters for development and testing."""

import threading
from datetime import UTC, datetime

from orderdesk.directory.port import (
    BusinessDirectory,
    BusinessProfile,
    CustomerDirectory,
    TableSessions,
)


class InMemoryCustomerDirectory(CustomerDirectory):
    def __init__(self) -> None:
        self._addresses: dict[str, str] = {}
        self.lookups: list[str] = []

    def register(self, customer_id: str, push_address: str | None) -> None:
        if push_address:
            self._addresses[customer_id] = push_address
        else:
            self._addresses.pop(customer_id, None)

    def push_address_for(self, customer_id: str) -> str | None:
        self.lookups.append(customer_id)
        return self._addresses.get(customer_id)


class InMemoryBusinessDirectory(BusinessDirectory):
    def __init__(self) -> None:
        self._profiles: dict[str, BusinessProfile] = {}

    def register(self, business_id: str, name: str = "", has_table_service: bool = False) -> None:
        self._profiles[business_id] = BusinessProfile(
            business_id=business_id,
            name=name,
            has_table_service=has_table_service,
        )

    def profile_for(self, business_id: str) -> BusinessProfile | None:
        return self._profiles.get(business_id)


class InMemoryTableSessions(TableSessions):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.open_sessions: set[str] = set()
        self.closed: list[dict] = []
        self.should_succeed = True

    def configure(self, should_succeed: bool = True) -> None:
        self.should_succeed = should_succeed

    def open(self, session_id: str) -> None:
        with self._lock:
            self.open_sessions.add(session_id)

    def close(self, session_id: str, reason: str, closed_by: str) -> None:
        if not self.should_succeed:
            raise ConnectionError(f"Table session store unavailable while closing {session_id}")
        with self._lock:
            if session_id not in self.open_sessions:
                return
            self.open_sessions.discard(session_id)
            self.closed.append(
                {
                    "session_id": session_id,
                    "reason": reason,
                    "closed_by": closed_by,
                    "closed_at": datetime.now(UTC),
                }
            )

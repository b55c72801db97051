"""Directory ports — read-only lookups about customers and businesses, and
table-session housekeeping.

Customer accounts, business profiles and table sessions are owned by other
parts of the platform. The order desk only needs these narrow views.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BusinessProfile:
    business_id: str
    name: str = ""
    has_table_service: bool = False


class CustomerDirectory(ABC):
    @abstractmethod
    def push_address_for(self, customer_id: str) -> str | None:
        """Return the customer's push address, or None when they have none."""
        ...


class BusinessDirectory(ABC):
    @abstractmethod
    def profile_for(self, business_id: str) -> BusinessProfile | None:
        """Return the business profile, or None when it is unknown."""
        ...


class TableSessions(ABC):
    @abstractmethod
    def close(self, session_id: str, reason: str, closed_by: str) -> None:
        """Close an open dine-in table session. Closing a closed session is a no-op."""
        ...

"""
Abstract Storage Interface

DESIGN DECISION: This core never owns persisted state. The ledger lives in
the surrounding application's database, which we only READ through a
narrow interface. This allows us to:
1. Plug in whatever ORM the application uses without touching aggregation
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally tiny - there are no write operations.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.ledger import TransactionRecord


class LedgerReaderInterface(ABC):
    """
    Read-only access to a user's ledger.

    Any storage implementation (PostgreSQL, an HTTP API, etc.)
    must implement this method.
    """

    @abstractmethod
    async def list_transactions(self, user_id: str) -> list[TransactionRecord]:
        """
        List every transaction of a user.

        Args:
            user_id: Ledger owner

        Returns:
            Transactions ordered by occurrence date, oldest first.
            An unknown user has an empty ledger.

        Raises:
            StorageError: If the backend cannot be read
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one recommendation request).

        Args:
            correlation_id: The correlation identifier

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass

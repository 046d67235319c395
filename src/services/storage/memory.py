"""
In-Memory Storage

Process-local implementations of the storage interfaces.
Used by tests and local runs where no database is wired in.
"""

from collections import defaultdict
from typing import Iterable, Optional
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.ledger import TransactionRecord
from src.services.storage.interface import (
    AuditStorageInterface,
    LedgerReaderInterface,
)


class InMemoryLedger(LedgerReaderInterface):
    """Ledger held in a dict of lists, keyed by user id."""

    def __init__(
        self,
        transactions: Optional[dict[str, Iterable[TransactionRecord]]] = None,
    ):
        self._transactions: dict[str, list[TransactionRecord]] = defaultdict(list)
        for user_id, records in (transactions or {}).items():
            self._transactions[user_id].extend(records)

    def add(self, user_id: str, record: TransactionRecord) -> None:
        """Append a record to a user's ledger (test seeding only)."""
        self._transactions[user_id].append(record)

    async def list_transactions(self, user_id: str) -> list[TransactionRecord]:
        # sorted() is stable, so same-day records keep insertion order
        return sorted(
            self._transactions.get(user_id, []),
            key=lambda record: record.occurred_on,
        )


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]

"""Tests for audit logging and in-memory storage."""

import pytest
from datetime import date
from uuid import uuid4

from src.audit import AuditLogger, create_correlation_id
from src.models.audit import AuditEventBuilder, AuditEventType
from src.services.storage import InMemoryAuditStorage, InMemoryLedger, StorageError

from tests.conftest import make_record


class FailingAuditStorage(InMemoryAuditStorage):
    async def append_event(self, event):
        raise StorageError("disk full")


class TestAuditLogger:
    """Local logging plus optional persistence."""

    @pytest.mark.asyncio
    async def test_event_persisted(self):
        storage = InMemoryAuditStorage()
        correlation_id = create_correlation_id()

        await AuditLogger(storage).log_recommendation_generated(3, correlation_id)

        events = await storage.get_events_by_correlation_id(correlation_id)
        assert [e.event_type for e in events] == [AuditEventType.RECOMMENDATION_GENERATED]

    @pytest.mark.asyncio
    async def test_storage_failure_does_not_raise(self):
        written = await AuditLogger(FailingAuditStorage()).log(
            AuditEventBuilder.stats_computed(1, 1, 1)
        )
        assert written is False

    @pytest.mark.asyncio
    async def test_without_storage(self):
        assert await AuditLogger().log(AuditEventBuilder.stats_computed(0, 0, 0)) is True


class TestInMemoryStorage:
    """In-memory ledger and audit log."""

    @pytest.mark.asyncio
    async def test_ledger_sorted_by_date(self):
        ledger = InMemoryLedger()
        ledger.add("u1", make_record("2", occurred_on=date(2026, 2, 1)))
        ledger.add("u1", make_record("1", occurred_on=date(2026, 1, 1)))
        ledger.add("u2", make_record("9"))

        records = await ledger.list_transactions("u1")

        assert [r.occurred_on.month for r in records] == [1, 2]
        assert await ledger.list_transactions("u3") == []

    @pytest.mark.asyncio
    async def test_recent_events_newest_first(self):
        storage = InMemoryAuditStorage()
        first = AuditEventBuilder.stats_computed(1, 1, 1, correlation_id=uuid4())
        second = AuditEventBuilder.stats_computed(2, 1, 1, correlation_id=uuid4())
        await storage.append_event(first)
        await storage.append_event(second)

        recent = await storage.get_recent_events(limit=1)

        assert recent == [second]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

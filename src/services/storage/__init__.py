"""
Storage Services Package

Provides the read-only ledger interface and audit log storage.
Ships an in-memory implementation; the real ledger is plugged in by the host app.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    LedgerReaderInterface,
    StorageError,
)
from src.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedger,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerReaderInterface",
    # Exceptions
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryLedger",
]

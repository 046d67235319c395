"""Services package."""

from src.services.llm import (
    GatewayError,
    GatewayErrorReason,
    GeminiGateway,
    LLMGatewayInterface,
)
from src.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedger,
    LedgerReaderInterface,
    StorageError,
)

__all__ = [
    # Model gateway
    "GatewayError",
    "GatewayErrorReason",
    "GeminiGateway",
    "LLMGatewayInterface",
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryLedger",
    "LedgerReaderInterface",
    "StorageError",
]

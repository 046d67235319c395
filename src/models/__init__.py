"""
Data Models Package

This package contains all Pydantic models used by the finance insights core.
All data flowing through the system must conform to these schemas.
"""

from src.models.ledger import (
    DEFAULT_CATEGORIES,
    CategoryRef,
    TransactionKind,
    TransactionRecord,
    default_category,
)
from src.models.insights import (
    AdviceResult,
    CategoryTotal,
    ChatAnswer,
    DegradedRecommendation,
    EnrichedProduct,
    FinancialStats,
    FinancialSummary,
    LedgerAggregate,
    MonthBucket,
    NormalizedRecommendation,
    ProductCandidate,
    RecommendationOutcome,
    RecommendationRequest,
    RecommendationResult,
    RetailerLink,
    StructuredRecommendation,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from src.models.llm import (
    ContentBlock,
    RawModelOutput,
    TextBlock,
    ToolBlock,
)

__all__ = [
    # Ledger models
    "DEFAULT_CATEGORIES",
    "CategoryRef",
    "TransactionKind",
    "TransactionRecord",
    "default_category",
    # Insight models
    "AdviceResult",
    "CategoryTotal",
    "ChatAnswer",
    "DegradedRecommendation",
    "EnrichedProduct",
    "FinancialStats",
    "FinancialSummary",
    "LedgerAggregate",
    "MonthBucket",
    "NormalizedRecommendation",
    "ProductCandidate",
    "RecommendationOutcome",
    "RecommendationRequest",
    "RecommendationResult",
    "RetailerLink",
    "StructuredRecommendation",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Model output
    "ContentBlock",
    "RawModelOutput",
    "TextBlock",
    "ToolBlock",
]

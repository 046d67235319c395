"""
Audit Models

Every call out to the model, and every request we refuse, is logged.
This provides:
1. Traceability from a UI request to the model call it triggered
2. Visibility into how often model output has to fall back to raw text
3. A record of rejected input without leaking it into error responses

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    One family per exposed operation, plus shared failure events.
    """
    # Dashboard
    STATS_COMPUTED = "stats_computed"

    # Advice
    ADVICE_REQUESTED = "advice_requested"
    ADVICE_GENERATED = "advice_generated"

    # Chat
    QUESTION_RECEIVED = "question_received"
    ANSWER_GENERATED = "answer_generated"

    # Recommendations
    RECOMMENDATION_REQUESTED = "recommendation_requested"
    RECOMMENDATION_GENERATED = "recommendation_generated"
    RECOMMENDATION_DEGRADED = "recommendation_degraded"

    # Input
    REQUEST_REJECTED = "request_rejected"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which operation is this about?
    operation: Optional[str] = Field(
        default=None,
        description="Exposed operation (e.g., 'advice', 'chat', 'recommend')"
    )
    user_id: Optional[str] = Field(
        default=None,
        description="Ledger owner, when the request is user-scoped"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one request)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    # Additional data (event-specific)
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "operation": self.operation,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.advice_generated(correlation_id, advice_length=420)
        event = AuditEventBuilder.request_rejected("recommend", "max_price", "gte_min_price", correlation_id)
    """

    @staticmethod
    def stats_computed(
        transaction_count: int,
        category_count: int,
        month_count: int,
        correlation_id: Optional[UUID] = None,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATS_COMPUTED,
            operation="stats",
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Stats computed over {transaction_count} transactions",
            details={
                "transaction_count": transaction_count,
                "category_count": category_count,
                "month_count": month_count,
            },
        )

    @staticmethod
    def advice_requested(
        transaction_count: int,
        correlation_id: UUID,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_REQUESTED,
            operation="advice",
            user_id=user_id,
            correlation_id=correlation_id,
            description="Financial advice requested",
            details={
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def advice_generated(
        correlation_id: UUID,
        advice_length: int,
        used_sentinel: bool = False,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_GENERATED,
            severity=AuditSeverity.WARNING if used_sentinel else AuditSeverity.INFO,
            operation="advice",
            correlation_id=correlation_id,
            description=(
                "Advice unavailable, sentinel returned"
                if used_sentinel
                else "Advice generated"
            ),
            details={
                "advice_length": advice_length,
                "used_sentinel": used_sentinel,
            },
        )

    @staticmethod
    def question_received(
        question_length: int,
        correlation_id: UUID,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUESTION_RECEIVED,
            operation="chat",
            user_id=user_id,
            correlation_id=correlation_id,
            description="Finance question received",
            details={
                "question_length": question_length,
            },
        )

    @staticmethod
    def answer_generated(
        correlation_id: UUID,
        answer_length: int,
        tool_blocks: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANSWER_GENERATED,
            operation="chat",
            correlation_id=correlation_id,
            description="Answer generated",
            details={
                "answer_length": answer_length,
                "tool_blocks": tool_blocks,
            },
        )

    @staticmethod
    def recommendation_requested(
        product_query: str,
        min_price: str,
        max_price: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECOMMENDATION_REQUESTED,
            operation="recommend",
            correlation_id=correlation_id,
            description=f"Recommendations requested for: {product_query[:100]}",
            details={
                "product_query": product_query,
                "min_price": min_price,
                "max_price": max_price,
            },
        )

    @staticmethod
    def recommendation_generated(
        product_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECOMMENDATION_GENERATED,
            operation="recommend",
            correlation_id=correlation_id,
            description=f"Recommendation returned {product_count} products",
            details={
                "product_count": product_count,
            },
        )

    @staticmethod
    def recommendation_degraded(
        raw_length: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECOMMENDATION_DEGRADED,
            severity=AuditSeverity.WARNING,
            operation="recommend",
            correlation_id=correlation_id,
            description="Model output was not parseable, returning raw text",
            details={
                "raw_length": raw_length,
            },
        )

    @staticmethod
    def request_rejected(
        operation: str,
        field: str,
        constraint: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_REJECTED,
            severity=AuditSeverity.WARNING,
            operation=operation,
            correlation_id=correlation_id,
            description=f"Request rejected: {field} failed {constraint}",
            details={
                "field": field,
                "constraint": constraint,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        operation: str,
        error_code: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            operation=operation,
            description=f"External service error: {service}",
            error_code=error_code,
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )

"""
Audit Logger

DESIGN DECISION: Every model call, fallback and rejected request is logged.
This provides:
1. Complete traceability
2. Debugging capability when the model misbehaves
3. A running measure of how often replies degrade to raw text

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder
from src.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog's JSON lines through stdlib logging at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        # Always log locally
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        # Persist to storage if available
        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_stats_computed(
        self,
        transaction_count: int,
        category_count: int,
        month_count: int,
        correlation_id: Optional[UUID] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a dashboard stats computation."""
        await self.log(AuditEventBuilder.stats_computed(
            transaction_count=transaction_count,
            category_count=category_count,
            month_count=month_count,
            correlation_id=correlation_id,
            user_id=user_id,
        ))

    async def log_advice_requested(
        self,
        transaction_count: int,
        correlation_id: UUID,
        user_id: Optional[str] = None,
    ) -> None:
        """Log an advice request."""
        await self.log(AuditEventBuilder.advice_requested(
            transaction_count=transaction_count,
            correlation_id=correlation_id,
            user_id=user_id,
        ))

    async def log_advice_generated(
        self,
        correlation_id: UUID,
        advice_length: int,
        used_sentinel: bool = False,
    ) -> None:
        """Log advice returned to the user."""
        await self.log(AuditEventBuilder.advice_generated(
            correlation_id=correlation_id,
            advice_length=advice_length,
            used_sentinel=used_sentinel,
        ))

    async def log_question_received(
        self,
        question_length: int,
        correlation_id: UUID,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a chat question."""
        await self.log(AuditEventBuilder.question_received(
            question_length=question_length,
            correlation_id=correlation_id,
            user_id=user_id,
        ))

    async def log_answer_generated(
        self,
        correlation_id: UUID,
        answer_length: int,
        tool_blocks: int,
    ) -> None:
        """Log a chat answer."""
        await self.log(AuditEventBuilder.answer_generated(
            correlation_id=correlation_id,
            answer_length=answer_length,
            tool_blocks=tool_blocks,
        ))

    async def log_recommendation_requested(
        self,
        product_query: str,
        min_price: str,
        max_price: str,
        correlation_id: UUID,
    ) -> None:
        """Log a validated recommendation request."""
        await self.log(AuditEventBuilder.recommendation_requested(
            product_query=product_query,
            min_price=min_price,
            max_price=max_price,
            correlation_id=correlation_id,
        ))

    async def log_recommendation_generated(
        self,
        product_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log structured recommendations."""
        await self.log(AuditEventBuilder.recommendation_generated(
            product_count=product_count,
            correlation_id=correlation_id,
        ))

    async def log_recommendation_degraded(
        self,
        raw_length: int,
        correlation_id: UUID,
    ) -> None:
        """Log a recommendation that fell back to raw text."""
        await self.log(AuditEventBuilder.recommendation_degraded(
            raw_length=raw_length,
            correlation_id=correlation_id,
        ))

    async def log_request_rejected(
        self,
        operation: str,
        field: str,
        constraint: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log input rejected before any model call."""
        await self.log(AuditEventBuilder.request_rejected(
            operation=operation,
            field=field,
            constraint=constraint,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        operation: str,
        error_code: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user request.
    Pass it through all subsequent operations.
    """
    return uuid4()

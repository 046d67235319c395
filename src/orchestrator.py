"""
Main Orchestrator for the Finance Insights core

This module ties together all the components and defines the
end-to-end flows behind the four exposed operations:
1. Stats (ledger → aggregate)
2. Advice (ledger → aggregate → prompt → model → advice text)
3. Chat (question + ledger → prompt → model → answer text)
4. Recommendations (request → validate → prompt → model → normalize → enrich)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Invalid input is rejected before the model is ever called
- A model failure is reported, never swallowed, never a crash
- An unparsable model reply is a successful, degraded response
- Every step is audited

This is the "glue" that ensures the system works correctly
even when the model behaves unexpectedly.
"""

from collections.abc import Iterable, Sequence
from typing import Any, NamedTuple, Optional
from uuid import UUID

from src.agents import AdvisorAgent, ChatAgent, ShoppingAgent
from src.aggregation import accepted_records, aggregate, compute_stats
from src.audit import AuditLogger, configure_logging, create_correlation_id
from src.config import get_settings
from src.enrichment import enrich_products
from src.models.insights import (
    AdviceResult,
    ChatAnswer,
    DegradedRecommendation,
    FinancialStats,
    RecommendationResult,
)
from src.models.ledger import TransactionRecord
from src.normalization import ADVICE_UNAVAILABLE
from src.services.llm import GatewayError, GeminiGateway, LLMGatewayInterface
from src.services.storage import (
    AuditStorageInterface,
    LedgerReaderInterface,
    StorageError,
)
from src.validation import RequestValidationError, RequestValidator


ONBOARDING_MESSAGE = (
    "You haven't recorded any transactions yet. Start adding your income "
    "and expenses to get personalized financial advice!"
)


class LedgerFlow:
    """Shared plumbing for flows that can read a user's ledger."""

    def __init__(
        self,
        ledger: Optional[LedgerReaderInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger
        self._audit_logger = audit_logger

    async def _load(
        self,
        user_id: str,
        operation: str,
        correlation_id: UUID,
    ) -> list[TransactionRecord]:
        try:
            if self._ledger is None:
                raise StorageError("Ledger storage is not configured")
            return await self._ledger.list_transactions(user_id)
        except Exception as e:
            await self._report_error(e, operation, correlation_id)
            raise

    async def _report_error(
        self,
        error: Exception,
        operation: str,
        correlation_id: UUID,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=str(error),
                details={"operation": operation},
                correlation_id=correlation_id,
            )

    async def _report_gateway_error(
        self,
        error: GatewayError,
        operation: str,
        correlation_id: UUID,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_external_service_error(
                service=GeminiGateway.SERVICE_NAME,
                operation=operation,
                error_code=error.reason.value,
                error_message=error.detail,
                correlation_id=correlation_id,
            )

    async def _report_rejection(
        self,
        error: RequestValidationError,
        operation: str,
        correlation_id: UUID,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_request_rejected(
                operation=operation,
                field=error.field,
                constraint=error.constraint,
                correlation_id=correlation_id,
            )


class StatsFlow(LedgerFlow):
    """
    Dashboard statistics.

    Pure computation; the only I/O is reading the ledger for a user.
    """

    def compute_stats(self, transactions: Iterable[Any]) -> FinancialStats:
        """Category and month rollups plus totals for a transaction list."""
        return compute_stats(transactions)

    async def compute_stats_for_user(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> FinancialStats:
        correlation_id = correlation_id or create_correlation_id()
        transactions = await self._load(user_id, "stats", correlation_id)

        try:
            stats = self.compute_stats(transactions)
        except Exception as e:
            await self._report_error(e, "stats", correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_stats_computed(
                transaction_count=stats.transaction_count,
                category_count=len(stats.by_category),
                month_count=len(stats.by_month),
                correlation_id=correlation_id,
                user_id=user_id,
            )

        return stats


class AdviceFlow(LedgerFlow):
    """
    Orchestrates the advice flow.

    Flow:
    1. Empty ledger → onboarding message (no model call)
    2. Aggregate → advice prompt
    3. Model call → advice text (or the fixed fallback sentence)
    """

    def __init__(
        self,
        advisor_agent: Optional[AdvisorAgent] = None,
        ledger: Optional[LedgerReaderInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(ledger, audit_logger)
        self._advisor = advisor_agent or AdvisorAgent(GeminiGateway())

    async def get_advice(
        self,
        transactions: Sequence[TransactionRecord],
        correlation_id: Optional[UUID] = None,
        user_id: Optional[str] = None,
    ) -> AdviceResult:
        """
        Personalized advice for a ledger.

        Raises:
            GatewayError: If the model could not be reached
        """
        correlation_id = correlation_id or create_correlation_id()
        # Rows the aggregator would skip don't count as a ledger
        records = accepted_records(transactions)

        if not records:
            return AdviceResult(advice=ONBOARDING_MESSAGE)

        if self._audit_logger:
            await self._audit_logger.log_advice_requested(
                transaction_count=len(records),
                correlation_id=correlation_id,
                user_id=user_id,
            )

        try:
            advice = await self._advisor.generate_advice(aggregate(records), records)
        except GatewayError as e:
            await self._report_gateway_error(e, "advice", correlation_id)
            raise
        except Exception as e:
            await self._report_error(e, "advice", correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_advice_generated(
                correlation_id=correlation_id,
                advice_length=len(advice),
                used_sentinel=advice == ADVICE_UNAVAILABLE,
            )

        return AdviceResult(advice=advice)

    async def get_advice_for_user(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AdviceResult:
        correlation_id = correlation_id or create_correlation_id()
        transactions = await self._load(user_id, "advice", correlation_id)
        return await self.get_advice(transactions, correlation_id, user_id=user_id)


class ChatFlow(LedgerFlow):
    """
    Orchestrates question answering.

    The question is validated before the ledger is read
    and before the model is called.
    """

    def __init__(
        self,
        chat_agent: Optional[ChatAgent] = None,
        ledger: Optional[LedgerReaderInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[RequestValidator] = None,
    ):
        super().__init__(ledger, audit_logger)
        self._chat_agent = chat_agent or ChatAgent(GeminiGateway())
        self._validator = validator or RequestValidator()

    async def _validated(self, question: Any, correlation_id: UUID) -> str:
        try:
            return self._validator.validate_question(question)
        except RequestValidationError as e:
            await self._report_rejection(e, "chat", correlation_id)
            raise

    async def _answer(
        self,
        question: str,
        transactions: Sequence[TransactionRecord],
        correlation_id: UUID,
        user_id: Optional[str],
    ) -> ChatAnswer:
        if self._audit_logger:
            await self._audit_logger.log_question_received(
                question_length=len(question),
                correlation_id=correlation_id,
                user_id=user_id,
            )

        try:
            answer, output = await self._chat_agent.answer(question, list(transactions))
        except GatewayError as e:
            await self._report_gateway_error(e, "chat", correlation_id)
            raise
        except Exception as e:
            await self._report_error(e, "chat", correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_answer_generated(
                correlation_id=correlation_id,
                answer_length=len(answer),
                tool_blocks=output.tool_block_count,
            )

        return ChatAnswer(answer=answer)

    async def answer_question(
        self,
        question: Any,
        transactions: Sequence[TransactionRecord],
        correlation_id: Optional[UUID] = None,
        user_id: Optional[str] = None,
    ) -> ChatAnswer:
        """
        Answer a finance question.

        Raises:
            RequestValidationError: If the question is empty
            GatewayError: If the model could not be reached
        """
        correlation_id = correlation_id or create_correlation_id()
        text = await self._validated(question, correlation_id)
        return await self._answer(text, transactions, correlation_id, user_id)

    async def answer_question_for_user(
        self,
        user_id: str,
        question: Any,
        correlation_id: Optional[UUID] = None,
    ) -> ChatAnswer:
        correlation_id = correlation_id or create_correlation_id()
        text = await self._validated(question, correlation_id)
        transactions = await self._load(user_id, "chat", correlation_id)
        return await self._answer(text, transactions, correlation_id, user_id)


class RecommendationFlow(LedgerFlow):
    """
    Orchestrates product recommendations.

    Flow:
    1. Validate product and price range (reject before any model call)
    2. Model call with web search
    3. Normalize: structured products, or raw text in fallback mode
    4. Enrich each product with retailer links
    """

    def __init__(
        self,
        shopping_agent: Optional[ShoppingAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[RequestValidator] = None,
    ):
        super().__init__(None, audit_logger)
        self._shopping_agent = shopping_agent or ShoppingAgent(GeminiGateway())
        self._validator = validator or RequestValidator()

    async def get_recommendations(
        self,
        product: Any,
        min_price: Any,
        max_price: Any,
        correlation_id: Optional[UUID] = None,
    ) -> RecommendationResult:
        """
        Up to three products within the price range.

        An unparsable model reply is NOT an error: the result carries the
        raw text in `shopping_tip` with `fallback=True`.

        Raises:
            RequestValidationError: If the product or price range is invalid
            GatewayError: If the model could not be reached
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            request = self._validator.validate_recommendation_request(
                product, min_price, max_price
            )
        except RequestValidationError as e:
            await self._report_rejection(e, "recommend", correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_recommendation_requested(
                product_query=request.product_query,
                min_price=str(request.min_price),
                max_price=str(request.max_price),
                correlation_id=correlation_id,
            )

        try:
            outcome = await self._shopping_agent.recommend(request)
        except GatewayError as e:
            await self._report_gateway_error(e, "recommend", correlation_id)
            raise
        except Exception as e:
            await self._report_error(e, "recommend", correlation_id)
            raise

        recommendation = outcome.to_recommendation()

        if isinstance(outcome, DegradedRecommendation):
            if self._audit_logger:
                await self._audit_logger.log_recommendation_degraded(
                    raw_length=len(outcome.raw_text),
                    correlation_id=correlation_id,
                )
            return RecommendationResult(
                products=[],
                shopping_tip=recommendation.fallback_text,
                fallback=True,
            )

        products = enrich_products(recommendation.products)
        if self._audit_logger:
            await self._audit_logger.log_recommendation_generated(
                product_count=len(products),
                correlation_id=correlation_id,
            )

        return RecommendationResult(
            products=products,
            shopping_tip=recommendation.shopping_tip,
        )


class AppComponents(NamedTuple):
    stats: StatsFlow
    advice: AdviceFlow
    chat: ChatFlow
    recommendations: RecommendationFlow
    audit_logger: AuditLogger


def create_app_components(
    ledger: Optional[LedgerReaderInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    gateway: Optional[LLMGatewayInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        ledger: Read-only ledger of the host application.
                Without one, only the list-based operations work.
        audit_storage: Where audit events are persisted.
                      If None, events are only logged locally.
        gateway: Model gateway; a GeminiGateway is built from settings if None.

    Returns:
        AppComponents with one flow per exposed operation
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    audit_logger = AuditLogger(audit_storage)
    gateway = gateway or GeminiGateway(settings.gemini)
    assistant = settings.assistant

    return AppComponents(
        stats=StatsFlow(ledger=ledger, audit_logger=audit_logger),
        advice=AdviceFlow(
            advisor_agent=AdvisorAgent(gateway, assistant),
            ledger=ledger,
            audit_logger=audit_logger,
        ),
        chat=ChatFlow(
            chat_agent=ChatAgent(gateway, assistant),
            ledger=ledger,
            audit_logger=audit_logger,
        ),
        recommendations=RecommendationFlow(
            shopping_agent=ShoppingAgent(gateway, assistant),
            audit_logger=audit_logger,
        ),
        audit_logger=audit_logger,
    )

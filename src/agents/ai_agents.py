"""
AI Agents for the Finance Insights core

DESIGN DECISION: Each agent owns one kind of model conversation:
prompt in, normalized value out. Agents never read the ledger and never
decide what the user sees on failure; the flows in the orchestrator do.

CRITICAL BOUNDARIES:

1. ADVISOR AGENT:
   - CAN: Summarize the ledger into a prompt and return free-text advice
   - CANNOT: Return an empty string (falls back to a fixed sentence)

2. CHAT AGENT:
   - CAN: Answer a question with the user's recent finances as context
   - CAN: Use web search for current rates and prices

3. SHOPPING AGENT:
   - CAN: Ask for products in a price range and recover them from JSON
   - MUST: Return a degraded outcome, not raise, when the reply is unparsable

The gateway makes exactly one call per attempt. Whether to try again is
decided HERE, by the caller, and by default we don't.
"""

from collections.abc import Sequence
from typing import Optional

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from src.aggregation import aggregate
from src.config import AssistantSettings, get_settings
from src.models.insights import (
    LedgerAggregate,
    RecommendationOutcome,
    RecommendationRequest,
    StructuredRecommendation,
)
from src.models.ledger import TransactionRecord
from src.models.llm import RawModelOutput
from src.normalization import normalize_advice, normalize_recommendation
from src.prompts import (
    build_advice_prompt,
    build_chat_system_prompt,
    build_recommendation_prompt,
    most_recent,
)
from src.services.llm import GatewayError, LLMGatewayInterface


logger = structlog.get_logger(__name__)

ANSWER_UNAVAILABLE = "Unable to answer your question at this time."


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, GatewayError) and error.retryable


class GatewayAgent:
    """
    Base for agents that talk to the model through the gateway.

    Applies the caller-side retry policy: up to `gateway_max_attempts`
    attempts, only for transient gateway failures.
    """

    def __init__(
        self,
        gateway: LLMGatewayInterface,
        settings: Optional[AssistantSettings] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self._gateway = gateway
        self._settings = settings or get_settings().assistant
        self._retry_wait = (
            retry_wait if retry_wait is not None
            else wait_exponential(multiplier=1, min=2, max=10)
        )

    async def _generate(self, prompt: str, **options) -> RawModelOutput:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.gateway_max_attempts),
            wait=self._retry_wait,
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._gateway.generate(prompt, **options)


class AdvisorAgent(GatewayAgent):
    """Turns a ledger rollup into personalized financial advice."""

    async def generate_advice(
        self,
        ledger: LedgerAggregate,
        transactions: Sequence[TransactionRecord],
    ) -> str:
        """
        Ask the model for a financial health review.

        Returns the model's text verbatim, or the fixed
        "Unable to generate advice" sentence if it returned none.

        Raises:
            GatewayError: If the model could not be reached
        """
        prompt = build_advice_prompt(
            ledger.summary,
            ledger.by_category,
            transactions,
            recent_limit=self._settings.advice_recent_transactions,
        )
        output = await self._generate(
            prompt,
            max_output_tokens=self._settings.advice_max_tokens,
        )
        return normalize_advice(output)


class ChatAgent(GatewayAgent):
    """Answers free-form finance questions."""

    async def answer(
        self,
        question: str,
        transactions: Sequence[TransactionRecord],
    ) -> tuple[str, RawModelOutput]:
        """
        Answer a question with the user's recent finances as context.

        Only the most recent `chat_context_transactions` records are
        summarized, which keeps the system prompt small for long ledgers.

        Returns:
            (answer, raw_output)
        """
        recent = most_recent(transactions, self._settings.chat_context_transactions)
        context = aggregate(recent)
        system_instruction = build_chat_system_prompt(
            context.summary,
            context.by_category,
            top_limit=self._settings.chat_top_categories,
        )
        output = await self._generate(
            question,
            system_instruction=system_instruction,
            enable_web_search=self._settings.enable_web_search,
            max_output_tokens=self._settings.chat_max_tokens,
        )
        return normalize_advice(output, fallback=ANSWER_UNAVAILABLE), output


class ShoppingAgent(GatewayAgent):
    """Finds products within a price range."""

    async def recommend(self, request: RecommendationRequest) -> RecommendationOutcome:
        """
        Ask the model for products and normalize its reply.

        Never raises on bad model output; only on gateway failure.
        """
        output = await self._generate(
            build_recommendation_prompt(request),
            enable_web_search=self._settings.enable_web_search,
            max_output_tokens=self._settings.recommendation_max_tokens,
        )
        outcome = normalize_recommendation(output)

        # Prices outside the range are kept; we only make them visible in logs
        if isinstance(outcome, StructuredRecommendation):
            for product in outcome.recommendation.products:
                if not request.min_price <= product.price <= request.max_price:
                    logger.warning(
                        "recommendation_price_out_of_range",
                        product=product.name,
                        price=str(product.price),
                        min_price=str(request.min_price),
                        max_price=str(request.max_price),
                    )

        return outcome

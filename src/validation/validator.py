"""
Request Validation

DESIGN DECISION: User input is checked BEFORE any model call.
A request that can't be answered must never cost a round trip to the LLM.

Rejections carry the field and the violated constraint so the UI can
point at the exact input. The message is written for the end user and
never includes internal detail.

IMPORTANT: Validation NEVER silently fixes issues.
A negative or inverted price range is rejected, not swapped or clamped.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from src.models.insights import MAX_PRICE, RecommendationRequest


class RequestValidationError(ValueError):
    """User input failed validation."""

    def __init__(self, field: str, constraint: str, message: str):
        self.field = field
        self.constraint = constraint
        super().__init__(message)

    def to_response(self) -> dict:
        return {
            "error": str(self),
            "field": self.field,
            "constraint": self.constraint,
        }


class RequestValidator:
    """
    Validates raw user input for the AI-backed operations.

    Stateless; methods return a ready-to-use value or raise.
    """

    def _parse_price(self, field: str, value: Any) -> Decimal:
        if isinstance(value, bool) or value is None:
            raise RequestValidationError(field, "numeric", f"{field} must be a number")
        try:
            price = Decimal(str(value).strip())
        except InvalidOperation:
            raise RequestValidationError(
                field, "numeric", f"{field} must be a number"
            ) from None
        if not price.is_finite():
            raise RequestValidationError(field, "numeric", f"{field} must be a number")
        if price < 0:
            raise RequestValidationError(
                field, "non_negative", "Invalid price range: prices cannot be negative"
            )
        if price > MAX_PRICE:
            raise RequestValidationError(
                field, "max_value", f"Invalid price range: prices cannot exceed ${MAX_PRICE:,}"
            )
        return price

    def validate_recommendation_request(
        self,
        product: Any,
        min_price: Any,
        max_price: Any,
    ) -> RecommendationRequest:
        """
        Build a RecommendationRequest from raw input.

        Raises:
            RequestValidationError: empty product, non-numeric or negative
                bounds, bounds above MAX_PRICE,
                or min_price greater than max_price
        """
        if not isinstance(product, str) or not product.strip():
            raise RequestValidationError(
                "product", "required", "Product type is required"
            )

        low = self._parse_price("min_price", min_price)
        high = self._parse_price("max_price", max_price)
        if low > high:
            raise RequestValidationError(
                "max_price",
                "gte_min_price",
                "Invalid price range: minimum price is greater than maximum price",
            )

        if len(product.strip()) > 200:
            raise RequestValidationError(
                "product", "max_length", "Product type must be at most 200 characters"
            )

        return RecommendationRequest(
            product_query=product,
            min_price=low,
            max_price=high,
        )

    def validate_question(self, question: Any) -> str:
        """
        Return the stripped question.

        Raises:
            RequestValidationError: if the question is missing or blank
        """
        if not isinstance(question, str) or not question.strip():
            raise RequestValidationError(
                "question", "required", "Question is required"
            )
        return question.strip()

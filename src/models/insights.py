"""
Insight Models

Everything in this module is DERIVED: rollups computed from the ledger,
requests validated from user input, and products normalized from model
output. None of it is persisted.

DESIGN DECISION: Money stays Decimal in Python and becomes a JSON number
on the way out. Response models use camelCase aliases because that is the
shape the UI layer consumes (byCategory, totalIncome, shoppingTip, ...).
"""

from decimal import Decimal
from typing import Annotated, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    computed_field,
    model_validator,
)
from pydantic.alias_generators import to_camel


Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Largest price a request or product may carry; keeps every amount a finite JSON number
MAX_PRICE = Decimal("1000000000")


class InsightModel(BaseModel):
    """Base for derived models: immutable, camelCase on the wire."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_response(self) -> dict:
        """Serialize to the JSON-ready dict handed to the HTTP layer."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# AGGREGATION RESULTS
# =============================================================================

class CategoryTotal(InsightModel):
    """Expense total for one category."""

    name: str
    icon: str
    color: str
    total: Money


class MonthBucket(InsightModel):
    """Income and expense sums for one calendar month."""

    month: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="YYYY-MM key"
    )
    income: Money = Decimal("0")
    expense: Money = Decimal("0")


class FinancialSummary(InsightModel):
    """
    Ledger totals.

    `balance` is computed, never stored, so it can't drift from the totals.
    """

    total_income: Money = Decimal("0")
    total_expense: Money = Decimal("0")
    transaction_count: int = Field(default=0, ge=0)

    @computed_field
    @property
    def balance(self) -> Money:
        return self.total_income - self.total_expense


class FinancialStats(InsightModel):
    """Flat dashboard statistics, as returned by compute_stats."""

    by_category: list[CategoryTotal] = Field(default_factory=list)
    by_month: list[MonthBucket] = Field(default_factory=list)
    total_income: Money = Decimal("0")
    total_expense: Money = Decimal("0")
    transaction_count: int = Field(default=0, ge=0)

    @computed_field
    @property
    def balance(self) -> Money:
        return self.total_income - self.total_expense


class LedgerAggregate(InsightModel):
    """Full aggregator output: rollups plus summary."""

    by_category: list[CategoryTotal] = Field(default_factory=list)
    by_month: list[MonthBucket] = Field(default_factory=list)
    summary: FinancialSummary = Field(default_factory=FinancialSummary)

    def to_stats(self) -> FinancialStats:
        return FinancialStats(
            by_category=self.by_category,
            by_month=self.by_month,
            total_income=self.summary.total_income,
            total_expense=self.summary.total_expense,
            transaction_count=self.summary.transaction_count,
        )


# =============================================================================
# RECOMMENDATIONS
# =============================================================================

class RecommendationRequest(InsightModel):
    """
    A product search within a price range.

    Built only by the request validator, so an instance is always safe
    to hand to the prompt builder.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    product_query: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the user is shopping for"
    )
    min_price: Money = Field(..., ge=0, le=MAX_PRICE)
    max_price: Money = Field(..., ge=0, le=MAX_PRICE)

    @model_validator(mode='after')
    def validate_bounds(self) -> 'RecommendationRequest':
        if self.min_price > self.max_price:
            raise ValueError("Minimum price cannot be greater than maximum price")
        return self


class ProductCandidate(InsightModel):
    """
    A product recovered from model output.

    Constructed only by the response normalizer.
    """

    name: str = Field(..., min_length=1)
    price: Money = Field(..., ge=0, le=MAX_PRICE)
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    summary: str = ""
    badge: str = ""
    source_retailer: Optional[str] = None
    direct_url: Optional[str] = None
    search_query: str = Field(..., min_length=1)


class RetailerLink(InsightModel):
    """One place to buy or search for a product."""

    label: str
    url: str
    accent_color: str
    is_primary: bool = False


class EnrichedProduct(ProductCandidate):
    """A product candidate plus its retailer links."""

    links: list[RetailerLink] = Field(default_factory=list)


class NormalizedRecommendation(InsightModel):
    """
    Normalizer output for the recommendation path.

    `fallback_text` is set only when parsing failed; a model that
    legitimately returned zero products leaves it None.
    """

    products: list[ProductCandidate] = Field(default_factory=list)
    shopping_tip: str = ""
    fallback_text: Optional[str] = None

    @model_validator(mode='after')
    def validate_fallback(self) -> 'NormalizedRecommendation':
        if self.fallback_text is not None and self.products:
            raise ValueError("Fallback text is only allowed when no products were parsed")
        return self

    @property
    def is_fallback(self) -> bool:
        return self.fallback_text is not None


class StructuredRecommendation(BaseModel):
    """Normalization succeeded."""
    model_config = ConfigDict(frozen=True)

    recommendation: NormalizedRecommendation

    def to_recommendation(self) -> NormalizedRecommendation:
        return self.recommendation


class DegradedRecommendation(BaseModel):
    """Normalization could not recover JSON; the raw text is all we have."""
    model_config = ConfigDict(frozen=True)

    raw_text: str

    def to_recommendation(self) -> NormalizedRecommendation:
        return NormalizedRecommendation(
            products=[],
            shopping_tip="",
            fallback_text=self.raw_text,
        )


RecommendationOutcome = Union[StructuredRecommendation, DegradedRecommendation]


# =============================================================================
# RESPONSES OF THE EXPOSED OPERATIONS
# =============================================================================

class AdviceResult(InsightModel):
    advice: str


class ChatAnswer(InsightModel):
    answer: str


class RecommendationResult(InsightModel):
    """
    Response of get_recommendations.

    In fallback mode `shopping_tip` carries the model's raw text and the
    UI shows it verbatim instead of product cards.
    """

    products: list[EnrichedProduct] = Field(default_factory=list)
    shopping_tip: str = ""
    fallback: bool = False

    def to_response(self) -> dict:
        data = super().to_response()
        if not self.fallback:
            data.pop("fallback")
        return data

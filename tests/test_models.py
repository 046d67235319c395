"""
Tests for Finance Insights

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for flows (with a fake model gateway)
3. No real API calls in tests
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from src.models.ledger import (
    DEFAULT_CATEGORIES,
    CategoryRef,
    TransactionKind,
    TransactionRecord,
    default_category,
)
from src.models.insights import (
    CategoryTotal,
    DegradedRecommendation,
    FinancialStats,
    FinancialSummary,
    MonthBucket,
    NormalizedRecommendation,
    ProductCandidate,
    RecommendationRequest,
    RecommendationResult,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from src.models.llm import RawModelOutput, TextBlock, ToolBlock


class TestLedgerModels:
    """Tests for ledger Pydantic models."""

    def test_transaction_record_creation(self):
        """Test TransactionRecord model creation."""
        record = TransactionRecord(
            amount=Decimal("12.50"),
            kind=TransactionKind.EXPENSE,
            occurred_on=date(2026, 1, 15),
            category=default_category("dining"),
            description="  lunch  ",
        )
        assert record.amount == Decimal("12.50")
        assert record.description == "lunch"
        assert record.category.name == "Dining"

    def test_transaction_record_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in ("0", "-5"):
            with pytest.raises(ValueError):
                TransactionRecord(
                    amount=Decimal(amount),
                    kind=TransactionKind.EXPENSE,
                    occurred_on=date(2026, 1, 15),
                )

    def test_transaction_record_is_frozen(self):
        """Records cannot be mutated after construction."""
        record = TransactionRecord(
            amount=Decimal("1"),
            kind=TransactionKind.INCOME,
            occurred_on=date(2026, 1, 1),
        )
        with pytest.raises(ValueError):
            record.amount = Decimal("2")

    def test_category_color_must_be_hex(self):
        """Test colour validation on CategoryRef."""
        with pytest.raises(ValueError):
            CategoryRef(id="x", name="X", color="red")

    def test_default_categories(self):
        """Test the seed catalogue."""
        assert len(DEFAULT_CATEGORIES) == 10
        assert len({c.id for c in DEFAULT_CATEGORIES}) == 10
        assert default_category("salary").name == "Salary"
        with pytest.raises(KeyError):
            default_category("crypto")


class TestInsightModels:
    """Tests for derived insight models."""

    def test_summary_balance_is_computed(self):
        """Balance is income minus expense, and may be negative."""
        summary = FinancialSummary(
            total_income=Decimal("100"),
            total_expense=Decimal("250.5"),
            transaction_count=3,
        )
        assert summary.balance == Decimal("-150.5")

    def test_stats_response_uses_camel_case_numbers(self):
        """Response dicts are camelCase with JSON numbers for money."""
        stats = FinancialStats(
            by_category=[CategoryTotal(name="Dining", icon="🍔", color="#EF4444", total=Decimal("80"))],
            by_month=[MonthBucket(month="2026-01", income=Decimal("3000"), expense=Decimal("80"))],
            total_income=Decimal("3000"),
            total_expense=Decimal("80"),
            transaction_count=2,
        )
        data = stats.to_response()
        assert data["totalIncome"] == 3000.0
        assert data["balance"] == 2920.0
        assert data["transactionCount"] == 2
        assert data["byCategory"][0]["total"] == 80.0
        assert data["byMonth"][0] == {"month": "2026-01", "income": 3000.0, "expense": 80.0}

    def test_month_bucket_key_format(self):
        """Month keys must be YYYY-MM."""
        with pytest.raises(ValueError):
            MonthBucket(month="2026-1")

    def test_recommendation_request_bounds(self):
        """Minimum above maximum is rejected."""
        with pytest.raises(ValueError, match="Minimum price cannot be greater than maximum price"):
            RecommendationRequest(
                product_query="headphones",
                min_price=Decimal("50"),
                max_price=Decimal("10"),
            )

    def test_recommendation_request_strips_query(self):
        """Test whitespace stripping on the product query."""
        request = RecommendationRequest(
            product_query="  headphones ",
            min_price=Decimal("0"),
            max_price=Decimal("0"),
        )
        assert request.product_query == "headphones"

    def test_normalized_recommendation_rejects_products_with_fallback(self):
        """Fallback text and parsed products are mutually exclusive."""
        product = ProductCandidate(name="A", price=Decimal("1"), search_query="A")
        with pytest.raises(ValueError):
            NormalizedRecommendation(products=[product], fallback_text="raw")

    def test_degraded_outcome_to_recommendation(self):
        """A degraded outcome converts to an empty fallback recommendation."""
        recommendation = DegradedRecommendation(raw_text="no json here").to_recommendation()
        assert recommendation.products == []
        assert recommendation.is_fallback
        assert recommendation.fallback_text == "no json here"

    def test_recommendation_result_fallback_flag_only_when_set(self):
        """`fallback` appears in the response only in fallback mode."""
        assert "fallback" not in RecommendationResult(shopping_tip="tip").to_response()
        data = RecommendationResult(shopping_tip="raw", fallback=True).to_response()
        assert data == {"products": [], "shoppingTip": "raw", "fallback": True}


class TestModelOutput:
    """Tests for raw model output."""

    def test_texts_and_tool_blocks(self):
        """Text blocks keep emission order; tool blocks are only counted."""
        output = RawModelOutput(blocks=(
            TextBlock(text="a"),
            ToolBlock(kind="grounding_metadata"),
            TextBlock(text="b"),
        ))
        assert output.texts == ["a", "b"]
        assert output.tool_block_count == 1


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.STATS_COMPUTED,
            description="Stats computed",
        )
        assert event.event_type == AuditEventType.STATS_COMPUTED
        assert event.severity == AuditSeverity.INFO
        assert isinstance(event.timestamp, datetime)
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.RECOMMENDATION_GENERATED,
            description="Recommendation returned 3 products",
            details={"product_count": 3},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "recommendation_generated"
        assert log_dict["details"]["product_count"] == 3

    def test_audit_event_builder_request_rejected(self):
        """Test AuditEventBuilder.request_rejected."""
        correlation_id = uuid4()

        event = AuditEventBuilder.request_rejected(
            operation="recommend",
            field="max_price",
            constraint="gte_min_price",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.REQUEST_REJECTED
        assert event.severity == AuditSeverity.WARNING
        assert event.correlation_id == correlation_id
        assert event.details == {"field": "max_price", "constraint": "gte_min_price"}

    def test_audit_event_builder_external_service_error(self):
        """Test AuditEventBuilder.external_service_error."""
        event = AuditEventBuilder.external_service_error(
            service="gemini",
            operation="chat",
            error_code="timeout",
            error_message="no response within 60s",
        )

        assert event.event_type == AuditEventType.EXTERNAL_SERVICE_ERROR
        assert event.severity == AuditSeverity.ERROR
        assert event.error_code == "timeout"
        assert event.details["service"] == "gemini"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Tests for response normalization.

The normalizer must never raise on model output: every reply either
yields products or degrades to raw text.
"""

import json

import pytest
from decimal import Decimal

from src.models.insights import DegradedRecommendation, StructuredRecommendation
from src.models.llm import RawModelOutput, TextBlock, ToolBlock
from src.normalization import (
    ADVICE_UNAVAILABLE,
    coerce_price,
    coerce_rating,
    extract_json_span,
    normalize_advice,
    normalize_recommendation,
    strip_code_fences,
)

from tests.conftest import text_output


def _product(**overrides) -> dict:
    product = {
        "name": "Sony WH-CH720N",
        "price": 99.99,
        "rating": 4.4,
        "pros": ["Light", "Good ANC"],
        "cons": ["Plasticky"],
        "summary": "Solid all-rounder.",
        "badge": "Best Overall",
        "directUrl": "https://www.amazon.com/dp/B0BS1QCFHX",
        "source": "Amazon",
        "searchQuery": "Sony WH-CH720N",
    }
    product.update(overrides)
    return product


class TestExtraction:
    """Stage 1: text cleanup."""

    def test_strip_fences_with_language_tag(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_json_span_ignores_surrounding_prose(self):
        text = 'Here you go: {"products": []} Hope that helps!'
        assert extract_json_span(text) == '{"products": []}'

    def test_no_braces(self):
        assert extract_json_span("no json at all") is None
        assert extract_json_span("} backwards {") is None


class TestNormalizeRecommendation:
    """Stage 2 and the entry point."""

    def test_fenced_json_with_prose(self):
        payload = json.dumps({"products": [_product()], "shoppingTip": "Wait for sales."})
        output = text_output(f"Sure! Here are my picks:\n```json\n{payload}\n```\nEnjoy.")

        outcome = normalize_recommendation(output)

        assert isinstance(outcome, StructuredRecommendation)
        recommendation = outcome.recommendation
        assert not recommendation.is_fallback
        assert recommendation.shopping_tip == "Wait for sales."
        product = recommendation.products[0]
        assert product.name == "Sony WH-CH720N"
        assert product.price == Decimal("99.99")
        assert product.rating == 4.4
        assert product.source_retailer == "Amazon"
        assert product.direct_url == "https://www.amazon.com/dp/B0BS1QCFHX"

    def test_text_split_across_blocks(self):
        """Text blocks are joined; tool blocks in between are ignored."""
        payload = json.dumps({"products": [_product()], "shoppingTip": "tip"})
        middle = payload.index('"shoppingTip"')
        output = RawModelOutput(blocks=(
            TextBlock(text=payload[:middle]),
            ToolBlock(kind="grounding_metadata"),
            TextBlock(text=payload[middle:]),
        ))

        outcome = normalize_recommendation(output)

        assert isinstance(outcome, StructuredRecommendation)
        assert len(outcome.recommendation.products) == 1

    def test_no_json_degrades_with_full_raw_text(self):
        """Fallback carries the original text, untruncated."""
        raw = "I couldn't find anything matching. " * 200
        outcome = normalize_recommendation(text_output(raw))

        assert isinstance(outcome, DegradedRecommendation)
        assert outcome.raw_text == raw
        assert outcome.to_recommendation().fallback_text == raw

    def test_invalid_json_degrades(self):
        outcome = normalize_recommendation(text_output('{"products": [ {"name": }'))
        assert isinstance(outcome, DegradedRecommendation)

    def test_object_without_products_degrades(self):
        outcome = normalize_recommendation(text_output('{"items": []}'))
        assert isinstance(outcome, DegradedRecommendation)

    def test_empty_output_degrades(self):
        outcome = normalize_recommendation(RawModelOutput())
        assert isinstance(outcome, DegradedRecommendation)
        assert outcome.raw_text == ""

    def test_zero_products_is_not_fallback(self):
        outcome = normalize_recommendation(text_output('{"products": [], "shoppingTip": "Try later."}'))

        assert isinstance(outcome, StructuredRecommendation)
        assert outcome.recommendation.products == []
        assert not outcome.recommendation.is_fallback

    def test_bad_product_dropped_others_kept(self):
        """One unusable product does not sink the reply."""
        payload = json.dumps({"products": [
            _product(name="Good"),
            _product(name="No price", price="call for price"),
            "not an object",
            _product(name=""),
            _product(name="Also good", price="$1,049.00"),
        ]})

        outcome = normalize_recommendation(text_output(payload))

        products = outcome.recommendation.products
        assert [p.name for p in products] == ["Good", "Also good"]
        assert products[1].price == Decimal("1049.00")

    def test_optional_fields_default(self):
        """Missing searchQuery falls back to the name; bad fields are emptied."""
        payload = json.dumps({"products": [{
            "name": "Budget Buds",
            "price": 19,
            "rating": "great",
            "pros": "cheap",
            "directUrl": "javascript:alert(1)",
        }]})

        product = normalize_recommendation(text_output(payload)).recommendation.products[0]

        assert product.search_query == "Budget Buds"
        assert product.rating == 0.0
        assert product.pros == ["cheap"]
        assert product.cons == []
        assert product.direct_url is None
        assert product.source_retailer is None

    def test_huge_rating_does_not_raise(self):
        """A rating json.loads turns into a giant int keeps the product, unrated."""
        raw = '{"products": [{"name": "X", "price": 10, "rating": 1' + "0" * 400 + "}]}"

        outcome = normalize_recommendation(text_output(raw))

        assert isinstance(outcome, StructuredRecommendation)
        assert outcome.recommendation.products[0].rating == 0.0

    def test_string_price_out_of_range_dropped(self):
        """Numbers and numeric strings are capped alike; output stays JSON-safe."""
        payload = json.dumps({"products": [
            {"name": "Huge", "price": "1e400"},
            {"name": "Fine", "price": "25"},
        ]})

        recommendation = normalize_recommendation(text_output(payload)).recommendation

        assert [p.name for p in recommendation.products] == ["Fine"]
        json.dumps(recommendation.to_response(), allow_nan=False)

    def test_order_preserved(self):
        payload = json.dumps({"products": [_product(name=n) for n in ("A", "B", "C")]})
        products = normalize_recommendation(text_output(payload)).recommendation.products
        assert [p.name for p in products] == ["A", "B", "C"]


class TestCoercion:
    """Field-level coercion."""

    @pytest.mark.parametrize("value,expected", [
        (79.99, Decimal("79.99")),
        (80, Decimal("80")),
        ("79.99", Decimal("79.99")),
        (" $1,299.00 ", Decimal("1299.00")),
    ])
    def test_valid_prices(self, value, expected):
        assert coerce_price(value) == expected

    @pytest.mark.parametrize("value", [
        True, None, -5, "abc", "NaN", float("inf"), [1], "1e400", 10 ** 12,
    ])
    def test_invalid_prices(self, value):
        assert coerce_price(value) is None

    def test_rating_clamped(self):
        assert coerce_rating(7) == 5.0
        assert coerce_rating(-1) == 0.0
        assert coerce_rating("4.5") == 4.5
        assert coerce_rating(None) == 0.0

    def test_rating_too_large_for_float(self):
        """Integers beyond float range count as unrated."""
        assert coerce_rating(10 ** 400) == 0.0


class TestNormalizeAdvice:
    """Free-text replies."""

    def test_text_verbatim(self):
        assert normalize_advice(text_output("## Health\n", "Looking good.")) == "## Health\n\nLooking good."

    def test_empty_reply_uses_fallback(self):
        assert normalize_advice(RawModelOutput()) == ADVICE_UNAVAILABLE
        assert normalize_advice(text_output("   "), fallback="custom") == "custom"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

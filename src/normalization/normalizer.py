"""
Response Normalizer

DESIGN DECISION: Model output is UNTRUSTED text that is usually, but not
always, the JSON we asked for. Normalization runs in two strictly
separated stages:

STAGE 1 - EXTRACTION (tolerant):
- Join the text blocks
- Strip markdown code fences
- Cut out the span from the first "{" to the last "}"

STAGE 2 - CONSTRUCTION (strict):
- Parse the span as JSON
- Require an object with a "products" list
- Coerce each product independently; a bad product is dropped,
  not the whole reply

IMPORTANT: Nothing in this module raises on bad model output.
An unparsable reply is an expected outcome, returned as a
DegradedRecommendation carrying the raw text for the UI to show.
"""

import json
import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError

from src.models.insights import (
    MAX_PRICE,
    DegradedRecommendation,
    NormalizedRecommendation,
    ProductCandidate,
    RecommendationOutcome,
    StructuredRecommendation,
)
from src.models.llm import RawModelOutput


logger = structlog.get_logger(__name__)

ADVICE_UNAVAILABLE = "Unable to generate advice at this time."

# ``` or ```json / ```JSON / ```javascript ...
_CODE_FENCE = re.compile(r"```[A-Za-z0-9_+-]*")

_HTTP_URL = re.compile(r"^https?://\S+$", re.IGNORECASE)


# =============================================================================
# STAGE 1 - EXTRACTION
# =============================================================================

def collect_text(output: RawModelOutput) -> str:
    """All text blocks, in emission order, joined by newlines."""
    return "\n".join(output.texts)


def strip_code_fences(text: str) -> str:
    """Remove every ``` marker (with optional language tag) and trim."""
    return _CODE_FENCE.sub("", text).strip()


def extract_json_span(text: str) -> Optional[str]:
    """The substring from the first "{" to the last "}", if there is one."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return text[start:end + 1]


# =============================================================================
# STAGE 2 - CONSTRUCTION
# =============================================================================

@dataclass(frozen=True)
class Accepted:
    candidate: ProductCandidate


@dataclass(frozen=True)
class Skipped:
    index: int
    reason: str


CandidateResult = Union[Accepted, Skipped]


def parse_recommendation_payload(span: str) -> Optional[dict]:
    """
    Parse the extracted span.

    Returns the decoded object only if it has a "products" list.
    """
    try:
        data = json.loads(span)
    except (ValueError, RecursionError):
        return None

    if not isinstance(data, dict) or not isinstance(data.get("products"), list):
        return None
    return data


def coerce_price(value: Any) -> Optional[Decimal]:
    """
    Accept numbers and numeric strings ("79.99", "$1,299.00").

    Booleans, non-finite, negative and implausibly large values are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        price = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().lstrip("$").replace(",", "").strip()
        try:
            price = Decimal(cleaned)
        except InvalidOperation:
            return None
        if not price.is_finite():
            return None
    else:
        return None

    if price < 0 or price > MAX_PRICE:
        return None
    return price


def coerce_rating(value: Any) -> float:
    """Clamp into [0, 5]; anything non-numeric counts as unrated."""
    if isinstance(value, bool):
        return 0.0
    try:
        rating = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(rating):
        return 0.0
    return min(max(rating, 0.0), 5.0)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _text_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    items = (str(item).strip() for item in value if item is not None)
    return [item for item in items if item]


def _url(value: Any) -> Optional[str]:
    url = _text(value)
    return url if _HTTP_URL.match(url) else None


def coerce_candidate(index: int, entry: Any) -> CandidateResult:
    """Turn one raw product entry into a candidate, or say why not."""
    if not isinstance(entry, dict):
        return Skipped(index, "not_an_object")

    name = _text(entry.get("name"))
    if not name:
        return Skipped(index, "missing_name")

    price = coerce_price(entry.get("price"))
    if price is None:
        return Skipped(index, "invalid_price")

    source = _text(entry.get("source")) or _text(entry.get("sourceRetailer"))

    try:
        candidate = ProductCandidate(
            name=name,
            price=price,
            rating=coerce_rating(entry.get("rating")),
            pros=_text_list(entry.get("pros")),
            cons=_text_list(entry.get("cons")),
            summary=_text(entry.get("summary")),
            badge=_text(entry.get("badge")),
            source_retailer=source or None,
            direct_url=_url(entry.get("directUrl")),
            search_query=_text(entry.get("searchQuery")) or name,
        )
    except ValidationError:
        return Skipped(index, "invalid_fields")

    return Accepted(candidate)


def build_recommendation(data: dict) -> NormalizedRecommendation:
    """Construct the normalized recommendation from a validated payload."""
    results = [
        coerce_candidate(index, entry)
        for index, entry in enumerate(data["products"])
    ]
    products = [r.candidate for r in results if isinstance(r, Accepted)]

    skipped = [r for r in results if isinstance(r, Skipped)]
    if skipped:
        logger.warning(
            "recommendation_products_dropped",
            dropped=len(skipped),
            kept=len(products),
            reasons=[f"{s.index}:{s.reason}" for s in skipped],
        )

    tip = data.get("shoppingTip")
    return NormalizedRecommendation(
        products=products,
        shopping_tip=tip.strip() if isinstance(tip, str) else "",
    )


# =============================================================================
# ENTRY POINTS
# =============================================================================

def normalize_recommendation(output: RawModelOutput) -> RecommendationOutcome:
    """
    Recover a product recommendation from raw model output.

    Returns:
        StructuredRecommendation on success (possibly with zero products),
        DegradedRecommendation with the original text otherwise.
    """
    raw_text = collect_text(output)

    span = extract_json_span(strip_code_fences(raw_text))
    if span is None:
        logger.info("recommendation_unparsable", reason="no_json_object")
        return DegradedRecommendation(raw_text=raw_text)

    data = parse_recommendation_payload(span)
    if data is None:
        logger.info("recommendation_unparsable", reason="invalid_payload")
        return DegradedRecommendation(raw_text=raw_text)

    return StructuredRecommendation(recommendation=build_recommendation(data))


def normalize_advice(
    output: RawModelOutput,
    fallback: str = ADVICE_UNAVAILABLE,
) -> str:
    """Free-text reply, verbatim; the fallback if the model said nothing."""
    text = collect_text(output).strip()
    return text or fallback

"""Model response normalization package."""

from src.normalization.normalizer import (
    ADVICE_UNAVAILABLE,
    Accepted,
    Skipped,
    build_recommendation,
    coerce_candidate,
    coerce_price,
    coerce_rating,
    collect_text,
    extract_json_span,
    normalize_advice,
    normalize_recommendation,
    parse_recommendation_payload,
    strip_code_fences,
)

__all__ = [
    "ADVICE_UNAVAILABLE",
    "Accepted",
    "Skipped",
    "build_recommendation",
    "coerce_candidate",
    "coerce_price",
    "coerce_rating",
    "collect_text",
    "extract_json_span",
    "normalize_advice",
    "normalize_recommendation",
    "parse_recommendation_payload",
    "strip_code_fences",
]

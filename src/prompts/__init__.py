"""Prompt building package."""

from src.prompts.builder import (
    RECOMMENDATION_BADGES,
    build_advice_prompt,
    build_chat_system_prompt,
    build_recommendation_prompt,
    format_category_breakdown,
    format_currency,
    format_summary,
    format_transaction_line,
    most_recent,
)

__all__ = [
    "RECOMMENDATION_BADGES",
    "build_advice_prompt",
    "build_chat_system_prompt",
    "build_recommendation_prompt",
    "format_category_breakdown",
    "format_currency",
    "format_summary",
    "format_transaction_line",
    "most_recent",
]

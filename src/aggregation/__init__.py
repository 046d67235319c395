"""Ledger aggregation package."""

from src.aggregation.aggregator import (
    accepted_records,
    aggregate,
    compute_stats,
    month_key,
    top_categories,
)

__all__ = [
    "accepted_records",
    "aggregate",
    "compute_stats",
    "month_key",
    "top_categories",
]

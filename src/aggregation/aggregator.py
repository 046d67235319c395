"""
Ledger Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and pure.
The same ledger always yields the same rollups, in the same order,
whether they feed a chart or an LLM prompt.

One pass over the ledger fills three accumulators:
- category totals (expenses only), keyed by category id, in first-seen order
- month buckets, keyed by YYYY-MM
- income / expense totals

A malformed record is skipped, not fatal. A dashboard with one bad row
should still render everything else.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from src.models.insights import (
    CategoryTotal,
    FinancialStats,
    FinancialSummary,
    LedgerAggregate,
    MonthBucket,
)
from src.models.ledger import TransactionKind, TransactionRecord


logger = structlog.get_logger(__name__)

LedgerInput = Union[TransactionRecord, Mapping]


def month_key(record: TransactionRecord) -> str:
    """YYYY-MM for the record's calendar month."""
    return f"{record.occurred_on.year:04d}-{record.occurred_on.month:02d}"


def _coerce_record(raw: LedgerInput, position: int) -> Optional[TransactionRecord]:
    """Return a usable record, or None if this row must be skipped."""
    if isinstance(raw, TransactionRecord):
        record = raw
    else:
        try:
            record = TransactionRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                "ledger_record_skipped",
                position=position,
                reason="invalid_record",
                error_count=e.error_count(),
            )
            return None

    if record.category is None:
        logger.warning(
            "ledger_record_skipped",
            position=position,
            reason="missing_category",
        )
        return None

    return record


def accepted_records(transactions: Iterable[LedgerInput]) -> list[TransactionRecord]:
    """The records aggregation would count, in input order."""
    records = (_coerce_record(raw, position) for position, raw in enumerate(transactions))
    return [record for record in records if record is not None]


def aggregate(transactions: Iterable[LedgerInput]) -> LedgerAggregate:
    """
    Roll a ledger up by category and by month.

    Args:
        transactions: Records in any order. Raw mappings are validated
            into TransactionRecord; rows that fail are skipped.

    Returns:
        LedgerAggregate with categories by total (descending, ties in
        first-seen order) and months ascending.
    """
    categories: dict[str, dict] = {}
    months: dict[str, dict[str, Decimal]] = {}
    total_income = Decimal("0")
    total_expense = Decimal("0")
    count = 0

    for position, raw in enumerate(transactions):
        record = _coerce_record(raw, position)
        if record is None:
            continue

        count += 1
        bucket = months.setdefault(
            month_key(record),
            {"income": Decimal("0"), "expense": Decimal("0")},
        )

        if record.kind == TransactionKind.INCOME:
            total_income += record.amount
            bucket["income"] += record.amount
            continue

        total_expense += record.amount
        bucket["expense"] += record.amount

        category = record.category
        entry = categories.get(category.id)
        if entry is None:
            entry = categories[category.id] = {
                "name": category.name,
                "icon": category.icon,
                "color": category.color,
                "total": Decimal("0"),
            }
        entry["total"] += record.amount

    # dicts keep insertion order and sorted() is stable: ties stay first-seen
    by_category = [
        CategoryTotal(**entry)
        for entry in sorted(categories.values(), key=lambda e: e["total"], reverse=True)
    ]
    by_month = [
        MonthBucket(month=key, income=sums["income"], expense=sums["expense"])
        for key, sums in sorted(months.items())
    ]

    return LedgerAggregate(
        by_category=by_category,
        by_month=by_month,
        summary=FinancialSummary(
            total_income=total_income,
            total_expense=total_expense,
            transaction_count=count,
        ),
    )


def compute_stats(transactions: Iterable[LedgerInput]) -> FinancialStats:
    """Dashboard statistics: the aggregate, flattened."""
    return aggregate(transactions).to_stats()


def top_categories(
    by_category: Iterable[CategoryTotal],
    limit: Optional[int] = None,
) -> list[CategoryTotal]:
    """
    The `limit` largest categories (all of them if None).

    Re-sorted in case the caller's list isn't; ties keep their input order.
    """
    ranked = sorted(by_category, key=lambda c: c.total, reverse=True)
    return ranked[:limit]

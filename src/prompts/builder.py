"""
Prompt Builder

DESIGN DECISION: Prompts are plain functions of their inputs.
Nothing here talks to the model or the ledger, so every prompt
can be asserted on exactly in tests.

Formatting rules shared by every prompt:
- Money is always rendered with two fraction digits ("$1234.50")
- Category breakdowns are listed largest first
- Recent transactions are listed newest first
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal

from src.aggregation import top_categories
from src.models.insights import (
    CategoryTotal,
    FinancialSummary,
    RecommendationRequest,
)
from src.models.ledger import TransactionKind, TransactionRecord


CURRENCY_SYMBOL = "$"

RECOMMENDATION_BADGES = ("Best Overall", "Best Value", "Budget Pick")


def format_currency(amount: Decimal) -> str:
    """Render an amount with two decimals, sign before the symbol."""
    value = Decimal(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(value):.2f}"


def most_recent(
    transactions: Iterable[TransactionRecord],
    limit: int,
) -> list[TransactionRecord]:
    """The `limit` newest records; same-day records keep their input order."""
    ranked = sorted(transactions, key=lambda t: t.occurred_on, reverse=True)
    return ranked[:limit]


def format_category_breakdown(by_category: Iterable[CategoryTotal]) -> str:
    lines = [
        f"{category.name}: {format_currency(category.total)}"
        for category in top_categories(by_category)
    ]
    return "\n".join(lines) or "No expenses recorded."


def format_transaction_line(record: TransactionRecord) -> str:
    """One ledger line: "-$12.50 - Dining (lunch) on 2026-01-15"."""
    sign = "+" if record.kind == TransactionKind.INCOME else "-"
    category = record.category.name if record.category else "Uncategorized"
    line = f"{sign}{format_currency(record.amount)} - {category}"
    if record.description:
        line += f" ({record.description})"
    return f"{line} on {record.occurred_on.isoformat()}"


def format_summary(summary: FinancialSummary) -> str:
    return "\n".join([
        f"- Total Income: {format_currency(summary.total_income)}",
        f"- Total Expenses: {format_currency(summary.total_expense)}",
        f"- Balance: {format_currency(summary.balance)}",
        f"- Number of Transactions: {summary.transaction_count}",
    ])


def build_advice_prompt(
    summary: FinancialSummary,
    by_category: Sequence[CategoryTotal],
    transactions: Iterable[TransactionRecord],
    recent_limit: int = 5,
) -> str:
    """
    Prompt asking the model for a structured financial health review.

    Args:
        summary: Ledger totals
        by_category: Expense rollup (re-sorted here regardless of input order)
        transactions: Ledger records; only the `recent_limit` newest are listed
        recent_limit: How many recent transactions to include
    """
    recent = "\n".join(
        format_transaction_line(record)
        for record in most_recent(transactions, recent_limit)
    ) or "No transactions recorded."

    return f"""You are a friendly and helpful personal finance advisor. Analyze the following financial data and provide actionable advice.

## Financial Summary
{format_summary(summary)}

## Expense Breakdown by Category
{format_category_breakdown(by_category)}

## Recent Transactions
{recent}

Please provide:
1. A brief assessment of the user's financial health (2-3 sentences)
2. Top 3 specific, actionable tips to improve their finances
3. Which spending category they should watch most carefully and why
4. A suggested monthly budget split based on their income (if income data is available)

Keep the tone friendly, encouraging, and concise. Use dollar amounts where relevant. Format with clear headings."""


def build_chat_system_prompt(
    summary: FinancialSummary,
    by_category: Sequence[CategoryTotal],
    top_limit: int = 5,
) -> str:
    """
    System instruction for free-form finance questions.

    The user's question itself goes in the user turn, not here.
    """
    top = ", ".join(
        f"{category.name}: {format_currency(category.total)}"
        for category in top_categories(by_category, top_limit)
    ) or "none"

    return f"""You are a knowledgeable and friendly personal finance assistant. You have access to the user's financial data and can search the web for current financial information.

User's Financial Context:
- Total Income: {format_currency(summary.total_income)}
- Total Expenses: {format_currency(summary.total_expense)}
- Balance: {format_currency(summary.balance)}
- Transaction Count: {summary.transaction_count}
- Top Spending Categories: {top}

When answering:
- Be concise and practical
- Use the user's actual financial data when relevant
- Search the web for current rates, prices, or financial news when needed
- Give specific, actionable advice
- Use dollar amounts when possible"""


def build_recommendation_prompt(request: RecommendationRequest) -> str:
    """
    Prompt asking for three products inside a price range, as JSON only.

    The example schema is the contract the normalizer parses against.
    """
    product = request.product_query
    low = format_currency(request.min_price)
    high = format_currency(request.max_price)
    best, value, budget = RECOMMENDATION_BADGES

    return f"""You are a shopping advisor. I need you to find 3 real products currently for sale.

## Request
- Product: {product}
- Budget: {low} - {high}

## Instructions
1. Search for "{product}" on Amazon and other major retailers
2. Find 3 specific products that are CURRENTLY listed and priced between {low} and {high}
3. For each product, find the ACTUAL product page URL and the REAL current price shown on that page
4. Search for each product individually to confirm its price and availability

CRITICAL: Every price MUST be between {low} and {high}. Do not return products outside this range.

Return ONLY valid JSON, with no prose before or after it and no markdown fences, following this exact schema:

{{
  "products": [
    {{
      "name": "Full Product Name",
      "price": 79.99,
      "rating": 4.5,
      "pros": ["pro 1", "pro 2", "pro 3"],
      "cons": ["con 1"],
      "summary": "Why this is a good pick.",
      "badge": "{best}",
      "directUrl": "https://www.example-store.com/actual-product-page",
      "source": "Amazon",
      "searchQuery": "product name for backup search"
    }}
  ],
  "shoppingTip": "A useful buying tip."
}}

Badges: first = "{best}", second = "{value}", third = "{budget}".
"price" is a number, "rating" is a number from 0 to 5."""

"""
Ledger Models

The ledger is owned by the surrounding application. These models describe
the records this core READS; nothing here is ever written back.

DESIGN DECISION: Records are frozen Pydantic models.
Aggregation and prompt building are pure functions over them, so
immutability guarantees two runs over the same ledger see the same data.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionKind(str, Enum):
    """Direction of money movement."""
    INCOME = "income"
    EXPENSE = "expense"


class CategoryRef(BaseModel):
    """
    Category reference denormalized onto each transaction.

    The id is the grouping key; name/icon/color are display data
    carried through to the category rollup unchanged.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Stable category identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    icon: str = Field(
        default="📦",
        description="Emoji shown next to the category"
    )
    color: str = Field(
        default="#6B7280",
        pattern=r"^#[0-9A-Fa-f]{6}$",
        description="Hex accent colour"
    )


class TransactionRecord(BaseModel):
    """
    A single ledger entry.

    `category` is Optional only because upstream data can be incomplete.
    The aggregator skips such records instead of failing the whole ledger.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount; direction comes from `kind`"
    )
    kind: TransactionKind
    occurred_on: date
    category: Optional[CategoryRef] = None
    description: Optional[str] = Field(
        default=None,
        max_length=500,
    )


# Seed catalogue shared by every new user
DEFAULT_CATEGORIES: tuple[CategoryRef, ...] = (
    CategoryRef(id="dining", name="Dining", icon="🍔", color="#EF4444"),
    CategoryRef(id="transport", name="Transport", icon="🚗", color="#F59E0B"),
    CategoryRef(id="shopping", name="Shopping", icon="🛍️", color="#8B5CF6"),
    CategoryRef(id="housing", name="Housing", icon="🏠", color="#3B82F6"),
    CategoryRef(id="entertainment", name="Entertainment", icon="🎬", color="#EC4899"),
    CategoryRef(id="healthcare", name="Healthcare", icon="🏥", color="#10B981"),
    CategoryRef(id="education", name="Education", icon="📚", color="#6366F1"),
    CategoryRef(id="salary", name="Salary", icon="💰", color="#22C55E"),
    CategoryRef(id="freelance", name="Freelance", icon="💼", color="#14B8A6"),
    CategoryRef(id="other", name="Other", icon="📦", color="#6B7280"),
)


def default_category(category_id: str) -> CategoryRef:
    """Look up a seed category by id."""
    for category in DEFAULT_CATEGORIES:
        if category.id == category_id:
            return category
    raise KeyError(f"Unknown default category: {category_id}")

"""
Shared fixtures.

No test talks to a real model: flows and agents get a FakeGateway that
records every call and replays scripted replies or failures.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

import pytest

from src.config import AssistantSettings
from src.models.ledger import TransactionKind, TransactionRecord, default_category
from src.models.llm import RawModelOutput, TextBlock
from src.services.llm import LLMGatewayInterface


def make_record(
    amount: str,
    kind: TransactionKind = TransactionKind.EXPENSE,
    category_id: Optional[str] = "dining",
    occurred_on: date = date(2026, 1, 15),
    description: Optional[str] = None,
) -> TransactionRecord:
    return TransactionRecord(
        amount=Decimal(amount),
        kind=kind,
        occurred_on=occurred_on,
        category=default_category(category_id) if category_id else None,
        description=description,
    )


def text_output(*texts: str) -> RawModelOutput:
    return RawModelOutput(blocks=tuple(TextBlock(text=t) for t in texts))


class FakeGateway(LLMGatewayInterface):
    """Replays scripted replies in order; an Exception in the script is raised."""

    def __init__(self, *replies: Union[RawModelOutput, Exception]):
        self._replies = list(replies)
        self.calls: list[dict] = []

    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        enable_web_search: bool = False,
        max_output_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> RawModelOutput:
        self.calls.append({
            "prompt": prompt,
            "system_instruction": system_instruction,
            "enable_web_search": enable_web_search,
            "max_output_tokens": max_output_tokens,
        })
        reply = self._replies.pop(0) if self._replies else RawModelOutput()
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def assistant_settings() -> AssistantSettings:
    return AssistantSettings()


@pytest.fixture
def sample_ledger() -> list[TransactionRecord]:
    """Salary plus three expenses across two months."""
    return [
        make_record("3000", TransactionKind.INCOME, "salary", date(2026, 1, 1)),
        make_record("50", category_id="dining", occurred_on=date(2026, 1, 15), description="lunch"),
        make_record("20", category_id="transport", occurred_on=date(2026, 1, 20)),
        make_record("30", category_id="dining", occurred_on=date(2026, 2, 3)),
    ]

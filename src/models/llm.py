"""
Model Output Models

What the LLM gateway hands to the response normalizer. Raw output is
transient: produced once per model call, consumed once, then dropped.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class TextBlock(BaseModel):
    """A text part of the model's reply."""
    model_config = ConfigDict(frozen=True)

    text: str


class ToolBlock(BaseModel):
    """
    A non-text artifact (function call, search grounding, code execution).

    Kept so callers can see tools were used; never parsed.
    """
    model_config = ConfigDict(frozen=True)

    kind: str
    name: Optional[str] = None


ContentBlock = Union[TextBlock, ToolBlock]


class RawModelOutput(BaseModel):
    """Ordered content blocks from one model call."""
    model_config = ConfigDict(frozen=True)

    blocks: tuple[ContentBlock, ...] = ()
    finish_reason: Optional[str] = None

    @property
    def texts(self) -> list[str]:
        """Text of every text block, in emission order."""
        return [block.text for block in self.blocks if isinstance(block, TextBlock)]

    @property
    def tool_block_count(self) -> int:
        return sum(1 for block in self.blocks if isinstance(block, ToolBlock))

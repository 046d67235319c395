"""
LLM Gateway using Gemini

DESIGN DECISION: The gateway is the ONLY place that talks to the model.
It does exactly one outbound call per invocation and nothing else:
- no retries (retry policy belongs to the caller)
- no parsing beyond splitting the reply into content blocks
- no state carried between calls

Every failure of the external call becomes a GatewayError with a coarse
reason. Transport detail is kept on the exception for logging, but never
appears in its message, so it cannot leak into a user-facing response.
"""

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

import google.generativeai as genai
import structlog
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import BlockedPromptException, StopCandidateException

from src.config import GeminiSettings, get_settings
from src.models.llm import RawModelOutput, TextBlock, ToolBlock


logger = structlog.get_logger(__name__)

# Gemini's built-in web search grounding
WEB_SEARCH_TOOL = "google_search_retrieval"

_NON_TEXT_PART_FIELDS = (
    "function_call",
    "function_response",
    "executable_code",
    "code_execution_result",
    "inline_data",
    "file_data",
)


class GatewayErrorReason(str, Enum):
    """Why the external call could not be completed."""
    TIMEOUT = "timeout"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TRANSPORT = "transport"
    MALFORMED_RESPONSE = "malformed_response"


class GatewayError(Exception):
    """The model call failed. Safe to show `str(error)` to users."""

    _RETRYABLE = {
        GatewayErrorReason.TIMEOUT,
        GatewayErrorReason.RATE_LIMIT,
        GatewayErrorReason.TRANSPORT,
    }

    def __init__(self, reason: GatewayErrorReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"The AI service is currently unavailable ({reason.value})")

    @property
    def retryable(self) -> bool:
        return self.reason in self._RETRYABLE


class LLMGatewayInterface(ABC):
    """
    Single-call access to a language model.

    Implementations must perform at most one network call per `generate`.
    """

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        enable_web_search: bool = False,
        max_output_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> RawModelOutput:
        """
        Send a prompt and return the model's content blocks.

        Args:
            prompt: User-turn text
            system_instruction: Optional system context
            enable_web_search: Allow the model to ground with web search
            max_output_tokens: Cap on reply size
            timeout: Seconds to wait before giving up

        Raises:
            GatewayError: If the call cannot be completed
        """
        pass


class GeminiGateway(LLMGatewayInterface):
    """
    Gateway backed by Google Generative AI.

    A fresh GenerativeModel is built per call because system instruction,
    tools and output size vary by call site.
    """

    SERVICE_NAME = "gemini"

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        genai.configure(api_key=self._settings.api_key)

    def _build_model(
        self,
        system_instruction: Optional[str],
        enable_web_search: bool,
        max_output_tokens: Optional[int],
    ):
        generation_config: dict[str, Any] = {
            "temperature": self._settings.temperature,
        }
        if max_output_tokens:
            generation_config["max_output_tokens"] = max_output_tokens

        kwargs: dict[str, Any] = {}
        if system_instruction:
            kwargs["system_instruction"] = system_instruction
        if enable_web_search:
            kwargs["tools"] = WEB_SEARCH_TOOL

        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config=generation_config,
            **kwargs,
        )

    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        enable_web_search: bool = False,
        max_output_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> RawModelOutput:
        limit = timeout if timeout is not None else self._settings.timeout_seconds
        model = self._build_model(system_instruction, enable_web_search, max_output_tokens)

        try:
            response = await asyncio.wait_for(
                model.generate_content_async(prompt),
                timeout=limit,
            )
        except asyncio.TimeoutError as e:
            raise GatewayError(
                GatewayErrorReason.TIMEOUT, f"no response within {limit}s"
            ) from e
        except google_exceptions.DeadlineExceeded as e:
            raise GatewayError(GatewayErrorReason.TIMEOUT, str(e)) from e
        except (
            google_exceptions.Unauthenticated,
            google_exceptions.PermissionDenied,
        ) as e:
            raise GatewayError(GatewayErrorReason.AUTH, str(e)) from e
        except (
            google_exceptions.ResourceExhausted,
            google_exceptions.TooManyRequests,
        ) as e:
            raise GatewayError(GatewayErrorReason.RATE_LIMIT, str(e)) from e
        except google_exceptions.GoogleAPIError as e:
            raise GatewayError(GatewayErrorReason.TRANSPORT, str(e)) from e
        except (
            BlockedPromptException,
            StopCandidateException,
        ) as e:
            raise GatewayError(GatewayErrorReason.MALFORMED_RESPONSE, str(e)) from e

        output = to_raw_output(response)
        logger.debug(
            "model_call_completed",
            model=self._settings.model_name,
            blocks=len(output.blocks),
            finish_reason=output.finish_reason,
            web_search=enable_web_search,
        )
        return output


def _part_kind(part: Any) -> tuple[str, Optional[str]]:
    for field_name in _NON_TEXT_PART_FIELDS:
        value = getattr(part, field_name, None)
        if value:
            return field_name, getattr(value, "name", None) or None
    return "unknown", None


def to_raw_output(response: Any) -> RawModelOutput:
    """
    Split a Gemini response into ordered content blocks.

    An empty candidate list (e.g. a safety block) is a valid, empty reply.
    A response without a candidates field at all is malformed.
    """
    candidates = getattr(response, "candidates", None)
    if candidates is None:
        raise GatewayError(
            GatewayErrorReason.MALFORMED_RESPONSE, "response has no candidates"
        )
    if not candidates:
        return RawModelOutput()

    candidate = candidates[0]
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []

    blocks: list = []
    for part in parts:
        text = getattr(part, "text", None)
        if isinstance(text, str) and text:
            blocks.append(TextBlock(text=text))
        else:
            kind, name = _part_kind(part)
            blocks.append(ToolBlock(kind=kind, name=name))

    if getattr(candidate, "grounding_metadata", None):
        blocks.append(ToolBlock(kind="grounding_metadata"))

    finish_reason = getattr(candidate, "finish_reason", None)
    if finish_reason is not None:
        finish_reason = getattr(finish_reason, "name", None) or str(finish_reason)

    return RawModelOutput(blocks=tuple(blocks), finish_reason=finish_reason)

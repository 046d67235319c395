"""LLM gateway package."""

from src.services.llm.gateway import (
    WEB_SEARCH_TOOL,
    GatewayError,
    GatewayErrorReason,
    GeminiGateway,
    LLMGatewayInterface,
    to_raw_output,
)

__all__ = [
    "WEB_SEARCH_TOOL",
    "GatewayError",
    "GatewayErrorReason",
    "GeminiGateway",
    "LLMGatewayInterface",
    "to_raw_output",
]

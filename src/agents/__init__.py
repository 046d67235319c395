"""AI Agents package."""

from src.agents.ai_agents import (
    ANSWER_UNAVAILABLE,
    AdvisorAgent,
    ChatAgent,
    GatewayAgent,
    ShoppingAgent,
)

__all__ = [
    "ANSWER_UNAVAILABLE",
    "AdvisorAgent",
    "ChatAgent",
    "GatewayAgent",
    "ShoppingAgent",
]

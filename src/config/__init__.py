"""Configuration package."""

from src.config.settings import (
    AppSettings,
    AssistantSettings,
    GeminiSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AssistantSettings",
    "GeminiSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]

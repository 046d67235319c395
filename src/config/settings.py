"""
Configuration Management for the Finance Insights core

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Upper bound for a single model call"
    )


class AssistantSettings(BaseSettings):
    """
    Tuning knobs for the advice, chat and recommendation flows.

    These only shape prompts and call options; none of them change
    how responses are parsed.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSISTANT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # How much ledger detail goes into each prompt
    advice_recent_transactions: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Recent transactions listed in the advice prompt"
    )
    chat_context_transactions: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Most recent transactions summarized as chat context"
    )
    chat_top_categories: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Spending categories named in the chat context"
    )

    # Output size per call site
    advice_max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens for advice responses"
    )
    chat_max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens for chat answers"
    )
    recommendation_max_tokens: int = Field(
        default=4096,
        ge=100,
        le=8192,
        description="Maximum tokens for product recommendations"
    )

    enable_web_search: bool = Field(
        default=True,
        description="Let the model ground chat and recommendations with web search"
    )
    gateway_max_attempts: int = Field(
        default=1,
        ge=1,
        le=5,
        description="Attempts per model call (1 = no retry)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so that stats work without an API key

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def assistant(self) -> AssistantSettings:
        return AssistantSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("gemini", "assistant", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

"""Tests for configuration loading."""

import pytest

from src.config import AppSettings, AssistantSettings, GeminiSettings, get_settings


class TestSettings:
    """Environment-driven settings."""

    def test_assistant_defaults(self, monkeypatch):
        monkeypatch.delenv("ASSISTANT_GATEWAY_MAX_ATTEMPTS", raising=False)
        settings = AssistantSettings()

        assert settings.advice_recent_transactions == 5
        assert settings.chat_context_transactions == 20
        assert settings.chat_top_categories == 5
        assert settings.gateway_max_attempts == 1

    def test_assistant_from_env(self, monkeypatch):
        monkeypatch.setenv("ASSISTANT_GATEWAY_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("ASSISTANT_ENABLE_WEB_SEARCH", "false")

        settings = AssistantSettings()

        assert settings.gateway_max_attempts == 3
        assert settings.enable_web_search is False

    def test_attempts_bounded(self):
        with pytest.raises(ValueError):
            AssistantSettings(gateway_max_attempts=0)

    def test_gemini_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "abc")
        monkeypatch.setenv("GEMINI_MODEL_NAME", "gemini-1.5-pro")

        settings = GeminiSettings()

        assert settings.api_key == "abc"
        assert settings.model_name == "gemini-1.5-pro"

    def test_log_level_normalized(self):
        assert AppSettings(log_level=" debug ").log_level == "DEBUG"
        with pytest.raises(ValueError):
            AppSettings(log_level="LOUD")

    def test_stats_settings_load_without_api_key(self, monkeypatch):
        """Sub-settings are lazy: a missing API key only fails when Gemini is used."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        get_settings.cache_clear()
        try:
            settings = get_settings()
            assert settings.assistant.chat_top_categories == 5
        finally:
            get_settings.cache_clear()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

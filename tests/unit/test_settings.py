"""Tests for configuration settings."""
import pytest
from pydantic import ValidationError

from src.node_sdk.settings import Settings, get_settings, reset_settings


class TestSettings:
    """Test Settings configuration."""

    def test_settings_default_values(self, monkeypatch):
        """Test default values are set correctly."""
        monkeypatch.delenv("NODE_HTTP_TIMEOUT_S", raising=False)

        settings = Settings()

        # env is 'test' under conftest.py
        assert settings.env in ("development", "test")
        assert settings.log_level == "INFO"

        assert settings.http_timeout_s == 30
        assert settings.credential_test_timeout_s == 5
        assert settings.github_api_url == "https://api.github.com"
        assert settings.user_agent == "github-nodepack"
        assert settings.page_size == 100

    def test_settings_env_prefix(self, monkeypatch):
        """Test that NODE_ prefix works for environment variables."""
        monkeypatch.setenv("NODE_ENV", "production")
        monkeypatch.setenv("NODE_LOG_LEVEL", "debug")
        monkeypatch.setenv("NODE_GITHUB_API_URL", "https://ghe.corp/api/v3")

        settings = Settings()

        assert settings.env == "production"
        assert settings.log_level == "DEBUG"
        assert settings.github_api_url == "https://ghe.corp/api/v3"

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("NODE_LOG_LEVEL", "CHATTY")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "Unknown log level" in str(exc_info.value)

    @pytest.mark.parametrize("page_size", ["0", "101"])
    def test_page_size_validation(self, monkeypatch, page_size):
        """GitHub never serves more than 100 entries per page."""
        monkeypatch.setenv("NODE_PAGE_SIZE", page_size)

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "page_size must be between 1 and 100" in str(exc_info.value)

    def test_timeout_validation(self, monkeypatch):
        """Test that timeouts must be positive."""
        monkeypatch.setenv("NODE_HTTP_TIMEOUT_S", "0")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "timeouts must be positive" in str(exc_info.value)

    def test_get_settings_singleton(self):
        """Test that get_settings returns singleton instance."""
        reset_settings()
        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_reset_settings(self):
        """Test that reset_settings clears the singleton."""
        settings1 = get_settings()
        reset_settings()
        settings2 = get_settings()

        assert settings1 is not settings2

"""Configuration and settings management using pydantic-settings."""
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Node runtime settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="NODE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core settings
    env: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=True, description="Emit JSON log lines")

    # HTTP settings
    http_timeout_s: float = Field(
        default=30.0,
        description="Timeout for every outbound API request in seconds",
    )
    credential_test_timeout_s: float = Field(
        default=5.0,
        description="Timeout for credential test requests in seconds",
    )

    # GitHub settings
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub API base URL used when a credential sets no server",
    )
    user_agent: str = Field(
        default="github-nodepack",
        description="Client identification sent with every GitHub request",
    )
    page_size: int = Field(
        default=100,
        description="per_page used while fetching all pages",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is one logging knows."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """GitHub caps per_page at 100."""
        if not 1 <= v <= 100:
            raise ValueError("page_size must be between 1 and 100")
        return v

    @field_validator("http_timeout_s", "credential_test_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate that timeouts are positive."""
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None

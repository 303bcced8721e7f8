"""
Application settings management using Pydantic.

This module combines YAML configuration with environment variables to create
a unified settings object.
"""

from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config.loader import ConfigurationError, load_config, load_prompts, merge_with_env


# Pydantic models for configuration sections
class LLMSettings(BaseModel):
    """Merge model configuration settings."""

    endpoint: str
    temperature: float = 0.0
    max_tokens: int = 8000

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v

    @field_validator("max_tokens")
    @classmethod
    def validate_max_tokens(cls, v: int) -> int:
        if v < 1 or v > 32000:
            raise ValueError("max_tokens must be between 1 and 32000")
        return v


class GitHubSettings(BaseModel):
    """Target repository and pull request settings."""

    owner: str
    repo: str
    target_file_path: str
    bot_branch: str = "design-tokens/auto-update"
    base_branch: str = "main"
    commit_message: str = "[automated] Update Design Tokens"
    pr_title: str = "[automated] Update Design Tokens"
    pr_body: str = "[automated] Update Design Tokens"
    api_url: str = "https://api.github.com"
    timeout: float = 30.0

    @field_validator("owner", "repo", "target_file_path", "bot_branch", "base_branch")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Value must not be empty")
        return v.strip()

    @field_validator("target_file_path")
    @classmethod
    def validate_relative_path(cls, v: str) -> str:
        return v.lstrip("/")

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError("api_url must start with https:// or http://")
        return v.rstrip("/")


class APISettings(BaseModel):
    """API configuration settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    max_body_mb: int = 10

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("max_body_mb")
    @classmethod
    def validate_max_body(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_body_mb must be at least 1")
        return v


class MergeSettings(BaseModel):
    """How incoming CSS is merged into the tracked file."""

    mode: str = "section"

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        valid_modes = ["section", "file"]
        v_lower = v.lower()
        if v_lower not in valid_modes:
            raise ValueError(f"Merge mode must be one of: {', '.join(valid_modes)}")
        return v_lower


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"
    log_file: str = ""
    max_file_size_mb: int = 10
    backup_count: int = 5

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        valid_formats = ["json", "text"]
        if v not in valid_formats:
            raise ValueError(f"Log format must be one of: {', '.join(valid_formats)}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Combines environment variables (for secrets) with YAML configuration
    (for application settings).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Secrets and switches from environment variables
    github_token: str = Field(..., description="GitHub token with contents and pull request scope")
    test_mode: bool = Field(False, description="Skip pull request handling")

    # Application configuration (from YAML)
    llm: LLMSettings
    github: GitHubSettings
    api: APISettings
    merge: MergeSettings = Field(default_factory=MergeSettings)
    logging: LoggingSettings

    # Prompts (loaded separately)
    prompts: dict[str, Any] = Field(default_factory=dict)

    environment: str = "development"

    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("github_token must not be empty")
        return v.strip()


def create_settings() -> AppSettings:
    """
    Create application settings by combining YAML config and environment variables.

    Returns:
        AppSettings instance with all configuration loaded

    Raises:
        ConfigurationError: If configuration cannot be loaded or is invalid
    """
    try:
        config = load_config()
        prompts = load_prompts()

        config = merge_with_env(config)

        settings = AppSettings(
            llm=LLMSettings(**config["llm"]),
            github=GitHubSettings(**config["github"]),
            api=APISettings(**config["api"]),
            merge=MergeSettings(**config["merge"]),
            logging=LoggingSettings(**config["logging"]),
            prompts=prompts,
            environment=config.get("environment", "development"),
        )

        return settings

    except Exception as e:
        raise ConfigurationError(f"Failed to create settings: {e}") from e


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """
    Get the application settings singleton.

    This function is cached, so subsequent calls return the same instance.
    Use reload_settings() to force a reload during development.

    Returns:
        Cached AppSettings instance
    """
    return create_settings()


def reload_settings() -> AppSettings:
    """
    Reload settings by clearing the cache and recreating.

    Returns:
        New AppSettings instance
    """
    get_settings.cache_clear()
    return get_settings()

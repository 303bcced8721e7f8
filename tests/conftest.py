"""
Pytest configuration and shared fixtures.

This module provides fixtures that are available to all test modules.
"""

import os
from typing import Any, Generator
from unittest.mock import patch

import pytest

from src.config.settings import (
    APISettings,
    AppSettings,
    GitHubSettings,
    LLMSettings,
    LoggingSettings,
    MergeSettings,
)

TOKEN_CSS = """\
@import "tailwindcss";

/* Primitive tokens */
@theme {
  --color-red-500: #ff0000;
  --color-blue-500: #0000ff;
}

@theme inline {
  --color-background: var(--background);
}

:root {
  --background: var(--color-blue-500);
  --node-background: #ffffff;
}

.dark-theme {
  --background: #000000;
  --node-background: #111111;
}

/* Utilities */
.btn {
  color: var(--background);
}
"""

INCOMING_CSS = """\
@theme {
  --color-red-500: #ee0000;
  --color-blue-500: #0000ff;
  --color-green-500: #00ff00;
}

:root {
  --background: var(--color-blue-500, #0000ff);
}

.dark-theme {
  --background: #0a0a0a;
}
"""


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """
    Clear settings cache before each test.

    This ensures each test gets fresh settings.
    """
    from src.config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """
    Provide mock environment variables for testing.

    Returns:
        Dictionary of environment variables
    """
    env_vars = {
        "GITHUB_TOKEN": "ghp-test-token",
        "ENVIRONMENT": "test",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def sample_config() -> dict[str, Any]:
    """
    Provide a sample configuration dictionary for testing.

    Returns:
        Sample configuration
    """
    return {
        "llm": {
            "endpoint": "test-endpoint",
            "temperature": 0.0,
            "max_tokens": 8000,
        },
        "github": {
            "owner": "acme",
            "repo": "design-system",
            "target_file_path": "src/styles/tokens.css",
            "bot_branch": "design-tokens/auto-update",
            "base_branch": "main",
        },
        "api": {
            "host": "0.0.0.0",
            "port": 3000,
            "max_body_mb": 10,
        },
        "merge": {
            "mode": "section",
        },
        "logging": {
            "level": "INFO",
            "format": "json",
            "log_file": "",
            "max_file_size_mb": 10,
            "backup_count": 5,
        },
        "environment": "test",
    }


@pytest.fixture
def sample_prompts() -> dict[str, Any]:
    """
    Provide sample prompts for testing.

    Returns:
        Sample prompts dictionary
    """
    return {
        "token_section_prompt": "SECTION\nOLD:\n{old_css}\nNEW:\n{new_css}",
        "full_file_prompt": "FILE\nOLD:\n{old_css}\nNEW:\n{new_css}",
    }


@pytest.fixture
def make_settings(sample_config, sample_prompts):
    """
    Build AppSettings without touching config files or the environment.

    Keyword arguments override top-level fields (e.g. test_mode=True) or,
    for section names, replace that section's dict entries.
    """

    def _make(**overrides) -> AppSettings:
        config = {k: dict(v) if isinstance(v, dict) else v for k, v in sample_config.items()}
        fields: dict[str, Any] = {}
        for key, value in overrides.items():
            if key in config and isinstance(config[key], dict):
                config[key].update(value)
            else:
                fields[key] = value

        return AppSettings(
            github_token=fields.pop("github_token", "ghp-test-token"),
            llm=LLMSettings(**config["llm"]),
            github=GitHubSettings(**config["github"]),
            api=APISettings(**config["api"]),
            merge=MergeSettings(**config["merge"]),
            logging=LoggingSettings(**config["logging"]),
            prompts=fields.pop("prompts", sample_prompts),
            environment=config["environment"],
            **fields,
        )

    return _make


@pytest.fixture
def token_css() -> str:
    """A repository stylesheet with a token section and surrounding rules."""
    return TOKEN_CSS


@pytest.fixture
def incoming_css() -> str:
    """CSS as posted by the Figma plugin."""
    return INCOMING_CSS

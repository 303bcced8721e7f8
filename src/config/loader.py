"""
Configuration loader for YAML files.

This module handles loading and parsing YAML configuration files.
"""

import copy
import os
from pathlib import Path
from typing import Any

import yaml

from src.utils.error_handling import ConfigurationError

__all__ = [
    "ConfigurationError",
    "get_config_path",
    "load_yaml_file",
    "load_config",
    "load_prompts",
    "merge_with_env",
    "reload_config",
]

REQUIRED_SECTIONS = ["llm", "github", "api", "merge", "logging"]
REQUIRED_PROMPTS = ["token_section_prompt", "full_file_prompt"]

# Environment variable -> (config section, key)
ENV_OVERRIDES = {
    "GITHUB_OWNER": ("github", "owner"),
    "GITHUB_REPO": ("github", "repo"),
    "TARGET_FILE_PATH": ("github", "target_file_path"),
    "BOT_BRANCH": ("github", "bot_branch"),
    "BASE_BRANCH": ("github", "base_branch"),
    "LLM_ENDPOINT": ("llm", "endpoint"),
    "MERGE_MODE": ("merge", "mode"),
}


def get_config_path(filename: str) -> Path:
    """
    Get the path to a configuration file.

    Args:
        filename: Name of the config file (e.g., 'config.yaml')

    Returns:
        Path to the configuration file

    Raises:
        ConfigurationError: If config file doesn't exist
    """
    # Get project root (parent of src directory)
    current_file = Path(__file__)
    project_root = current_file.parent.parent.parent
    config_path = project_root / "config" / filename

    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}. "
            f"Please create it from the example in the config directory"
        )

    return config_path


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """
    Load and parse a YAML file.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed YAML content as a dictionary

    Raises:
        ConfigurationError: If file cannot be loaded or parsed
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)

        if content is None:
            raise ConfigurationError(f"YAML file is empty: {file_path}")

        if not isinstance(content, dict):
            raise ConfigurationError(
                f"YAML file must contain a dictionary at root level: {file_path}"
            )

        return content

    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML file {file_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read file {file_path}: {e}") from e


def load_config() -> dict[str, Any]:
    """
    Load the main configuration file (config.yaml).

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If config cannot be loaded
    """
    config_path = get_config_path("config.yaml")
    config = load_yaml_file(config_path)

    missing_keys = [key for key in REQUIRED_SECTIONS if key not in config]

    if missing_keys:
        raise ConfigurationError(
            f"Missing required configuration sections: {', '.join(missing_keys)}"
        )

    return config


def load_prompts() -> dict[str, Any]:
    """
    Load the prompts configuration file (prompts.yaml).

    Returns:
        Prompts dictionary

    Raises:
        ConfigurationError: If prompts cannot be loaded
    """
    prompts_path = get_config_path("prompts.yaml")
    prompts = load_yaml_file(prompts_path)

    missing_prompts = [key for key in REQUIRED_PROMPTS if key not in prompts]

    if missing_prompts:
        raise ConfigurationError(
            f"Missing required prompts: {', '.join(missing_prompts)}"
        )

    return prompts


def merge_with_env(config: dict[str, Any]) -> dict[str, Any]:
    """
    Merge configuration with environment variable overrides.

    Environment variables can override specific config values:
    - GITHUB_OWNER, GITHUB_REPO, TARGET_FILE_PATH, BOT_BRANCH, BASE_BRANCH -> github.*
    - LLM_ENDPOINT -> llm.endpoint
    - MERGE_MODE -> merge.mode
    - API_PORT -> api.port
    - LOG_LEVEL -> logging.level
    - ENVIRONMENT -> environment

    Args:
        config: Base configuration dictionary

    Returns:
        Configuration with environment overrides applied
    """
    merged = copy.deepcopy(config)

    for env_name, (section, key) in ENV_OVERRIDES.items():
        if value := os.getenv(env_name):
            merged.setdefault(section, {})[key] = value

    if port := os.getenv("API_PORT"):
        try:
            merged["api"]["port"] = int(port)
        except (ValueError, KeyError):
            pass

    if log_level := os.getenv("LOG_LEVEL"):
        if "logging" in merged:
            merged["logging"]["level"] = log_level.upper()

    if environment := os.getenv("ENVIRONMENT"):
        merged["environment"] = environment

    return merged


def reload_config() -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Reload both configuration and prompts files.

    Returns:
        Tuple of (config, prompts) dictionaries

    Raises:
        ConfigurationError: If either file cannot be loaded
    """
    config = load_config()
    prompts = load_prompts()
    config = merge_with_env(config)

    return config, prompts

"""Utility modules."""

from src.utils.css_utils import (
    AnchorRule,
    extract_main_theme_block,
    extract_theme_blocks,
    locate_token_section,
    replace_lines,
    require_token_section,
    scan_blocks,
    slice_lines,
)
from src.utils.error_handling import (
    AppException,
    ConfigurationError,
    CSSSectionError,
    GitHubConflictError,
    GitHubError,
    InvalidLineRangeError,
    LLMError,
    MalformedCSSError,
    SectionNotFoundError,
    format_exception_for_logging,
)
from src.utils.logging_config import get_logger, setup_logging

__all__ = [
    # CSS section utilities
    "AnchorRule",
    "extract_main_theme_block",
    "extract_theme_blocks",
    "locate_token_section",
    "replace_lines",
    "require_token_section",
    "scan_blocks",
    "slice_lines",
    # Error handling
    "AppException",
    "ConfigurationError",
    "CSSSectionError",
    "GitHubConflictError",
    "GitHubError",
    "InvalidLineRangeError",
    "LLMError",
    "MalformedCSSError",
    "SectionNotFoundError",
    "format_exception_for_logging",
    # Logging
    "get_logger",
    "setup_logging",
]

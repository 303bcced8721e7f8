"""
Application exception hierarchy.

Every error raised on purpose by the service derives from AppException so
routes and the workflow can log it with its structured details.
"""

from typing import Any, Optional


class AppException(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(AppException):
    """Raised when configuration loading or validation fails."""

    pass


# -----------------------------------------------------------------------------
# CSS section extraction
# -----------------------------------------------------------------------------


class CSSSectionError(AppException):
    """Base class for token section extraction and splicing errors."""

    pass


class SectionNotFoundError(CSSSectionError):
    """Raised when a document has no complete @theme ... .dark-theme section."""

    def __init__(self, document_label: str):
        super().__init__(
            f"No complete token section found in {document_label} CSS "
            "(missing @theme, :root, or .dark-theme)",
            {"document": document_label},
        )
        self.document_label = document_label


class InvalidLineRangeError(CSSSectionError):
    """Raised when a line range falls outside the document or is inverted."""

    def __init__(self, start_line: int, end_line: int, total_lines: int):
        super().__init__(
            f"Invalid line range: {start_line}-{end_line} (total lines: {total_lines})",
            {
                "start_line": start_line,
                "end_line": end_line,
                "total_lines": total_lines,
            },
        )
        self.start_line = start_line
        self.end_line = end_line
        self.total_lines = total_lines


class MalformedCSSError(CSSSectionError):
    """Raised when more braces close than opened inside a tracked block."""

    def __init__(self, line_number: int, block_label: str):
        super().__init__(
            f"Unbalanced closing brace on line {line_number} inside {block_label} block",
            {"line_number": line_number, "block": block_label},
        )
        self.line_number = line_number
        self.block_label = block_label


# -----------------------------------------------------------------------------
# External collaborators
# -----------------------------------------------------------------------------


class LLMError(AppException):
    """Raised when the merge model fails or returns unusable output."""

    pass


class GitHubError(AppException):
    """Raised when a GitHub API call fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class GitHubConflictError(GitHubError):
    """Raised when a write is rejected because the file SHA is stale."""

    pass


def format_exception_for_logging(exc: BaseException) -> dict[str, Any]:
    """
    Build a flat dict describing an exception for structured log records.

    Args:
        exc: Exception to describe

    Returns:
        Dictionary with the exception type, message and any app details
    """
    info: dict[str, Any] = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }
    if isinstance(exc, AppException) and exc.details:
        info["error_details"] = exc.details
    if isinstance(exc, GitHubError) and exc.status_code is not None:
        info["status_code"] = exc.status_code
    return info

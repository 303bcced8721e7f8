"""Business logic services."""

from src.services.github_client import FileContent, GitHubClient, PullRequestInfo
from src.services.token_merger import TokenMerger, clean_markdown_formatting
from src.services.token_update_workflow import TokenUpdateWorkflow, WorkflowResult

__all__ = [
    "FileContent",
    "GitHubClient",
    "PullRequestInfo",
    "TokenMerger",
    "TokenUpdateWorkflow",
    "WorkflowResult",
    "clean_markdown_formatting",
]

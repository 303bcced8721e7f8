"""
Design token update workflow.

Reads the tracked CSS file from the bot branch (or the base branch when the
bot branch does not exist yet), merges the incoming CSS into it, commits the
result to the bot branch and makes sure a pull request is open.

In section mode only the ``@theme`` .. ``.dark-theme`` span is sent to the
merge model; its output is spliced back over the old span so every line
outside it is preserved byte for byte.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from src.config.settings import AppSettings, get_settings
from src.services.github_client import GitHubClient
from src.services.token_merger import TokenMerger
from src.utils.css_utils import replace_lines, require_token_section
from src.utils.error_handling import format_exception_for_logging

logger = logging.getLogger(__name__)


@dataclass
class WorkflowResult:
    """Outcome of one update run."""

    success: bool
    pr_url: Optional[str] = None
    no_changes: bool = False
    test_mode: bool = False
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


class TokenUpdateWorkflow:
    """Process incoming design token CSS into a commit and pull request."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        github: Optional[GitHubClient] = None,
        merger: Optional[TokenMerger] = None,
        test_mode: Optional[bool] = None,
    ):
        """
        Initialize the workflow.

        Args:
            settings: Application settings; loaded when omitted
            github: Repository client; built from settings when omitted
            merger: Merge collaborator; built from settings when omitted
            test_mode: Skip pull request handling; defaults to settings.test_mode
        """
        self.settings = settings or get_settings()
        # Merger first; a model setup failure must not leave an open HTTP client
        self.merger = merger or TokenMerger(self.settings)
        self._owns_github = github is None
        self.github = github or GitHubClient(
            token=self.settings.github_token,
            owner=self.settings.github.owner,
            repo=self.settings.github.repo,
            api_url=self.settings.github.api_url,
            timeout=self.settings.github.timeout,
        )
        self.test_mode = self.settings.test_mode if test_mode is None else test_mode

    def close(self) -> None:
        """Close the repository client if this workflow created it."""
        if self._owns_github:
            self.github.close()

    def process_update(self, new_css: str) -> WorkflowResult:
        """
        Merge incoming CSS into the tracked file and open or update the PR.

        Failures never raise; they are logged and returned as an unsuccessful
        result.

        Args:
            new_css: CSS posted by the Figma plugin

        Returns:
            WorkflowResult describing what happened
        """
        gh = self.settings.github
        logger.info(
            "Starting token update workflow",
            extra={"bot_branch": gh.bot_branch, "target_file": gh.target_file_path, "test_mode": self.test_mode},
        )

        try:
            if self.github.branch_exists(gh.bot_branch):
                logger.info("Bot branch exists, updating it", extra={"branch": gh.bot_branch})
                file_data = self.github.get_file_content(gh.target_file_path, gh.bot_branch)
            else:
                logger.info(
                    "Bot branch missing, starting from base branch",
                    extra={"branch": gh.bot_branch, "base_branch": gh.base_branch},
                )
                file_data = self.github.get_file_content(gh.target_file_path, gh.base_branch)
                self.github.create_branch(gh.bot_branch, gh.base_branch)

            old_css = file_data.content
            logger.info("Fetched current CSS", extra={"old_chars": len(old_css), "new_chars": len(new_css)})

            if self.settings.merge.mode == "file":
                merged_css = self.merger.merge_css(old_css, new_css)
            else:
                merged_css = self.merge_token_section(old_css, new_css)

            if merged_css == old_css:
                logger.info("No changes detected in CSS, skipping commit and PR")
                return WorkflowResult(
                    success=True,
                    no_changes=True,
                    test_mode=self.test_mode,
                    message="No changes detected in design tokens",
                )

            # Written under the SHA read above, so a concurrent change fails with 409
            self.github.update_file(
                gh.target_file_path,
                merged_css,
                gh.bot_branch,
                file_data.sha,
                gh.commit_message,
            )

            pr_url = self._ensure_pull_request()

            logger.info("Token update workflow complete", extra={"url": pr_url})
            return WorkflowResult(success=True, pr_url=pr_url, test_mode=self.test_mode)

        except Exception as e:
            logger.error(
                f"Token update workflow failed: {e}",
                extra=format_exception_for_logging(e),
                exc_info=True,
            )
            return WorkflowResult(success=False, test_mode=self.test_mode, error=str(e))

    def merge_token_section(self, old_css: str, new_css: str) -> str:
        """
        Merge the token sections of two documents and splice the result into the old one.

        Args:
            old_css: Current repository file
            new_css: Incoming CSS

        Returns:
            The old document with its token section replaced

        Raises:
            SectionNotFoundError: If either document lacks a token section
        """
        old_section = require_token_section(old_css, "old")
        new_section = require_token_section(new_css, "new")

        logger.info(
            "Located token sections",
            extra={
                "old_start_line": old_section.start_line,
                "old_end_line": old_section.end_line,
                "old_blocks": old_section.anchors.to_dict(),
                "new_chars": len(new_section.content),
            },
        )

        updated_section = self.merger.update_token_section(old_section.content, new_section.content)

        return replace_lines(
            old_css,
            old_section.start_line,
            old_section.end_line,
            updated_section,
        )

    def _ensure_pull_request(self) -> str:
        gh = self.settings.github

        if self.test_mode:
            branch_url = f"https://github.com/{gh.owner}/{gh.repo}/tree/{gh.bot_branch}"
            logger.info("Test mode: skipping PR creation", extra={"url": branch_url})
            return branch_url

        existing = self.github.get_pull_request(gh.bot_branch, gh.base_branch)
        if existing:
            logger.info("PR already exists", extra={"pr_number": existing.number, "url": existing.url})
            return existing.url

        created = self.github.create_pull_request(gh.pr_title, gh.bot_branch, gh.base_branch, gh.pr_body)
        return created.url

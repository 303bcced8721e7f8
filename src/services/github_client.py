"""
GitHub REST client for the design token branch and pull request.

The repository file is addressed by ``(branch, path)``. Every read returns
the blob SHA, and every write must send the SHA it read; GitHub rejects a
stale SHA with 409, surfaced here as GitHubConflictError.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx

from src.utils.error_handling import GitHubConflictError, GitHubError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


@dataclass
class FileContent:
    """Decoded file content plus the SHA it was read at."""

    content: str
    sha: str


@dataclass
class PullRequestInfo:
    """Minimal pull request description."""

    number: int
    url: str


class GitHubClient:
    """Thin wrapper over the GitHub contents, refs and pulls endpoints."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        api_url: str = GITHUB_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            token: GitHub token
            owner: Repository owner (user or organization)
            repo: Repository name
            api_url: API base URL (GitHub Enterprise uses a different host)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.owner = owner
        self.repo = repo
        self._client = httpx.Client(
            base_url=api_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
        )

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, f"{self._repo_path}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub request failed: {method} {path}: {e}") from e

        if response.is_error:
            message = _error_message(response)
            error_cls = GitHubConflictError if response.status_code == 409 else GitHubError
            raise error_cls(
                f"GitHub API error {response.status_code} on {method} {path}: {message}",
                status_code=response.status_code,
            )
        return response

    def branch_exists(self, branch: str) -> bool:
        """
        Check if a branch exists.

        Args:
            branch: Branch name

        Returns:
            True if the branch exists, False on 404
        """
        try:
            self._request("GET", f"/branches/{quote(branch)}")
            return True
        except GitHubError as e:
            if e.status_code == 404:
                return False
            raise

    def get_file_content(self, file_path: str, ref: str) -> FileContent:
        """
        Get the content of a file on a branch.

        Args:
            file_path: Path of the file in the repository
            ref: Branch name

        Returns:
            FileContent with the UTF-8 decoded text and blob SHA
        """
        response = self._request(
            "GET",
            f"/contents/{quote(file_path)}",
            params={"ref": ref},
        )
        data = response.json()
        if isinstance(data, list) or data.get("type") != "file":
            raise GitHubError(f"{file_path} is not a file on {ref}")

        content = base64.b64decode(data["content"]).decode("utf-8")
        return FileContent(content=content, sha=data["sha"])

    def create_branch(self, new_branch: str, from_branch: str = "main") -> None:
        """
        Create a branch pointing at the head of another branch.

        Args:
            new_branch: Name of the branch to create
            from_branch: Branch whose head commit the new branch starts from
        """
        response = self._request("GET", f"/git/ref/heads/{quote(from_branch)}")
        sha = response.json()["object"]["sha"]

        self._request(
            "POST",
            "/git/refs",
            json={"ref": f"refs/heads/{new_branch}", "sha": sha},
        )
        logger.info("Created branch", extra={"branch": new_branch, "from_branch": from_branch})

    def update_file(
        self,
        file_path: str,
        content: str,
        branch: str,
        sha: str,
        commit_message: str,
    ) -> None:
        """
        Commit new content for an existing file.

        Args:
            file_path: Path of the file in the repository
            content: New file content
            branch: Branch to commit to
            sha: Blob SHA the content was read at
            commit_message: Commit message

        Raises:
            GitHubConflictError: If the file changed since it was read
        """
        self._request(
            "PUT",
            f"/contents/{quote(file_path)}",
            json={
                "message": commit_message,
                "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
                "sha": sha,
                "branch": branch,
            },
        )
        logger.info("Updated file", extra={"file_path": file_path, "branch": branch})

    def get_pull_request(self, head_branch: str, base_branch: str = "main") -> Optional[PullRequestInfo]:
        """
        Find an open pull request from a branch.

        Args:
            head_branch: Source branch
            base_branch: Target branch

        Returns:
            The first open pull request, or None
        """
        response = self._request(
            "GET",
            "/pulls",
            params={
                "head": f"{self.owner}:{head_branch}",
                "base": base_branch,
                "state": "open",
            },
        )
        pulls = response.json()
        if not pulls:
            return None
        return PullRequestInfo(number=pulls[0]["number"], url=pulls[0]["html_url"])

    def create_pull_request(
        self,
        title: str,
        head_branch: str,
        base_branch: str = "main",
        body: str = "",
    ) -> PullRequestInfo:
        """
        Open a pull request.

        Returns:
            PullRequestInfo for the new pull request
        """
        response = self._request(
            "POST",
            "/pulls",
            json={
                "title": title,
                "head": head_branch,
                "base": base_branch,
                "body": body,
            },
        )
        pr = response.json()
        logger.info("Created pull request", extra={"pr_number": pr["number"], "url": pr["html_url"]})
        return PullRequestInfo(number=pr["number"], url=pr["html_url"])


def _error_message(response: httpx.Response) -> str:
    try:
        data: Any = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict):
        return str(data.get("message", data))
    return str(data)

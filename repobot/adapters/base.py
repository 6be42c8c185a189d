"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    def __init__(self, message: str, status_code: int | None = None, api_message: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.api_message = api_message


class GitPlatformAdapter(ABC):
    """Operations the backport and enterprise-sync actions need from a Git
    hosting platform."""

    @abstractmethod
    def get_branch(self, repo: str, branch: str) -> Dict[str, Any]:
        """Fetch a branch; raises GitPlatformError if it does not exist."""
        ...

    @abstractmethod
    def create_ref(self, repo: str, ref: str, sha: str) -> None:
        """Create a git ref (full name, e.g. refs/heads/x) at sha."""
        ...

    @abstractmethod
    def update_ref(self, repo: str, ref: str, sha: str, force: bool = False) -> None:
        """Move a git ref (short name, e.g. heads/x) to sha."""
        ...

    @abstractmethod
    def create_pr(self, repo: str, title: str, body: str, head: str, base: str) -> Dict[str, Any]:
        """Create a pull request; return the API representation."""
        ...

    @abstractmethod
    def set_milestone(self, repo: str, issue_number: int, milestone_number: int) -> None:
        """Set the milestone of an issue or pull request."""
        ...

    @abstractmethod
    def request_reviewers(self, repo: str, pr_number: int, reviewers: List[str]) -> None:
        """Request review from users."""
        ...

    @abstractmethod
    def remove_requested_reviewers(
        self,
        repo: str,
        pr_number: int,
        reviewers: List[str],
        team_reviewers: List[str] | None = None,
    ) -> None:
        """Remove requested user (and team) reviewers."""
        ...

    @abstractmethod
    def add_labels(self, repo: str, issue_number: int, labels: List[str]) -> None:
        """Add labels to an issue or pull request."""
        ...

    @abstractmethod
    def remove_label(self, repo: str, issue_number: int, label: str) -> None:
        """Remove one label from an issue or pull request."""
        ...

    @abstractmethod
    def create_comment(self, repo: str, issue_number: int, body: str) -> Dict[str, Any]:
        """Post a comment on an issue or pull request."""
        ...

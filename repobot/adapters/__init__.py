"""Git platform adapters."""

from repobot.adapters.base import GitPlatformAdapter, GitPlatformError
from repobot.adapters.github import GitHubAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]

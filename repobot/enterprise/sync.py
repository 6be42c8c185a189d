"""Create a prc-* ref in the enterprise repository for an OSS pull request.

The ref ``refs/heads/prc-<pr>-<source sha>/<source branch>`` points at the
enterprise branch with the same name as the OSS branch, falling back to the
target branch and then to main.
"""

import logging

from repobot.adapters.base import GitPlatformAdapter, GitPlatformError
from repobot.errors import InputValidationError

REF_EXISTS_MESSAGE = "Reference already exists"


class EnterpriseSyncError(Exception):
    """Raised when no branch to sync from exists in the enterprise repo."""

    pass


def sync_ref_name(pr_number: str, source_sha: str, source_branch: str) -> str:
    """Branch name (without refs/heads/) encoding the OSS PR and commit."""
    return f"prc-{pr_number}-{source_sha}/{source_branch}"


class EnterpriseSync:
    """Mirror an OSS PR branch as a namespaced branch in the enterprise repo."""

    def __init__(
        self,
        adapter: GitPlatformAdapter,
        repository: str = "grafana/grafana-enterprise",
        default_branch: str = "main",
        log: logging.Logger | None = None,
    ) -> None:
        self.adapter = adapter
        self.repository = repository
        self.default_branch = default_branch
        self._log = log or logging.getLogger("repobot.enterprise.sync")

    def get_branch_sha(self, branch: str) -> str | None:
        """Head SHA of branch, or None if it cannot be fetched."""
        try:
            data = self.adapter.get_branch(self.repository, branch)
        except GitPlatformError as e:
            self._log.info("Branch %s not found in %s: %s", branch, self.repository, e)
            return None
        return data["commit"]["sha"]

    def resolve_sha(self, source_branch: str, target_branch: str | None = None) -> str:
        """SHA of the first existing branch among source, target and default."""
        candidates = [source_branch]
        if target_branch:
            candidates.append(target_branch)
        candidates.append(self.default_branch)
        for branch in dict.fromkeys(candidates):
            sha = self.get_branch_sha(branch)
            if sha:
                self._log.info("Using %s@%s from %s", branch, sha, self.repository)
                return sha
        raise EnterpriseSyncError(f"error retrieving {self.default_branch} branch")

    def create_or_update_ref(self, branch: str, sha: str) -> None:
        """Create refs/heads/<branch>; force-update it if it already exists."""
        try:
            self.adapter.create_ref(self.repository, f"refs/heads/{branch}", sha)
        except GitPlatformError as e:
            if e.api_message != REF_EXISTS_MESSAGE:
                raise
            self._log.info("Ref %s exists, forcing update to %s", branch, sha)
            self.adapter.update_ref(self.repository, f"heads/{branch}", sha, force=True)

    def run(
        self,
        source_branch: str | None,
        pr_number: str | int | None,
        source_sha: str | None,
        target_branch: str | None = None,
    ) -> str:
        """Sync and return the full ref name.

        Raises:
            InputValidationError: If source branch, PR number or SHA is missing.
            EnterpriseSyncError: If no branch could be resolved.
        """
        if not source_branch:
            raise InputValidationError("Missing source branch")
        if not pr_number:
            raise InputValidationError("Missing OSS PR number")
        if not source_sha:
            raise InputValidationError("Missing OSS source SHA")

        sha = self.resolve_sha(source_branch, target_branch)
        branch = sync_ref_name(str(pr_number), source_sha, source_branch)
        self.create_or_update_ref(branch, sha)
        return f"refs/heads/{branch}"

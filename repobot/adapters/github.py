"""GitHub API adapter."""

from typing import Any, Dict, List
from urllib.parse import quote

import requests

from repobot.adapters.base import GitPlatformAdapter, GitPlatformError


class GitHubAdapter(GitPlatformAdapter):
    """GitHub REST API implementation of GitPlatformAdapter.

    Repositories are addressed as ``owner/repo``.
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str = "https://api.github.com",
    ) -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs: object) -> requests.Response:
        url = f"{self.api_url}{path}"
        resp = self._session.request(method, url, timeout=30, **kwargs)
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                data = resp.json()
                if isinstance(data, dict) and "message" in data:
                    msg = data["message"]
            except ValueError:
                pass
            if resp.status_code == 404:
                raise GitPlatformError(f"Not found: {path}", status_code=404, api_message=msg)
            raise GitPlatformError(
                f"GitHub API error {resp.status_code}: {msg}",
                status_code=resp.status_code,
                api_message=msg,
            )
        return resp

    def get_branch(self, repo: str, branch: str) -> Dict[str, Any]:
        """Fetch a branch by name.

        Args:
            repo: Repository in format owner/repo
            branch: Branch name (may contain slashes)

        Returns:
            Branch dict; the head commit SHA is at ``["commit"]["sha"]``

        Raises:
            GitPlatformError: If the branch does not exist or the call fails
        """
        resp = self._request("GET", f"/repos/{repo}/branches/{quote(branch, safe='')}")
        return resp.json()

    def create_ref(self, repo: str, ref: str, sha: str) -> None:
        self._request("POST", f"/repos/{repo}/git/refs", json={"ref": ref, "sha": sha})

    def update_ref(self, repo: str, ref: str, sha: str, force: bool = False) -> None:
        self._request("PATCH", f"/repos/{repo}/git/refs/{ref}", json={"sha": sha, "force": force})

    def create_pr(self, repo: str, title: str, body: str, head: str, base: str) -> Dict[str, Any]:
        """Create a pull request from head into base."""
        resp = self._request(
            "POST",
            f"/repos/{repo}/pulls",
            json={"title": title, "head": head, "base": base, "body": body or ""},
        )
        return resp.json()

    def set_milestone(self, repo: str, issue_number: int, milestone_number: int) -> None:
        self._request("PATCH", f"/repos/{repo}/issues/{issue_number}", json={"milestone": milestone_number})

    def request_reviewers(self, repo: str, pr_number: int, reviewers: List[str]) -> None:
        self._request(
            "POST",
            f"/repos/{repo}/pulls/{pr_number}/requested_reviewers",
            json={"reviewers": reviewers},
        )

    def remove_requested_reviewers(
        self,
        repo: str,
        pr_number: int,
        reviewers: List[str],
        team_reviewers: List[str] | None = None,
    ) -> None:
        """Remove requested reviewers, e.g. those GitHub added from CODEOWNERS."""
        payload: Dict[str, Any] = {"reviewers": reviewers}
        if team_reviewers:
            payload["team_reviewers"] = team_reviewers
        self._request("DELETE", f"/repos/{repo}/pulls/{pr_number}/requested_reviewers", json=payload)

    def add_labels(self, repo: str, issue_number: int, labels: List[str]) -> None:
        """Add labels (keeps existing ones, unlike a PUT)."""
        self._request("POST", f"/repos/{repo}/issues/{issue_number}/labels", json={"labels": labels})

    def remove_label(self, repo: str, issue_number: int, label: str) -> None:
        self._request("DELETE", f"/repos/{repo}/issues/{issue_number}/labels/{quote(label, safe='')}")

    def create_comment(self, repo: str, issue_number: int, body: str) -> Dict[str, Any]:
        """Post a comment on an issue or pull request."""
        resp = self._request("POST", f"/repos/{repo}/issues/{issue_number}/comments", json={"body": body})
        return resp.json()

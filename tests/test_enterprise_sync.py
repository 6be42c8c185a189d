"""Tests for repobot.enterprise.sync (enterprise branch sync)."""

from unittest.mock import MagicMock

import pytest

from repobot.adapters.base import GitPlatformError
from repobot.enterprise.sync import EnterpriseSync, EnterpriseSyncError, sync_ref_name
from repobot.errors import InputValidationError

REPO = "grafana/grafana-enterprise"


def _adapter(branches: dict[str, str]) -> MagicMock:
    """Adapter whose get_branch knows only the given branch -> sha map."""
    adapter = MagicMock()

    def get_branch(repo: str, branch: str) -> dict:
        if branch not in branches:
            raise GitPlatformError(f"Not found: /repos/{repo}/branches/{branch}", status_code=404)
        return {"name": branch, "commit": {"sha": branches[branch]}}

    adapter.get_branch.side_effect = get_branch
    return adapter


def test_sync_ref_name() -> None:
    assert sync_ref_name("123", "abc", "feature/x") == "prc-123-abc/feature/x"


def test_same_named_branch_is_used() -> None:
    adapter = _adapter({"feature/x": "sha-x", "v9.2.x": "sha-92", "main": "sha-main"})
    ref = EnterpriseSync(adapter).run("feature/x", "123", "abc", target_branch="v9.2.x")
    assert ref == "refs/heads/prc-123-abc/feature/x"
    adapter.create_ref.assert_called_once_with(REPO, "refs/heads/prc-123-abc/feature/x", "sha-x")


def test_falls_back_to_target_branch() -> None:
    adapter = _adapter({"v9.2.x": "sha-92", "main": "sha-main"})
    EnterpriseSync(adapter).run("feature/x", 123, "abc", target_branch="v9.2.x")
    adapter.create_ref.assert_called_once_with(REPO, "refs/heads/prc-123-abc/feature/x", "sha-92")


def test_falls_back_to_main() -> None:
    adapter = _adapter({"main": "sha-main"})
    EnterpriseSync(adapter).run("feature/x", "123", "abc")
    adapter.create_ref.assert_called_once_with(REPO, "refs/heads/prc-123-abc/feature/x", "sha-main")
    assert [c[0][1] for c in adapter.get_branch.call_args_list] == ["feature/x", "main"]


def test_missing_target_falls_back_to_main() -> None:
    adapter = _adapter({"main": "sha-main"})
    EnterpriseSync(adapter).run("feature/x", "123", "abc", target_branch="v9.2.x")
    assert [c[0][1] for c in adapter.get_branch.call_args_list] == ["feature/x", "v9.2.x", "main"]
    assert adapter.create_ref.call_args[0][2] == "sha-main"


def test_no_branch_at_all_raises() -> None:
    adapter = _adapter({})
    with pytest.raises(EnterpriseSyncError, match="main"):
        EnterpriseSync(adapter).run("feature/x", "123", "abc")
    adapter.create_ref.assert_not_called()


def test_existing_ref_is_force_updated() -> None:
    adapter = _adapter({"main": "sha-main"})
    adapter.create_ref.side_effect = GitPlatformError(
        "GitHub API error 422: Reference already exists",
        status_code=422,
        api_message="Reference already exists",
    )
    EnterpriseSync(adapter).run("feature/x", "123", "abc")
    adapter.update_ref.assert_called_once_with(REPO, "heads/prc-123-abc/feature/x", "sha-main", force=True)


def test_other_ref_error_propagates() -> None:
    adapter = _adapter({"main": "sha-main"})
    adapter.create_ref.side_effect = GitPlatformError("GitHub API error 403", status_code=403, api_message="Forbidden")
    with pytest.raises(GitPlatformError):
        EnterpriseSync(adapter).run("feature/x", "123", "abc")
    adapter.update_ref.assert_not_called()


@pytest.mark.parametrize(
    ("source_branch", "pr_number", "source_sha", "message"),
    [
        ("", "1", "abc", "Missing source branch"),
        ("x", "", "abc", "Missing OSS PR number"),
        ("x", "1", None, "Missing OSS source SHA"),
    ],
)
def test_missing_inputs_are_fatal(source_branch: str, pr_number: str, source_sha: str | None, message: str) -> None:
    adapter = _adapter({"main": "sha-main"})
    with pytest.raises(InputValidationError, match=message):
        EnterpriseSync(adapter).run(source_branch, pr_number, source_sha)
    adapter.get_branch.assert_not_called()


def test_custom_repository_and_default_branch() -> None:
    adapter = _adapter({"trunk": "sha-trunk"})
    sync = EnterpriseSync(adapter, repository="acme/private", default_branch="trunk")
    sync.run("feature/x", "1", "abc")
    adapter.create_ref.assert_called_once_with("acme/private", "refs/heads/prc-1-abc/feature/x", "sha-trunk")

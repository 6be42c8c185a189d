"""Local branch operations: clone the source repository, switch branches."""

import base64
import logging
from pathlib import Path

from repobot.services.git._run import _run_git


def _repo_url(server_url: str, owner: str, repo: str) -> str:
    return f"{server_url.rstrip('/')}/{owner}/{repo}.git"


def _auth_header(token: str) -> str:
    """http.extraheader value for token auth; keeps the token out of remote URLs."""
    basic = base64.b64encode(f"x-access-token:{token}".encode()).decode()
    return f"AUTHORIZATION: basic {basic}"


def clone_repo(
    owner: str,
    repo: str,
    workspace: Path,
    token: str | None = None,
    bot_name: str = "github-actions[bot]",
    bot_email: str = "github-actions[bot]@users.noreply.github.com",
    server_url: str = "https://github.com",
    timeout: int = 300,
    log: logging.Logger | None = None,
) -> Path:
    """Clone owner/repo into workspace/repo (or fetch if already cloned) and
    set the bot identity used for cherry-pick commits.

    The token is stored as a local http.extraheader so later fetch and push
    calls authenticate without it appearing in the remote URL.

    Returns:
        Path of the checkout.
    """
    repo_dir = Path(workspace) / repo
    if (repo_dir / ".git").is_dir():
        if token:
            _run_git(["config", "--local", "http.extraheader", _auth_header(token)], cwd=repo_dir, log=log)
        _run_git(["fetch", "origin"], cwd=repo_dir, log=log, timeout=timeout)
        if log:
            log.info("Fetched %s/%s in %s", owner, repo, repo_dir)
    else:
        Path(workspace).mkdir(parents=True, exist_ok=True)
        url = _repo_url(server_url, owner, repo)
        auth = ["-c", f"http.extraheader={_auth_header(token)}"] if token else []
        _run_git(auth + ["clone", url, repo], cwd=Path(workspace), log=log, timeout=timeout)
        if token:
            _run_git(["config", "--local", "http.extraheader", _auth_header(token)], cwd=repo_dir, log=log)
        if log:
            log.info("Cloned %s/%s into %s", owner, repo, repo_dir)
    _run_git(["config", "user.name", bot_name], cwd=repo_dir, log=log)
    _run_git(["config", "user.email", bot_email], cwd=repo_dir, log=log)
    return repo_dir


def switch_branch(
    branch_name: str,
    repo_dir: Path | None = None,
    start_point: str | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Switch to a branch. With start_point the local branch is (re)created
    there, e.g. origin/<branch> to start from the fetched remote tip."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    if start_point:
        _run_git(["switch", "--force-create", branch_name, start_point], cwd=cwd, log=log)
    else:
        _run_git(["switch", branch_name], cwd=cwd, log=log)
    if log:
        log.info("Switched to branch %s", branch_name)


def create_and_switch_branch(
    branch_name: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Create a new local branch from HEAD and switch to it."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["switch", "--create", branch_name], cwd=cwd, log=log)
    if log:
        log.info("Created branch %s", branch_name)

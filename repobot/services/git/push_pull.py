"""Push to remote (origin)."""

import logging
from pathlib import Path

from repobot.services.git._run import _run_git


def push_branch(
    branch_name: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
    timeout: int = 300,
) -> None:
    """Push the given branch to origin and set it as upstream."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["push", "--set-upstream", "origin", branch_name], cwd=cwd, log=log, timeout=timeout)
    if log:
        log.info("Pushed branch %s to origin", branch_name)

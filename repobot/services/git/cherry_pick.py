"""Cherry-pick a commit and inspect or finish a conflicted cherry-pick."""

import logging
from pathlib import Path

from repobot.services.git._run import _run_git


def cherry_pick(
    commit: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Cherry-pick commit with a "(cherry picked from commit ...)" line."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["cherry-pick", "-x", commit], cwd=cwd, log=log)
    if log:
        log.info("Cherry-picked %s", commit)


def abort_cherry_pick(repo_dir: Path | None = None, log: logging.Logger | None = None) -> None:
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["cherry-pick", "--abort"], cwd=cwd, log=log)
    if log:
        log.info("Aborted cherry-pick")


def continue_cherry_pick(repo_dir: Path | None = None, log: logging.Logger | None = None) -> None:
    """Continue a cherry-pick without opening the commit message editor."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["-c", "core.editor=true", "cherry-pick", "--continue"], cwd=cwd, log=log)


def conflicted_files(repo_dir: Path | None = None, log: logging.Logger | None = None) -> list[str]:
    """Return paths in an unmerged state."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    out = _run_git(["diff", "--name-only", "--diff-filter=U"], cwd=cwd, log=log)
    return [line.strip() for line in out.splitlines() if line.strip()]


def add_paths(paths: list[str], repo_dir: Path | None = None, log: logging.Logger | None = None) -> None:
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["add", "--"] + list(paths), cwd=cwd, log=log)

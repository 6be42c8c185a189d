"""Git operations: clone, branches, cherry-pick, push."""

from repobot.services.git._run import GitRunnerError
from repobot.services.git.branches import clone_repo, create_and_switch_branch, switch_branch
from repobot.services.git.cherry_pick import (
    abort_cherry_pick,
    add_paths,
    cherry_pick,
    conflicted_files,
    continue_cherry_pick,
)
from repobot.services.git.push_pull import push_branch

__all__ = [
    "GitRunnerError",
    "abort_cherry_pick",
    "add_paths",
    "cherry_pick",
    "clone_repo",
    "conflicted_files",
    "continue_cherry_pick",
    "create_and_switch_branch",
    "push_branch",
    "switch_branch",
]

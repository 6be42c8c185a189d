"""Backport a merged pull request to the branches named by its labels.

For each ``backport <base> [<head>]`` label: switch to base, create head,
cherry-pick the merge commit (auto-fixing known conflicts), push, open a
PR and copy milestone, reviewer and labels onto it. Failures are reported
on the original PR and do not stop the remaining branches.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence

from repobot.adapters.base import GitPlatformAdapter, GitPlatformError
from repobot.backport.labels import (
    MISSING_LABELS,
    check_authorization,
    is_relevant_label_event,
    matched_approval_labels,
    resolve_backport_map,
)
from repobot.backport.templates import backport_body, failed_backport_comment_body, render_title
from repobot.config import DEFAULT_APPROVAL_LABELS, DEFAULT_TITLE_TEMPLATE
from repobot.errors import InputValidationError
from repobot.logging import log_group
from repobot.models import BackportAttempt, BackportEvent, BackportState
from repobot.services.conflicts import DEFAULT_RESOLVERS, ConflictResolver, find_resolver
from repobot.services.git import (
    GitRunnerError,
    abort_cherry_pick,
    cherry_pick,
    conflicted_files,
    create_and_switch_branch,
    push_branch,
    switch_branch,
)

BACKPORT_FAILED = "backport-failed"

# Returns the path of the prepared checkout
PrepareRepo = Callable[[], Path]


def _dedupe(labels: Iterable[str]) -> List[str]:
    out: List[str] = []
    for name in labels:
        if name not in out:
            out.append(name)
    return out


def _abort(repo_dir: Path, log: logging.Logger) -> None:
    """Abort the cherry-pick; a failing abort is logged so the original error
    is the one reported."""
    try:
        abort_cherry_pick(repo_dir=repo_dir, log=log)
    except GitRunnerError as e:
        log.warning("Could not abort cherry-pick: %s", e)


def _cherry_pick_with_resolvers(
    attempt: BackportAttempt,
    repo_dir: Path,
    resolvers: Sequence[ConflictResolver],
    log: logging.Logger,
) -> None:
    """Cherry-pick attempt.commit; on conflict try one resolver, else abort
    and re-raise."""
    attempt.state = BackportState.CHERRY_PICKING
    try:
        cherry_pick(attempt.commit, repo_dir=repo_dir, log=log)
        return
    except GitRunnerError as pick_error:
        try:
            resolver = find_resolver(conflicted_files(repo_dir=repo_dir, log=log), resolvers)
        except GitRunnerError:
            resolver = None
        if resolver is None:
            _abort(repo_dir, log)
            raise pick_error
    attempt.state = BackportState.AUTO_FIXING
    log.info("Resolving %s conflict on %s", resolver.name, attempt.head)
    try:
        resolver.resolve(repo_dir, log=log)
    except Exception:
        _abort(repo_dir, log)
        raise
    attempt.resolved_by = resolver.name


def backport_once(
    adapter: GitPlatformAdapter,
    event: BackportEvent,
    attempt: BackportAttempt,
    repo_dir: Path,
    title: str,
    labels_to_add: Sequence[str],
    resolvers: Sequence[ConflictResolver] = DEFAULT_RESOLVERS,
    push_timeout: int = 300,
    log: logging.Logger | None = None,
) -> BackportAttempt:
    """Run one backport to attempt.base on attempt.head; raises on failure."""
    logger = log or logging.getLogger("repobot.backport.runner")
    repo = event.full_name

    switch_branch(attempt.base, repo_dir=repo_dir, start_point=f"origin/{attempt.base}", log=logger)
    create_and_switch_branch(attempt.head, repo_dir=repo_dir, log=logger)
    _cherry_pick_with_resolvers(attempt, repo_dir, resolvers, logger)

    attempt.state = BackportState.PUSHING
    push_branch(attempt.head, repo_dir=repo_dir, log=logger, timeout=push_timeout)
    pr = adapter.create_pr(
        repo,
        title=title,
        body=backport_body(attempt.commit, event.pr_number),
        head=attempt.head,
        base=attempt.base,
    )
    pr_number = int(pr["number"])
    attempt.pr_number = pr_number
    logger.info("Opened #%s for %s -> %s", pr_number, attempt.head, attempt.base)

    if event.milestone is not None:
        adapter.set_milestone(repo, pr_number, event.milestone.number)

    # Reviewers GitHub assigned from CODEOWNERS
    users = [u["login"] for u in pr.get("requested_reviewers") or [] if u.get("login")]
    teams = [t["slug"] for t in pr.get("requested_teams") or [] if t.get("slug")]
    if users or teams:
        adapter.remove_requested_reviewers(repo, pr_number, users, teams)
    if event.merged_by:
        adapter.request_reviewers(repo, pr_number, [event.merged_by])

    if labels_to_add:
        adapter.add_labels(repo, pr_number, list(labels_to_add))

    attempt.state = BackportState.PR_CREATED
    return attempt


def report_failure(
    adapter: GitPlatformAdapter,
    event: BackportEvent,
    attempt: BackportAttempt,
    error: Exception,
    failed_label: str = BACKPORT_FAILED,
    log: logging.Logger | None = None,
) -> None:
    """Comment the error and manual recipe on the original PR and label it."""
    logger = log or logging.getLogger("repobot.backport.runner")
    message = str(error) or "Unknown error while backporting"
    attempt.state = BackportState.FAILED
    attempt.error = message
    logger.error("Backport of #%s to %s failed: %s", event.pr_number, attempt.base, message)
    adapter.create_comment(
        event.full_name,
        event.pr_number,
        failed_backport_comment_body(attempt.base, attempt.head, attempt.commit, message),
    )
    adapter.add_labels(event.full_name, event.pr_number, [failed_label])


def backport(
    adapter: GitPlatformAdapter,
    event: BackportEvent,
    prepare_repo: PrepareRepo,
    title_template: str = DEFAULT_TITLE_TEMPLATE,
    labels_to_add: Sequence[str] = (),
    approval_labels: Sequence[str] = DEFAULT_APPROVAL_LABELS,
    missing_label: str = MISSING_LABELS,
    failed_label: str = BACKPORT_FAILED,
    resolvers: Sequence[ConflictResolver] = DEFAULT_RESOLVERS,
    push_timeout: int = 300,
    log: logging.Logger | None = None,
) -> List[BackportAttempt]:
    """Handle a pull_request event: authorize, resolve labels, backport each
    branch in turn.

    prepare_repo is called at most once, before the first branch, and
    returns the checkout shared by all branches.

    Returns:
        One attempt per target branch; empty if nothing was backported.

    Raises:
        InputValidationError: If the PR is merged with backport labels but
            the payload has no merge commit SHA.
    """
    logger = log or logging.getLogger("repobot.backport.runner")
    logger.info("Payload action: %s", event.action)

    if not is_relevant_label_event(event, approval_labels):
        return []
    if not check_authorization(adapter, event, approval_labels, missing_label, log=logger):
        return []
    if not event.merged:
        logger.info("PR #%s not merged", event.pr_number)
        return []

    base_to_head: Dict[str, str] = resolve_backport_map(event.action, event.label, event.labels, event.pr_number)
    if not base_to_head:
        return []
    if not event.merge_commit_sha:
        raise InputValidationError(f"PR #{event.pr_number} is merged but has no merge commit SHA")

    commit = event.merge_commit_sha
    labels = _dedupe(list(matched_approval_labels(event.labels, approval_labels)) + list(labels_to_add))
    logger.info("Backporting %s from #%s to %s", commit, event.pr_number, ", ".join(base_to_head))

    attempts = [BackportAttempt(base=base, head=head, commit=commit) for base, head in base_to_head.items()]
    repo_dir: Path | None = None
    prepare_error: Exception | None = None
    for attempt in attempts:
        with log_group(f"Backporting to {attempt.base} on {attempt.head}"):
            try:
                if repo_dir is None:
                    if prepare_error is not None:
                        raise prepare_error
                    try:
                        repo_dir = prepare_repo()
                    except Exception as e:
                        prepare_error = e
                        raise
                backport_once(
                    adapter,
                    event,
                    attempt,
                    repo_dir,
                    title=render_title(title_template, attempt.base, event.title),
                    labels_to_add=labels,
                    resolvers=resolvers,
                    push_timeout=push_timeout,
                    log=logger,
                )
            except Exception as e:
                try:
                    report_failure(adapter, event, attempt, e, failed_label=failed_label, log=logger)
                except GitPlatformError as report_error:
                    logger.exception("Could not report failed backport to %s: %s", attempt.base, report_error)
    return attempts

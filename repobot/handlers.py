"""Handle GitHub events delivered to the action (pull_request).

Parses the payload and delegates to the backport runner.
"""

import logging
from functools import partial
from pathlib import Path
from typing import Any, Dict, List

from repobot.adapters.base import GitPlatformAdapter
from repobot.adapters.github import GitHubAdapter
from repobot.backport.runner import backport
from repobot.config import AppConfig
from repobot.errors import InputValidationError
from repobot.models import BackportAttempt, BackportEvent
from repobot.services.conflicts import BettererResultsResolver
from repobot.services.git import clone_repo


def make_adapter(config: AppConfig) -> GitHubAdapter:
    return GitHubAdapter(token=config.github_token_resolved, api_url=config.github.api_url)


def _handle_pull_request(
    config: AppConfig,
    payload: Dict[str, Any],
    adapter: GitPlatformAdapter,
    log: logging.Logger,
) -> List[BackportAttempt]:
    try:
        event = BackportEvent.from_payload(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise InputValidationError(f"Invalid pull_request payload: {e}") from e

    prepare_repo = partial(
        clone_repo,
        event.owner,
        event.repo,
        Path(config.bot.workspace),
        token=config.github_token_resolved,
        bot_name=config.bot.name,
        bot_email=config.bot.email,
        server_url=config.github.server_url,
        timeout=config.backport.git_timeout,
        log=log,
    )
    resolvers = (
        BettererResultsResolver(
            command=config.backport.lint_debt_command,
            timeout=config.backport.lint_debt_timeout,
        ),
    )
    return backport(
        adapter,
        event,
        prepare_repo,
        title_template=config.title_template,
        labels_to_add=config.labels_to_add,
        approval_labels=config.backport.approval_labels,
        missing_label=config.backport.missing_labels_label,
        failed_label=config.backport.failed_label,
        resolvers=resolvers,
        push_timeout=config.backport.git_timeout,
        log=log,
    )


def handle_github_event(
    config: AppConfig,
    event: str,
    payload: Dict[str, Any],
    adapter: GitPlatformAdapter | None = None,
    log: logging.Logger | None = None,
) -> List[BackportAttempt]:
    """Handle a GitHub event for the backport action.

    Supported events:
    - pull_request and pull_request_target (action=closed or labeled): backport.
    Other events are ignored.
    """
    logger = log or logging.getLogger("repobot.handlers")
    if event not in ("pull_request", "pull_request_target"):
        logger.info("Ignoring %s event", event)
        return []
    if not payload.get("pull_request"):
        raise InputValidationError("pull_request payload missing 'pull_request'")
    return _handle_pull_request(config, payload, adapter or make_adapter(config), logger)

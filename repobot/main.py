"""Repobot entry point.

Two actions: backport (pull_request event from GITHUB_EVENT_PATH) and
enterprise-check (inputs source_branch, pr_number, source_sha,
target_branch). Usage: repobot backport | repobot enterprise-check.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

from repobot.config import AppConfig, load_config
from repobot.enterprise.sync import EnterpriseSync
from repobot.errors import InputValidationError
from repobot.handlers import handle_github_event, make_adapter
from repobot.logging import RepobotLogging

SUBCOMMANDS = ("backport", "enterprise-check")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI with optional subcommand (backport | enterprise-check)."""
    argv = argv if argv is not None else sys.argv[1:]
    sub = "backport"
    rest = list(argv)
    if argv and not argv[0].startswith("-") and argv[0] in SUBCOMMANDS:
        sub = argv[0]
        rest = argv[1:]

    parser = argparse.ArgumentParser(
        prog="repobot",
        description="Repobot - backport merged PRs or sync branches to the enterprise repo",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("repobot.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    parser.add_argument(
        "--event-path",
        type=Path,
        default=None,
        help="Webhook payload JSON (default: $GITHUB_EVENT_PATH)",
    )
    parser.add_argument(
        "--event-name",
        default=None,
        help="Webhook event name (default: $GITHUB_EVENT_NAME)",
    )
    parsed = parser.parse_args(rest)
    parsed.subcommand = sub
    return parsed


def load_event_payload(event_path: Path | None) -> Dict[str, Any]:
    path = event_path or (Path(os.environ["GITHUB_EVENT_PATH"]) if os.environ.get("GITHUB_EVENT_PATH") else None)
    if path is None:
        raise InputValidationError("No event payload: pass --event-path or set GITHUB_EVENT_PATH")
    try:
        return json.loads(path.read_text())
    except (OSError, ValueError) as e:
        raise InputValidationError(f"Cannot read event payload {path}: {e}") from e


def run_backport(config: AppConfig, args: argparse.Namespace, log: logging.Logger) -> int:
    event_name = args.event_name or os.environ.get("GITHUB_EVENT_NAME", "pull_request")
    payload = load_event_payload(args.event_path)
    attempts = handle_github_event(config, event_name, payload, log=log)
    for attempt in attempts:
        log.info("%s -> %s: %s", attempt.head, attempt.base, attempt.outcome.value if attempt.outcome else "-")
    return 0


def run_enterprise_check(config: AppConfig, log: logging.Logger) -> int:
    inputs = config.inputs
    sync = EnterpriseSync(
        make_adapter(config),
        repository=config.enterprise.repository,
        default_branch=config.enterprise.default_branch,
        log=log,
    )
    ref = sync.run(
        inputs.source_branch,
        inputs.pr_number,
        inputs.source_sha,
        target_branch=inputs.target_branch or None,
    )
    log.info("Synced %s in %s", ref, config.enterprise.repository)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch to backport or enterprise-check."""
    args = parse_args(argv)
    config = load_config(args.config)

    if args.check:
        print("Config OK:", config.enterprise.repository, config.title_template)
        return 0

    RepobotLogging(config.logging).setup()
    log = logging.getLogger(f"repobot.{args.subcommand.replace('-', '_')}")
    try:
        if args.subcommand == "enterprise-check":
            return run_enterprise_check(config, log)
        return run_backport(config, args, log)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())

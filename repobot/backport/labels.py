"""Backport label parsing and authorization.

A backport label reads ``backport <base>`` or ``backport <base> <head>``.
Approval labels (type/bug, type/docs, product-approved) must be present
alongside it for the backport to run.
"""

import logging
import re
from typing import Dict, Iterable, List, NamedTuple, Sequence

from repobot.adapters.base import GitPlatformAdapter
from repobot.backport.templates import missing_labels_comment_body
from repobot.config import DEFAULT_APPROVAL_LABELS
from repobot.models import BackportEvent

MISSING_LABELS = "missing-labels"

_LABEL_RE = re.compile(r"backport ([^ ]+)(?: ([^ ]+))?$")


class BackportLabel(NamedTuple):
    """Parsed backport label."""

    base: str
    head: str | None = None

    def head_for(self, pr_number: int) -> str:
        """Explicit head, or backport-<pr>-to-<base>."""
        return self.head or f"backport-{pr_number}-to-{self.base}"


def parse_backport_label(name: str) -> BackportLabel | None:
    """Parse a label name; None if it is not a backport label."""
    match = _LABEL_RE.search(name)
    if match is None:
        return None
    return BackportLabel(base=match.group(1), head=match.group(2))


def label_names_for_action(action: str, label: str | None, labels: Sequence[str]) -> List[str]:
    """Labels to consider: all of them when closed, the added one when labeled."""
    if action == "closed":
        return list(labels)
    if action == "labeled":
        return [label] if label else []
    return []


def resolve_backport_map(
    action: str,
    label: str | None,
    labels: Sequence[str],
    pr_number: int,
) -> Dict[str, str]:
    """Map base branch -> head branch; the last label for a base wins."""
    base_to_head: Dict[str, str] = {}
    for name in label_names_for_action(action, label, labels):
        parsed = parse_backport_label(name)
        if parsed is not None:
            base_to_head[parsed.base] = parsed.head_for(pr_number)
    return base_to_head


def matched_approval_labels(
    labels: Iterable[str],
    approval_labels: Sequence[str] = DEFAULT_APPROVAL_LABELS,
) -> List[str]:
    matched: List[str] = []
    for name in labels:
        if name in approval_labels and name not in matched:
            matched.append(name)
    return matched


def has_backport_intent(labels: Iterable[str]) -> bool:
    return any(parse_backport_label(name) is not None for name in labels)


def is_relevant_label_event(
    event: BackportEvent,
    approval_labels: Sequence[str] = DEFAULT_APPROVAL_LABELS,
) -> bool:
    """Closed events are always processed; any other action only when its
    label is a backport or approval label."""
    if event.action == "closed":
        return True
    name = event.label or ""
    return parse_backport_label(name) is not None or name in approval_labels


def check_authorization(
    adapter: GitPlatformAdapter,
    event: BackportEvent,
    approval_labels: Sequence[str] = DEFAULT_APPROVAL_LABELS,
    missing_label: str = MISSING_LABELS,
    log: logging.Logger | None = None,
) -> bool:
    """Enforce that backport labels come with an approval label.

    Unapproved: comment to the sender and add the missing-labels marker.
    Approved after being flagged: remove the marker. A PR that is already
    flagged is not commented on again and is let through.

    Returns:
        False if the PR asks for a backport without approval and was not
        flagged yet.
    """
    logger = log or logging.getLogger("repobot.backport.labels")
    if not has_backport_intent(event.labels):
        return True
    approved = matched_approval_labels(event.labels, approval_labels)
    flagged = missing_label in event.labels
    if approved:
        if flagged:
            adapter.remove_label(event.full_name, event.pr_number, missing_label)
            logger.info("#%s is now approved, removed %s", event.pr_number, missing_label)
        return True
    if flagged:
        logger.info("#%s lacks approval labels but is already flagged with %s", event.pr_number, missing_label)
        return True
    logger.info(
        "#%s intended to be backported but not labeled properly. Labels: %s, author: %s",
        event.pr_number,
        ", ".join(event.labels),
        event.sender,
    )
    adapter.create_comment(event.full_name, event.pr_number, missing_labels_comment_body(event.sender))
    adapter.add_labels(event.full_name, event.pr_number, [missing_label])
    return False

"""Data models for backport events and per-branch attempts (Pydantic)."""

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict


class Milestone(BaseModel):
    """Milestone attached to the original pull request."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    number: int
    title: str = ""


class BackportEvent(BaseModel):
    """Immutable snapshot of a pull_request webhook payload."""

    model_config = ConfigDict(frozen=True)

    action: str
    label: str | None = None
    labels: tuple[str, ...] = ()
    merged: bool = False
    merge_commit_sha: str | None = None
    pr_number: int
    title: str = ""
    milestone: Milestone | None = None
    merged_by: str | None = None
    sender: str = ""
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "BackportEvent":
        """Build the event from a GitHub pull_request webhook payload.

        Raises KeyError/TypeError if the payload has no pull_request number
        or repository; callers turn these into input validation errors.
        """
        pull = payload["pull_request"]
        repository = payload["repository"]
        label = payload.get("label") or {}
        milestone = pull.get("milestone")
        merged_by = pull.get("merged_by") or {}
        sender = payload.get("sender") or {}
        labels: List[str] = [
            lb["name"] for lb in (pull.get("labels") or []) if isinstance(lb, dict) and "name" in lb
        ]
        return cls(
            action=payload.get("action") or "",
            label=label.get("name") if isinstance(label.get("name"), str) else None,
            labels=tuple(labels),
            merged=bool(pull.get("merged")),
            merge_commit_sha=pull.get("merge_commit_sha"),
            pr_number=int(pull["number"]),
            title=pull.get("title") or "",
            milestone=Milestone(**milestone) if milestone else None,
            merged_by=merged_by.get("login"),
            sender=sender.get("login", ""),
            owner=repository["owner"]["login"],
            repo=repository["name"],
        )


class BackportState(str, Enum):
    PENDING = "pending"
    CHERRY_PICKING = "cherry_picking"
    AUTO_FIXING = "auto_fixing"
    PUSHING = "pushing"
    PR_CREATED = "pr_created"
    FAILED = "failed"


class BackportOutcome(str, Enum):
    SUCCESS = "success"
    CONFLICT_RESOLVED = "conflict_resolved"
    FAILED = "failed"


class BackportAttempt(BaseModel):
    """One (base, head) backport and what became of it."""

    base: str
    head: str
    commit: str
    state: BackportState = BackportState.PENDING
    pr_number: int | None = None
    resolved_by: str | None = None
    error: str | None = None

    @property
    def outcome(self) -> BackportOutcome | None:
        """Terminal outcome, or None while the attempt is still running."""
        if self.state == BackportState.FAILED:
            return BackportOutcome.FAILED
        if self.state != BackportState.PR_CREATED:
            return None
        if self.resolved_by:
            return BackportOutcome.CONFLICT_RESOLVED
        return BackportOutcome.SUCCESS

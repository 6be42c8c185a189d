"""Tests for repobot.models (event snapshot, attempt outcome)."""

import pytest
from pydantic import ValidationError

from repobot.models import BackportAttempt, BackportEvent, BackportOutcome, BackportState


def _payload(**pull: object) -> dict:
    pull_request = {
        "number": 42,
        "title": "Fix panel",
        "merged": True,
        "merge_commit_sha": "abc123",
        "labels": [{"name": "backport v9.2.x"}, {"name": "type/bug"}],
        "milestone": {"id": 9, "number": 3, "title": "9.2.1", "state": "open"},
        "merged_by": {"login": "merger"},
    }
    pull_request.update(pull)
    return {
        "action": "closed",
        "pull_request": pull_request,
        "repository": {"name": "grafana", "owner": {"login": "grafana"}, "full_name": "grafana/grafana"},
        "sender": {"login": "octocat"},
    }


def test_from_payload_closed() -> None:
    event = BackportEvent.from_payload(_payload())
    assert event.action == "closed"
    assert event.label is None
    assert event.labels == ("backport v9.2.x", "type/bug")
    assert event.merged is True
    assert event.merge_commit_sha == "abc123"
    assert event.pr_number == 42
    assert event.milestone is not None and event.milestone.number == 3
    assert event.merged_by == "merger"
    assert event.sender == "octocat"
    assert event.full_name == "grafana/grafana"


def test_from_payload_labeled_without_optional_fields() -> None:
    payload = _payload(milestone=None, merged_by=None, merge_commit_sha=None, merged=False)
    payload["action"] = "labeled"
    payload["label"] = {"name": "backport v9.1.x"}
    event = BackportEvent.from_payload(payload)
    assert event.label == "backport v9.1.x"
    assert event.milestone is None
    assert event.merged_by is None
    assert event.merge_commit_sha is None
    assert event.merged is False


def test_from_payload_missing_pull_request() -> None:
    with pytest.raises(KeyError):
        BackportEvent.from_payload({"action": "closed", "repository": {}})


def test_event_is_frozen() -> None:
    event = BackportEvent.from_payload(_payload())
    with pytest.raises(ValidationError):
        event.merged = False


@pytest.mark.parametrize(
    ("state", "resolved_by", "expected"),
    [
        (BackportState.PENDING, None, None),
        (BackportState.PUSHING, None, None),
        (BackportState.PR_CREATED, None, BackportOutcome.SUCCESS),
        (BackportState.PR_CREATED, "betterer", BackportOutcome.CONFLICT_RESOLVED),
        (BackportState.FAILED, "betterer", BackportOutcome.FAILED),
    ],
)
def test_attempt_outcome(state: BackportState, resolved_by: str | None, expected: BackportOutcome | None) -> None:
    attempt = BackportAttempt(base="v9.2.x", head="h", commit="abc", state=state, resolved_by=resolved_by)
    assert attempt.outcome == expected

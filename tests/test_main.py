"""Tests for repobot.main (CLI dispatch and exit codes)."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from repobot.errors import InputValidationError
from repobot.main import load_event_payload, main, parse_args
from repobot.models import BackportAttempt, BackportState


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in [
        "GITHUB_EVENT_PATH",
        "GITHUB_EVENT_NAME",
        "INPUT_SOURCE_BRANCH",
        "INPUT_PR_NUMBER",
        "INPUT_SOURCE_SHA",
        "INPUT_TARGET_BRANCH",
    ]:
        monkeypatch.delenv(key, raising=False)


def test_parse_args_default_subcommand() -> None:
    args = parse_args(["--event-path", "e.json"])
    assert args.subcommand == "backport"
    assert args.event_path == Path("e.json")


def test_parse_args_enterprise_check() -> None:
    args = parse_args(["enterprise-check", "-c", "x.yaml"])
    assert args.subcommand == "enterprise-check"
    assert args.config == Path("x.yaml")


def test_load_event_payload_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "event.json"
    path.write_text(json.dumps({"action": "closed"}))
    monkeypatch.setenv("GITHUB_EVENT_PATH", str(path))
    assert load_event_payload(None) == {"action": "closed"}


def test_load_event_payload_missing() -> None:
    with pytest.raises(InputValidationError):
        load_event_payload(None)


def test_load_event_payload_bad_json(tmp_path: Path) -> None:
    path = tmp_path / "event.json"
    path.write_text("{not json")
    with pytest.raises(InputValidationError):
        load_event_payload(path)


def test_backport_dispatch(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "event.json"
    path.write_text(json.dumps({"action": "closed", "pull_request": {"number": 1}}))
    monkeypatch.setenv("GITHUB_EVENT_NAME", "pull_request")
    attempt = BackportAttempt(base="v9.2.x", head="h", commit="abc", state=BackportState.PR_CREATED)
    with patch("repobot.main.handle_github_event", return_value=[attempt]) as mock_handle:
        code = main(["backport", "-c", str(tmp_path / "none.yaml"), "--event-path", str(path)])
    assert code == 0
    args = mock_handle.call_args[0]
    assert args[1] == "pull_request"
    assert args[2] == {"action": "closed", "pull_request": {"number": 1}}


def test_backport_fatal_error_exits_1(tmp_path: Path) -> None:
    code = main(["backport", "-c", str(tmp_path / "none.yaml")])
    assert code == 1


def test_enterprise_check_dispatch(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_SOURCE_BRANCH", "feature/x")
    monkeypatch.setenv("INPUT_PR_NUMBER", "123")
    monkeypatch.setenv("INPUT_SOURCE_SHA", "abc")
    monkeypatch.setenv("INPUT_TARGET_BRANCH", "")
    sync = MagicMock()
    sync.run.return_value = "refs/heads/prc-123-abc/feature/x"
    with patch("repobot.main.EnterpriseSync", return_value=sync):
        code = main(["enterprise-check", "-c", str(tmp_path / "none.yaml")])
    assert code == 0
    sync.run.assert_called_once_with("feature/x", "123", "abc", target_branch=None)


def test_enterprise_check_missing_input_exits_1(tmp_path: Path) -> None:
    with patch("repobot.main.make_adapter", return_value=MagicMock()):
        code = main(["enterprise-check", "-c", str(tmp_path / "none.yaml")])
    assert code == 1


def test_check_only(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--check", "-c", str(tmp_path / "none.yaml")]) == 0
    assert "Config OK" in capsys.readouterr().out

"""Tests for repobot.handlers (event dispatch to the backport runner)."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from repobot.config import AppConfig, BackportConfig, BotConfig
from repobot.errors import InputValidationError
from repobot.handlers import handle_github_event
from repobot.services.conflicts import BettererResultsResolver


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        bot=BotConfig(workspace=str(tmp_path)),
        backport=BackportConfig(labels_to_add=["backport"], lint_debt_command=["yarn", "betterer", "-u"]),
    )


def _payload() -> dict:
    return {
        "action": "closed",
        "pull_request": {
            "number": 7,
            "title": "Fix",
            "merged": True,
            "merge_commit_sha": "abc",
            "labels": [{"name": "backport v9.2.x"}, {"name": "type/bug"}],
        },
        "repository": {"name": "grafana", "owner": {"login": "grafana"}},
        "sender": {"login": "octocat"},
    }


def test_pull_request_event_runs_backport(config: AppConfig, tmp_path: Path) -> None:
    adapter = MagicMock()
    with patch("repobot.handlers.backport", return_value=[]) as mock_backport:
        handle_github_event(config, "pull_request", _payload(), adapter=adapter)
    mock_backport.assert_called_once()
    args, kwargs = mock_backport.call_args
    assert args[0] is adapter
    assert args[1].pr_number == 7
    assert kwargs["labels_to_add"] == ["backport"]
    assert kwargs["title_template"] == config.title_template
    (resolver,) = kwargs["resolvers"]
    assert isinstance(resolver, BettererResultsResolver)
    assert resolver.command == ["yarn", "betterer", "-u"]


def test_prepare_repo_clones_into_workspace(config: AppConfig, tmp_path: Path) -> None:
    with (
        patch("repobot.handlers.backport", return_value=[]) as mock_backport,
        patch("repobot.handlers.clone_repo", return_value=tmp_path / "grafana") as mock_clone,
    ):
        handle_github_event(config, "pull_request", _payload(), adapter=MagicMock())
        prepare_repo = mock_backport.call_args[0][2]
        assert prepare_repo() == tmp_path / "grafana"
    args, kwargs = mock_clone.call_args
    assert args == ("grafana", "grafana", tmp_path)
    assert kwargs["bot_name"] == config.bot.name


def test_other_events_ignored(config: AppConfig) -> None:
    with patch("repobot.handlers.backport") as mock_backport:
        assert handle_github_event(config, "push", {}, adapter=MagicMock()) == []
    mock_backport.assert_not_called()


def test_missing_pull_request_is_invalid(config: AppConfig) -> None:
    with pytest.raises(InputValidationError):
        handle_github_event(config, "pull_request", {"action": "closed"}, adapter=MagicMock())


def test_malformed_payload_is_invalid(config: AppConfig) -> None:
    payload = _payload()
    del payload["repository"]
    with pytest.raises(InputValidationError):
        handle_github_event(config, "pull_request", payload, adapter=MagicMock())

"""Configuration loading from YAML, environment and GitHub Actions inputs.

Secrets (tokens) are taken from action inputs, environment variables or
from files (Docker secrets). Never put real tokens in config files
committed to the repo.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TITLE_TEMPLATE = "[Backport {{base}}] {{originalTitle}}"
DEFAULT_APPROVAL_LABELS = ["type/docs", "type/bug", "product-approved"]


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so token resolution can read env/file
_current_env: dict[str, str] = {}


class BotConfig(BaseSettings):
    """Bot git identity and local workspace."""

    model_config = SettingsConfigDict(env_prefix="BOT_", extra="ignore")

    name: str = Field(default="github-actions[bot]", description="git user.name for cherry-picks")
    email: str = Field(
        default="github-actions[bot]@users.noreply.github.com",
        description="git user.email for cherry-picks",
    )
    workspace: str = Field(default=".", description="Directory the source repository is cloned into")


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    server_url: str = Field(default="https://github.com", description="Git server URL used for cloning")


class BackportConfig(BaseSettings):
    """Backport action settings."""

    model_config = SettingsConfigDict(env_prefix="BACKPORT_", extra="ignore")

    title_template: str = Field(
        default=DEFAULT_TITLE_TEMPLATE,
        description="Backport PR title; supports {{base}} and {{originalTitle}}",
    )
    labels_to_add: list[str] = Field(default_factory=list, description="Labels added to every backport PR")
    approval_labels: list[str] = Field(
        default_factory=lambda: list(DEFAULT_APPROVAL_LABELS),
        description="Labels authorizing a backport",
    )
    missing_labels_label: str = Field(default="missing-labels", description="Marker for unapproved backports")
    failed_label: str = Field(default="backport-failed", description="Label added when a backport fails")
    lint_debt_command: list[str] = Field(
        default_factory=lambda: ["npx", "betterer", "--update"],
        description="Command regenerating .betterer.results",
    )
    lint_debt_timeout: int = Field(default=600, ge=1, description="Lint-debt tool timeout in seconds")
    git_timeout: int = Field(default=300, ge=1, description="Timeout for clone, fetch and push in seconds")


class EnterpriseConfig(BaseSettings):
    """Private counterpart repository for branch sync."""

    model_config = SettingsConfigDict(env_prefix="ENTERPRISE_", extra="ignore")

    repository: str = Field(default="grafana/grafana-enterprise", description="owner/repo of the private repo")
    default_branch: str = Field(default="main", description="Last-resort branch to sync from")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    annotations: bool | None = Field(
        default=None,
        description="Emit ::warning::/::error:: workflow commands; default: on when GITHUB_ACTIONS=true",
    )


class ActionInputs(BaseSettings):
    """GitHub Actions inputs (INPUT_<NAME> env vars set by the runner).

    Empty strings mean "not provided".
    """

    model_config = SettingsConfigDict(env_prefix="INPUT_", extra="ignore")

    token: str = ""
    title: str = ""
    labels_to_add: str = Field(default="", description="Comma-separated labels")
    source_branch: str = ""
    pr_number: str = ""
    source_sha: str = ""
    target_branch: str = ""

    def labels_to_add_list(self) -> list[str]:
        return [name.strip() for name in self.labels_to_add.split(",") if name.strip()]


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    bot: BotConfig = Field(default_factory=BotConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    backport: BackportConfig = Field(default_factory=BackportConfig)
    enterprise: EnterpriseConfig = Field(default_factory=EnterpriseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    inputs: ActionInputs = Field(default_factory=ActionInputs)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from action input, config, env or secret
        file."""
        if self.inputs.token:
            return self.inputs.token.strip()
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")

    @property
    def title_template(self) -> str:
        return self.inputs.title or self.backport.title_template

    @property
    def labels_to_add(self) -> list[str]:
        """Configured labels followed by labels from the action input."""
        labels = list(self.backport.labels_to_add)
        for name in self.inputs.labels_to_add_list():
            if name not in labels:
                labels.append(name)
        return labels


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file, environment and action inputs.

    A missing file is not an error: every setting has a default and the
    action normally runs from environment alone. Secrets: INPUT_TOKEN,
    GITHUB_TOKEN or GITHUB_TOKEN_FILE.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("repobot.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        bot=BotConfig(**(raw.get("bot") or {})),
        github=GitHubConfig(**(raw.get("github") or {})),
        backport=BackportConfig(**(raw.get("backport") or {})),
        enterprise=EnterpriseConfig(**(raw.get("enterprise") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )

"""Logging from config and env, with GitHub Actions annotations.

Levels (inclusive):
- ERROR: critical errors only
- WARNING: non-critical issues and ERROR
- INFO: service messages, WARNING, and ERROR
- DEBUG: debugging and all levels above

Configure via repobot.yaml (logging.level, logging.format,
logging.annotations) or env (LOGGING_LEVEL, LOGGING_FORMAT,
LOGGING_ANNOTATIONS). Annotations default to on when GITHUB_ACTIONS=true:
WARNING and ERROR records are then also written as ::warning:: / ::error::
workflow commands so they show up on the run summary.
"""

import logging
import os
import sys
from contextlib import contextmanager
from typing import Iterator, TextIO

from repobot.config import LoggingConfig

# Supported levels only (DEBUG, INFO, WARNING, ERROR)
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Map level name to logging constant.

    Falls back to INFO if unknown.
    """
    return LEVELS.get(level.upper().strip(), logging.INFO)


def _escape_data(message: str) -> str:
    """Escape a workflow command message (%, CR, LF)."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class AnnotationHandler(logging.Handler):
    """Write WARNING/ERROR records as GitHub Actions workflow commands."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__(level=logging.WARNING)
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            command = "error" if record.levelno >= logging.ERROR else "warning"
            stream = self.stream or sys.stdout
            stream.write(f"::{command}::{_escape_data(record.getMessage())}\n")
            stream.flush()
        except Exception:
            self.handleError(record)


def _annotations_enabled(config: LoggingConfig) -> bool:
    if config.annotations is not None:
        return config.annotations
    return os.environ.get("GITHUB_ACTIONS") == "true"


class RepobotLogging:
    """Configures root logger from LoggingConfig (YAML + env LOGGING_*)."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT
        self._annotations = _annotations_enabled(config)

    def setup(self) -> None:
        """Apply level and format to the root logger; add the annotation
        handler when running in GitHub Actions."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
        if self._annotations:
            logging.root.addHandler(AnnotationHandler())

    def get_logger(self, name: str) -> logging.Logger:
        """Return a logger with the given name (uses root config)."""
        return logging.getLogger(name)


@contextmanager
def log_group(title: str, enabled: bool | None = None, stream: TextIO | None = None) -> Iterator[None]:
    """Fold the output of the block into a collapsible group in the
    Actions log."""
    if enabled is None:
        enabled = os.environ.get("GITHUB_ACTIONS") == "true"
    out = stream or sys.stdout
    if enabled:
        out.write(f"::group::{_escape_data(title)}\n")
        out.flush()
    try:
        yield
    finally:
        if enabled:
            out.write("::endgroup::\n")
            out.flush()

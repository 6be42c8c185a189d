"""Internal helpers: run git commands, GitRunnerError."""

import logging
import re
import subprocess
from pathlib import Path

DEFAULT_TIMEOUT = 60

_URL_CREDENTIALS_RE = re.compile(r"//[^/@\s]+@")
_AUTH_HEADER_RE = re.compile(r"(authorization:\s*\w+\s+)\S+", re.IGNORECASE)


class GitRunnerError(Exception):
    """Raised when a git command fails."""

    pass


def _redact(text: str) -> str:
    """Mask URL userinfo and Authorization header values."""
    text = _URL_CREDENTIALS_RE.sub("//***@", text)
    return _AUTH_HEADER_RE.sub(r"\1***", text)


def _run_git(
    args: list[str],
    cwd: Path,
    log: logging.Logger | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> str:
    """Run git command and return its stdout; raise GitRunnerError on non-zero
    exit. Credentials are masked in the error message."""
    cmd = ["git"] + args
    command = _redact(" ".join(args))
    try:
        result = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, timeout=timeout)
    except subprocess.CalledProcessError as e:
        err = _redact((e.stderr or e.stdout or "").strip())
        if log:
            log.warning("Git %s failed: %s", command, err)
        raise GitRunnerError(f"git {command}: {err}") from None
    except subprocess.TimeoutExpired:
        raise GitRunnerError(f"git {command}: timed out after {timeout}s") from None
    except FileNotFoundError as e:
        raise GitRunnerError("git not found") from e
    return result.stdout or ""

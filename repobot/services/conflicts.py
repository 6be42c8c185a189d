"""Known auto-resolvable cherry-pick conflicts.

A resolver declares which conflicted file sets it can handle and how to
finish the cherry-pick for them. Anything no resolver claims is left for a
human.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Sequence

from repobot.services.git import add_paths, continue_cherry_pick

BETTERER_RESULTS_PATH = ".betterer.results"


class ConflictResolutionError(Exception):
    """Raised when an auto-resolution step fails."""

    pass


class ConflictResolver(ABC):
    """One kind of conflict that can be fixed without a human."""

    name: str = ""

    @abstractmethod
    def matches(self, conflicted: Sequence[str]) -> bool:
        """Return True if this resolver handles exactly this conflict set."""
        ...

    @abstractmethod
    def resolve(self, repo_dir: Path, log: logging.Logger | None = None) -> None:
        """Fix the conflict and complete the cherry-pick."""
        ...


class BettererResultsResolver(ConflictResolver):
    """Regenerate the betterer snapshot when it is the only conflicted file,
    then stage it and continue the cherry-pick."""

    name = "betterer"

    def __init__(
        self,
        command: Sequence[str] = ("npx", "betterer", "--update"),
        timeout: int = 600,
    ) -> None:
        self.command = list(command)
        self.timeout = timeout

    def matches(self, conflicted: Sequence[str]) -> bool:
        return list(conflicted) == [BETTERER_RESULTS_PATH]

    def resolve(self, repo_dir: Path, log: logging.Logger | None = None) -> None:
        if log:
            log.info("Regenerating %s with %s", BETTERER_RESULTS_PATH, " ".join(self.command))
        try:
            subprocess.run(
                self.command,
                cwd=repo_dir,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            err = (e.stderr or e.stdout or "").strip()
            raise ConflictResolutionError(f"{' '.join(self.command)}: {err}") from e
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            raise ConflictResolutionError(f"{' '.join(self.command)}: {e}") from e
        add_paths([BETTERER_RESULTS_PATH], repo_dir=repo_dir, log=log)
        continue_cherry_pick(repo_dir=repo_dir, log=log)


DEFAULT_RESOLVERS: tuple[ConflictResolver, ...] = (BettererResultsResolver(),)


def find_resolver(
    conflicted: Sequence[str],
    resolvers: Iterable[ConflictResolver] = DEFAULT_RESOLVERS,
) -> ConflictResolver | None:
    """Return the first resolver that handles the conflicted file set."""
    if not conflicted:
        return None
    for resolver in resolvers:
        if resolver.matches(conflicted):
            return resolver
    return None

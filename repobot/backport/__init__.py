"""Label-driven backports of merged pull requests."""

from repobot.backport.labels import BackportLabel, parse_backport_label, resolve_backport_map
from repobot.backport.runner import backport, backport_once

__all__ = [
    "BackportLabel",
    "backport",
    "backport_once",
    "parse_backport_label",
    "resolve_backport_map",
]

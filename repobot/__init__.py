"""Repobot: label-driven backports and enterprise branch sync for GitHub Actions."""

__version__ = "0.1.0"

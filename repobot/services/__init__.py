"""Local services: git subprocess helpers and conflict policies."""

"""mkchlog: user-facing changelogs from structured commit messages."""

__version__ = "0.1.0"

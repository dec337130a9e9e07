"""Commit sources for mkchlog."""

from mkchlog.vcs.base import CommitSource
from mkchlog.vcs.git import GitLog
from mkchlog.vcs.models import CommitRecord, GitError
from mkchlog.vcs.stdin import StdinCommitSource

__all__ = [
    "CommitRecord",
    "CommitSource",
    "GitError",
    "GitLog",
    "StdinCommitSource",
]

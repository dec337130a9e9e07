"""Abstract commit source interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator

from mkchlog.vcs.models import CommitRecord


class CommitSource(ABC):
    """Supplies commits to the changelog engine.

    Implementations must yield commits newest first, the order ``git log``
    uses; section buckets and skip boundaries depend on it.
    """

    @abstractmethod
    def commits(self) -> Iterator[CommitRecord]:
        """Yield commits, newest first."""
        ...

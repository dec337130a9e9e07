"""Commit source backed by the ``git log`` command."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterator
from pathlib import Path

from mkchlog.vcs.base import CommitSource
from mkchlog.vcs.models import CommitRecord, GitError

logger = logging.getLogger(__name__)

# ASCII record/unit separators cannot appear in commit messages typed by humans.
_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x1f"
_LOG_FORMAT = f"--format={_RECORD_SEP}%H{_FIELD_SEP}%B{_FIELD_SEP}"


class GitLog(CommitSource):
    """Reads commits and their changed files from a local repository.

    When ``since`` is given only commits in ``since..HEAD`` are listed, so the
    ``since`` commit and its ancestors are never read.
    """

    def __init__(self, path: str | Path = ".", since: str | None = None) -> None:
        self.path = Path(path)
        self.since = since

    def commits(self) -> Iterator[CommitRecord]:
        args = ["log", "--no-merges", "--name-only", _LOG_FORMAT]
        if self.since:
            args.append(f"{self.since}..HEAD")
        output = self._run(args)
        yield from parse_log(output)

    def staged_files(self) -> list[str]:
        """Paths staged for the next commit, as the commit-msg hook sees them."""
        output = self._run(["diff", "--cached", "--name-only"])
        return [line.strip() for line in output.splitlines() if line.strip()]

    def _run(self, args: list[str]) -> str:
        cmd = ["git", "-C", str(self.path), *args]
        logger.debug("running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, encoding="utf-8")
        except FileNotFoundError as e:
            raise GitError(f"Failed to execute 'git' command: {e}") from e

        if result.returncode != 0:
            raise GitError(
                f"Failed to execute 'git {' '.join(args)}' command:\n{result.stderr.strip()}"
            )
        return result.stdout


def parse_log(output: str) -> Iterator[CommitRecord]:
    """Split ``git log`` output produced with the separator format into records."""
    for chunk in output.split(_RECORD_SEP):
        if not chunk.strip():
            continue
        parts = chunk.split(_FIELD_SEP, 2)
        if len(parts) != 3:
            raise GitError(f"Unexpected git log output: {chunk[:80]!r}")
        commit_id, message, names = parts
        files = frozenset(line.strip() for line in names.splitlines() if line.strip())
        yield CommitRecord(id=commit_id.strip(), message=message.strip("\n"), files=files)

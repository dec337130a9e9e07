"""Commit source reading from standard input, as a commit-msg hook does."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from typing import TextIO

from mkchlog.vcs.base import CommitSource
from mkchlog.vcs.models import CommitRecord, GitError

logger = logging.getLogger(__name__)

STDIN_COMMIT_ID = "STDIN"

_LOG_HEADER = "commit "
# git log indents every message line by four spaces.
_MESSAGE_INDENT = "    "


def is_git_log(text: str) -> bool:
    """True if ``text`` looks like default ``git log`` output rather than one message."""
    return text.startswith(_LOG_HEADER)


class StdinCommitSource(CommitSource):
    """Commits read from a stream.

    A bare message (a commit-msg hook's input) yields one commit with id
    ``STDIN``. Lines starting with ``#`` are dropped the way git's default
    cleanup does, so a message built from ``mkchlog commit-template`` checks
    cleanly. Text starting with ``commit `` is taken as piped ``git log``
    output and yields one commit per header.

    ``files`` are the changed paths of a bare message. Piped logs carry their
    own, when produced with ``--name-only``.
    """

    def __init__(self, stream: TextIO, files: Iterable[str] = ()) -> None:
        self.stream = stream
        self.files = frozenset(files)

    def commits(self) -> Iterator[CommitRecord]:
        raw = self.stream.read().replace("\r", "")
        if is_git_log(raw):
            yield from parse_log_text(raw)
            return
        lines = [line for line in raw.splitlines() if not line.startswith("#")]
        yield CommitRecord(id=STDIN_COMMIT_ID, message="\n".join(lines).strip("\n"), files=self.files)


def parse_log_text(text: str) -> Iterator[CommitRecord]:
    """Split default-format ``git log`` text into commits, newest first.

    Merge commits are skipped, matching ``git log --no-merges``.
    """
    for chunk in re.split(r"(?m)^(?=commit )", text):
        if not chunk.strip():
            continue
        header, _, body = chunk.partition("\n\n")
        header_lines = header.splitlines()
        parts = header_lines[0].split()
        if len(parts) < 2:
            raise GitError(f"Unexpected git log header: {header_lines[0]!r}")
        commit_id = parts[1]
        if any(line.startswith("Merge:") for line in header_lines[1:]):
            logger.debug("skipping merge commit %s", commit_id)
            continue

        message: list[str] = []
        files: set[str] = set()
        for line in body.splitlines():
            if line.startswith(_MESSAGE_INDENT):
                message.append(line[len(_MESSAGE_INDENT):])
            elif not line.strip():
                message.append("")
            else:
                files.add(line.strip())
        yield CommitRecord(id=commit_id, message="\n".join(message).strip("\n"), files=frozenset(files))

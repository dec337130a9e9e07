"""Turn one commit into Skipped, Rejected or Accepted."""

from __future__ import annotations

import logging

from mkchlog.changelog.models import ChangelogEntry, Classification
from mkchlog.changelog.parser import parse_message
from mkchlog.changelog.projects import ProjectError, resolve_project
from mkchlog.config.models import MkchlogConfig
from mkchlog.vcs.models import CommitRecord

logger = logging.getLogger(__name__)

# Shortest abbreviated commit id accepted in the config.
MIN_ABBREV = 7


def same_commit(commit_id: str, ref: str | None) -> bool:
    """Compare a full commit id with a possibly abbreviated one from the config."""
    if not ref:
        return False
    ref = ref.strip()
    if ref == commit_id:
        return True
    return len(ref) >= MIN_ABBREV and commit_id.startswith(ref)


class CommitClassifier:
    """Classifies commits fed in history order (newest first).

    The only state is where the feed stands relative to
    ``skip-commits-up-to`` and ``projects.since-commit``: once either commit
    has been seen, it and every older commit fall under that rule.
    """

    def __init__(self, config: MkchlogConfig) -> None:
        self.config = config
        self._past_skip_boundary = False
        self._past_since_commit = False

    def classify(self, commit: CommitRecord) -> Classification:
        projects = self.config.projects
        if projects is not None and same_commit(commit.id, projects.since_commit):
            self._past_since_commit = True
        if same_commit(commit.id, self.config.skip_commits_up_to):
            self._past_skip_boundary = True

        if self._past_skip_boundary:
            return self._log(Classification.skipped(commit.id, "at or before skip-commits-up-to"))
        if any(same_commit(commit.id, ref) for ref in self.config.skip_commits_list):
            return self._log(Classification.skipped(commit.id, "listed in skip-commits-list"))

        parsed = parse_message(commit.message)
        if parsed.kind == "absent":
            return self._log(Classification.rejected(
                commit.id, "missing_metadata", "Missing 'changelog:' key in commit message"
            ))
        if parsed.kind == "malformed":
            return self._log(Classification.rejected(
                commit.id, "malformed_metadata", f"Malformed changelog message: {parsed.reason}"
            ))
        if parsed.kind == "skip":
            return self._log(Classification.skipped(commit.id, "changelog: skip"))

        block = parsed.block
        resolved = self.config.section_index.resolve(block.section)
        if resolved is None:
            return self._log(Classification.rejected(
                commit.id,
                "unknown_section",
                f"Unknown section '{block.section}' in changelog message",
            ))
        section, subsection = resolved

        try:
            project = resolve_project(
                projects, commit.files, block.project, legacy=self._past_since_commit
            )
        except ProjectError as e:
            return self._log(Classification.rejected(commit.id, e.kind, str(e)))

        title = block.title or parsed.title
        if not title:
            return self._log(Classification.rejected(
                commit.id, "malformed_metadata", "Could not extract a title from the commit message"
            ))

        if block.only_title and block.description:
            return self._log(Classification.rejected(
                commit.id,
                "conflicting_fields",
                "'only-title: true' cannot be combined with an explicit 'description'",
            ))

        if block.only_title:
            description = None
        else:
            description = block.description or parsed.description or None

        entry = ChangelogEntry(
            commit_id=commit.id,
            section=section,
            subsection=subsection,
            title=title.strip(),
            description=description.strip() if description else None,
            project=project,
        )
        return self._log(Classification.accepted(entry))

    def _log(self, result: Classification) -> Classification:
        if result.rejection is not None:
            logger.debug("%s rejected: %s", result.commit_id, result.rejection.message)
        elif result.entry is not None:
            logger.debug("%s accepted into %s", result.commit_id, result.entry.section_path)
        else:
            logger.debug("%s skipped: %s", result.commit_id, result.skip_reason)
        return result

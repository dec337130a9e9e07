"""Engine driving ``check`` and ``gen`` over a commit feed."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from mkchlog.changelog.assembler import ChangelogAssembler
from mkchlog.changelog.classifier import CommitClassifier
from mkchlog.changelog.models import CheckReport, Classification
from mkchlog.config.models import MkchlogConfig
from mkchlog.vcs.models import CommitRecord

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """``gen`` refused to produce a changelog because some commits are rejected."""

    def __init__(self, rejected: list[Classification]) -> None:
        self.rejected = rejected
        super().__init__(
            f"{len(rejected)} commit(s) have invalid changelog messages; "
            "run 'mkchlog check' for details"
        )


class ChangelogEngine:
    """Feeds commits through the classifier and collects the outcome.

    Every call starts a fresh classifier, so one engine can serve several runs
    over the same config.
    """

    def __init__(self, config: MkchlogConfig) -> None:
        self.config = config
        self.assembler = ChangelogAssembler(config.section_index)

    def classify(self, commits: Iterable[CommitRecord]) -> Iterator[Classification]:
        """Lazily classify commits in feed order."""
        classifier = CommitClassifier(self.config)
        for commit in commits:
            yield classifier.classify(commit)

    def check(self, commits: Iterable[CommitRecord]) -> CheckReport:
        """Classify the whole range and report every rejection."""
        report = CheckReport()
        for result in self.classify(commits):
            report.checked += 1
            if result.status == "rejected":
                report.rejected.append(result)
            elif result.status == "accepted":
                report.accepted += 1
            else:
                report.skipped += 1
        logger.info(
            "checked %d commit(s): %d accepted, %d skipped, %d rejected",
            report.checked,
            report.accepted,
            report.skipped,
            len(report.rejected),
        )
        return report

    def generate(self, commits: Iterable[CommitRecord], project: str | None = None) -> str:
        """Render the changelog, or raise GenerationError if any commit is rejected.

        Multi-project repositories need ``project``; single-project ones must
        not get one. Raises ValueError for either misuse.
        """
        self._check_project_arg(project)

        entries = []
        rejected = []
        for result in self.classify(commits):
            if result.status == "rejected":
                rejected.append(result)
            elif result.entry is not None:
                entries.append(result.entry)

        if rejected:
            raise GenerationError(rejected)

        if project is not None:
            entries = [e for e in entries if e.project == project]
        logger.info("generating changelog from %d entries", len(entries))
        return self.assembler.build(entries)

    def _check_project_arg(self, project: str | None) -> None:
        projects = self.config.projects
        if projects is None:
            if project is not None:
                raise ValueError(
                    f"Omit project option '{project}', repository is not configured as multi-project."
                )
            return
        if project is None:
            raise ValueError("You need to specify project name. Use command 'help' for more information.")
        if project not in projects.names:
            raise ValueError(f"Project '{project}' not configured in config file")

"""Group accepted entries into the configured section tree and render markdown."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from mkchlog.changelog.models import AssembledSection, AssembledTree, ChangelogEntry
from mkchlog.config.models import SectionIndex

logger = logging.getLogger(__name__)


class ChangelogAssembler:
    """Buckets entries per section in declared order, prunes, and renders.

    Pipeline:
        entries (processing order) → buckets → AssembledTree → markdown
    """

    def __init__(self, sections: SectionIndex) -> None:
        self.sections = sections

    def assemble(self, entries: Iterable[ChangelogEntry]) -> AssembledTree:
        buckets: dict[str, list[ChangelogEntry]] = {}
        for entry in entries:
            target = entry.subsection or entry.section
            if target not in self.sections:
                raise ValueError(f"Entry of commit {entry.commit_id} has unknown section '{entry.section_path}'")
            buckets.setdefault(target, []).append(entry)

        tree = AssembledTree()
        for top in self.sections.top_level():
            subsections = [
                AssembledSection(
                    id=sub.id,
                    title=sub.title,
                    description=sub.description,
                    entries=buckets[sub.id],
                )
                for sub in self.sections.children(top.id)
                if buckets.get(sub.id)
            ]
            own = buckets.get(top.id, [])
            if not own and not subsections:
                continue
            tree.sections.append(
                AssembledSection(
                    id=top.id,
                    title=top.title,
                    description=top.description,
                    entries=own,
                    subsections=subsections,
                )
            )
        logger.debug("assembled %d non-empty section(s)", len(tree.sections))
        return tree

    def render(self, tree: AssembledTree) -> str:
        """Render the tree as markdown; an empty tree renders as ''."""
        blocks: list[str] = []
        for section in tree.sections:
            blocks.extend(_section_blocks(section, level=2))
            for sub in section.subsections:
                blocks.extend(_section_blocks(sub, level=3))
        if not blocks:
            return ""
        return "\n\n".join(blocks) + "\n"

    def build(self, entries: Iterable[ChangelogEntry]) -> str:
        """Assemble and render in one step."""
        return self.render(self.assemble(entries))


def _section_blocks(section: AssembledSection, level: int) -> list[str]:
    blocks = [f"{'#' * level} {section.title}"]
    if section.description:
        blocks.append(section.description.strip())
    for entry in section.entries:
        if entry.has_description:
            blocks.append(f"{'#' * (level + 1)} {entry.title}")
            blocks.append(entry.description)
        else:
            blocks.append(f"* {entry.title}")
    return blocks

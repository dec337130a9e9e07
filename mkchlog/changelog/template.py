"""Build the changelog block template offered to developers by the commit-msg hook."""

from __future__ import annotations

from collections.abc import Iterable

from mkchlog.changelog.projects import covers
from mkchlog.config.models import MkchlogConfig

# Gap between the longest section path and its title.
_TITLE_GAP = 2


def projects_for_files(config: MkchlogConfig, files: Iterable[str]) -> list[str]:
    """First declared project covering each file, deduplicated in first-seen order.

    Raises ValueError for a file no project covers.
    """
    if config.projects is None:
        return []
    found: list[str] = []
    for path in files:
        owner = next((p.name for p in config.projects.projects if covers(p, path)), None)
        if owner is None:
            raise ValueError(
                f"Could not determine project for file: '{path}'. "
                "Is the directory correctly set in the config file?"
            )
        if owner not in found:
            found.append(owner)
    return found


def build_commit_template(config: MkchlogConfig, files: Iterable[str] = ()) -> str:
    """Return the text appended to a new commit message.

    Everything after the block is ``#``-commented so git strips it and the
    YAML parser ignores it.
    """
    files = [f.strip() for f in files if f.strip()]
    lines = ["", "", "changelog:"]

    if config.projects is not None:
        projects = projects_for_files(config, files)
        if len(projects) == 1:
            lines.append(f"  project: {projects[0]}")
        else:
            lines.append("  project:")
            if projects:
                lines.append(f"# Changes span several projects: {', '.join(projects)}")
    lines.append("  section:")
    lines.append("#")
    lines.append("# Valid changelog sections:")

    paths = []
    index = config.section_index
    for top in index.top_level():
        paths.append((top.path, top.title))
        paths.extend((sub.path, sub.title) for sub in index.children(top.id))

    width = max(len(path) for path, _ in paths) + _TITLE_GAP
    lines.extend(f"# * {path.ljust(width)}{title}" for path, title in paths)
    lines.append("#")
    lines.append("# Optional keys: title, description, only-title: true")
    return "\n".join(lines) + "\n"

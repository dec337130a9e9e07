"""Assign a commit to one project of a multi-project repository."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import PurePosixPath

from mkchlog.config.models import ProjectDef, ProjectsConfig

logger = logging.getLogger(__name__)

_ROOT_DIRS = {"", "."}


class ProjectError(Exception):
    """Project assignment failed for one commit."""

    def __init__(self, kind: str, message: str) -> None:
        self.kind = kind
        super().__init__(message)


def covers(project: ProjectDef, path: str) -> bool:
    """True if one of the project's dirs is a path-component prefix of ``path``.

    ``.`` stands for the repository root and covers only files directly in it.
    """
    file_path = PurePosixPath(path)
    for d in project.dirs:
        d = d.strip().rstrip("/")
        if d.startswith("./"):
            d = d[2:]
        if d in _ROOT_DIRS:
            if len(file_path.parts) == 1:
                return True
        elif file_path.is_relative_to(d):
            return True
    return False


def covering_projects(projects: ProjectsConfig, files: Iterable[str]) -> list[str]:
    """Names of the projects that cover every one of ``files``, in declared order."""
    files = list(files)
    if not files:
        return []
    return [p.name for p in projects.projects if all(covers(p, f) for f in files)]


def resolve_project(
    projects: ProjectsConfig | None,
    files: Iterable[str],
    explicit: str | None = None,
    *,
    legacy: bool = False,
) -> str | None:
    """Return the owning project name, or None when projects are not configured.

    ``legacy`` marks a commit at or before ``since-commit``; such commits belong
    to the default project whatever they touch or declare.

    Raises ProjectError on mismatch, missing declaration or an unknown name.
    """
    if projects is None:
        if explicit:
            logger.debug("ignoring project '%s': repository is single-project", explicit)
        return None

    if legacy:
        return projects.default_project

    if explicit is not None and explicit not in projects.names:
        raise ProjectError(
            "unknown_project",
            f"Incorrect (not allowed in config file) project name '{explicit}' in changelog message",
        )

    candidates = covering_projects(projects, files)

    if len(candidates) == 1:
        (owner,) = candidates
        if explicit is not None and explicit != owner:
            raise ProjectError(
                "project_mismatch",
                f"Project '{explicit}' in changelog message does not match project "
                f"'{owner}' of the changed files",
            )
        return owner

    if explicit is None:
        if candidates:
            detail = f"changed files belong to several projects ({', '.join(candidates)})"
        else:
            detail = "changed files are not covered by a single project"
        raise ProjectError(
            "project_missing_declaration",
            f"Missing 'project' key in changelog message: {detail}",
        )

    logger.debug("project '%s' taken from changelog message (%d candidates)", explicit, len(candidates))
    return explicit

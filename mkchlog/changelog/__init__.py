"""Changelog engine: classifies commits and assembles the markdown changelog."""

from mkchlog.changelog.assembler import ChangelogAssembler
from mkchlog.changelog.classifier import CommitClassifier
from mkchlog.changelog.engine import ChangelogEngine, GenerationError
from mkchlog.changelog.models import (
    AssembledSection,
    AssembledTree,
    ChangelogBlock,
    ChangelogEntry,
    CheckReport,
    Classification,
    ParsedMessage,
    Rejection,
)
from mkchlog.changelog.parser import parse_message
from mkchlog.changelog.projects import ProjectError, resolve_project
from mkchlog.changelog.template import build_commit_template

__all__ = [
    "AssembledSection",
    "AssembledTree",
    "ChangelogAssembler",
    "ChangelogBlock",
    "ChangelogEngine",
    "ChangelogEntry",
    "CheckReport",
    "Classification",
    "CommitClassifier",
    "GenerationError",
    "ParsedMessage",
    "ProjectError",
    "Rejection",
    "build_commit_template",
    "parse_message",
    "resolve_project",
]

"""Locate and parse the changelog block embedded in a commit message.

A line scan finds the ``changelog:`` line and cuts the message into free text
and block text. Only the block text is handed to the YAML parser.
"""

from __future__ import annotations

import logging
import re
import textwrap

import yaml
from pydantic import ValidationError

from mkchlog.changelog.models import ChangelogBlock, ParsedMessage

logger = logging.getLogger(__name__)

CHANGELOG_KEY = "changelog:"
SKIP_MARKER = "skip"


def parse_message(message: str) -> ParsedMessage:
    """Parse one full commit message (title, blank line, body)."""
    lines = message.replace("\r", "").split("\n")
    title = lines[0].strip() if lines else ""

    marker = _find_marker(lines)
    if marker is None:
        return ParsedMessage(kind="absent", title=title, description=_candidate_description(lines[1:]))

    description = _candidate_description(lines[1:marker])
    remainder = lines[marker].lstrip()[len(CHANGELOG_KEY):]

    if remainder.strip() == SKIP_MARKER:
        return ParsedMessage(kind="skip", title=title, description=description)

    try:
        block = parse_block(remainder, _block_lines(lines, marker))
    except ValueError as e:
        return ParsedMessage(kind="malformed", reason=str(e), title=title, description=description)

    return ParsedMessage(kind="metadata", block=block, title=title, description=description)


def parse_block(remainder: str, following: list[str]) -> ChangelogBlock:
    """Parse the block text into a validated ChangelogBlock.

    ``remainder`` is whatever follows ``changelog:`` on its own line (usually
    nothing, or an inline flow mapping); ``following`` are the lines after it.
    Raises ValueError with a readable reason.
    """
    body = textwrap.dedent("\n".join(following)).strip("\n")
    document = CHANGELOG_KEY + remainder.rstrip()
    if body:
        document += "\n" + textwrap.indent(body, "  ")

    try:
        data = yaml.safe_load(document)
    except yaml.YAMLError as e:
        raise ValueError(f"changelog block is not valid YAML: {_one_line(e)}") from e

    value = data.get("changelog") if isinstance(data, dict) else None
    if value is None:
        raise ValueError("changelog block is empty")
    if isinstance(value, str):
        raise ValueError(f"unexpected value '{value}', expected '{SKIP_MARKER}' or a mapping")
    if not isinstance(value, dict):
        raise ValueError(f"changelog block must be a mapping, got {type(value).__name__}")

    try:
        return ChangelogBlock.model_validate(value)
    except ValidationError as e:
        raise ValueError(_describe_validation_error(e)) from e


def _find_marker(lines: list[str]) -> int | None:
    # The title line is never a marker; "changelog: update docs" is a fine title.
    for i in range(1, len(lines)):
        if lines[i].lstrip(" \t").startswith(CHANGELOG_KEY):
            return i
    return None


def _block_lines(lines: list[str], marker: int) -> list[str]:
    """Lines of the block: those after the marker indented deeper than it.

    The first non-blank line at or left of the marker's indentation ends the
    block, so trailers such as ``Signed-off-by:`` stay outside it.
    """
    base = _indent(lines[marker])
    end = marker + 1
    while end < len(lines):
        line = lines[end]
        if line.strip() and _indent(line) <= base:
            break
        end += 1
    return lines[marker + 1:end]


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def _candidate_description(lines: list[str]) -> str:
    """Body text with hard wraps removed, paragraphs kept apart."""
    text = textwrap.dedent("\n".join(lines)).strip()
    if not text:
        return ""
    paragraphs = re.split(r"\n\s*\n", text)
    return "\n\n".join(" ".join(line.strip() for line in p.splitlines()) for p in paragraphs)


def _describe_validation_error(error: ValidationError) -> str:
    reasons = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "changelog"
        if err["type"] == "missing":
            reasons.append(f"missing field '{field}'")
        elif err["type"] == "extra_forbidden":
            reasons.append(f"unknown field '{field}'")
        else:
            reasons.append(f"invalid value for '{field}': {err['msg']}")
    return "; ".join(reasons)


def _one_line(error: Exception) -> str:
    return " ".join(str(error).split())

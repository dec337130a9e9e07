"""Shared test fixtures for mkchlog."""

import pytest

from mkchlog.config import parse_config
from mkchlog.vcs.models import CommitRecord

SINGLE_PROJECT_YAML = """\
sections:
  security:
    title: Security
    description: This section contains very important security-related changes.
    subsections:
      vuln_fixes:
        title: Fixed vulnerabilities
  features:
    title: New features
  bug_fixes:
    title: Fixed bugs
  breaking:
    title: Breaking changes
  perf:
    title: Performance improvements
  dev:
    title: Development
    description: Internal development changes
"""

MULTI_PROJECT_YAML = SINGLE_PROJECT_YAML + """\
projects:
  list:
    - project:
        name: main
        dirs: ["."]
    - project:
        name: mkchlog
        dirs: [mkchlog]
    - project:
        name: mkchlog-action
        dirs: [mkchlog-action, .github]
"""


def _commit(commit_id: str, message: str, files=()) -> CommitRecord:
    return CommitRecord(id=commit_id, message=message, files=frozenset(files))


@pytest.fixture
def make_commit():
    return _commit


@pytest.fixture
def config():
    return parse_config(SINGLE_PROJECT_YAML)


@pytest.fixture
def multi_config():
    return parse_config(MULTI_PROJECT_YAML)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / ".mkchlog.yml"
    path.write_text(SINGLE_PROJECT_YAML)
    return path


@pytest.fixture
def multi_config_file(tmp_path):
    path = tmp_path / ".mkchlog.yml"
    path.write_text(MULTI_PROJECT_YAML)
    return path


@pytest.fixture
def sample_commits():
    """Newest first, the way git log lists them."""
    return [
        _commit(
            "c5" * 20,
            "Don't reallocate the buffer when we know its size\n\n"
            "This computes the size and allocates the buffer upfront.\n\n"
            "changelog:\n"
            "  section: perf\n"
            "  title: Improve processing speed by 10%\n"
            "  only-title: true",
        ),
        _commit(
            "c4" * 20,
            "Fix vulnerability related to user input\n\n"
            "changelog:\n"
            "  section: security.vuln_fixes\n"
            "  title: Fixed vulnerability related to user input\n"
            "  description: |-\n"
            "    Running the program with untrusted input could lead to\n"
            "    code execution.",
        ),
        _commit(
            "c3" * 20,
            "Fix grammar mistakes\n\nWe found 42 grammar mistakes.\n\nchangelog: skip",
        ),
        _commit(
            "c2" * 20,
            "Add ability to skip commits\n\n"
            "This change allows commits to be skipped by configuring\n"
            "a list of commit ids.\n\n"
            "changelog:\n"
            "  section: features",
        ),
        _commit(
            "c1" * 20,
            "Add a CI check for changelog blocks\n\nchangelog:\n  section: dev\n  only-title: true",
        ),
    ]

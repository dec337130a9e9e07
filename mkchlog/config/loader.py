"""YAML config loading with duplicate-key detection."""

from __future__ import annotations

import logging
from collections.abc import Hashable
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import ConfigError, MkchlogConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".mkchlog.yml"


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses repeated keys inside one mapping."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _value_node in node.value:
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping", node.start_mark, "found unhashable key", key_node.start_mark
                )
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    None, None, f"duplicate key {key!r}", key_node.start_mark
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def parse_config(text: str, source: str = "<string>") -> MkchlogConfig:
    """Parse and validate config YAML text."""
    try:
        raw = yaml.load(text, Loader=_UniqueKeyLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {source}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid config in {source}: expected a mapping with a 'sections' key")

    try:
        config = MkchlogConfig(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {source}: {e}") from e

    logger.debug(
        "loaded %s: %d section(s), multi-project=%s",
        source,
        len(config.section_index),
        config.multi_project,
    )
    return config


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> MkchlogConfig:
    """Load the config file, raising ConfigError on any problem."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Error reading config YAML file '{path}': {e}") from e
    return parse_config(text, source=str(path))


# Starter file for new repositories.
DEFAULT_CONFIG_TEMPLATE = """\
# .mkchlog.yml

# Commits up to and including this one are not checked.
# skip-commits-up-to: <commit id>

# Commits to ignore entirely (e.g. ones with broken changelog blocks).
# skip-commits-list: []

# Path to the git repository.
# git-path: .

sections:
  # section identifier used in commit messages
  security:
    # header presented to the user
    title: Security
    # optional, shown above the entries
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

# Multi-project repositories
# projects:
#   list:
#     - name: main
#       dirs: [".", .github]
#     - name: cli
#       dirs: [cli]
#   since-commit: <commit id>   # projects are mandatory after this commit
#   default: main               # project of commits up to since-commit
"""

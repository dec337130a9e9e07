"""Pydantic models for changelog blocks, classifications and entries."""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

RejectionKind = Literal[
    "missing_metadata",
    "malformed_metadata",
    "unknown_section",
    "project_mismatch",
    "project_missing_declaration",
    "unknown_project",
    "conflicting_fields",
]

PROJECT_REJECTIONS: frozenset[str] = frozenset(
    {"project_mismatch", "project_missing_declaration", "unknown_project"}
)


class ChangelogBlock(BaseModel):
    """Fields of the mapping that follows a ``changelog:`` line."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, coerce_numbers_to_str=True)

    section: str
    title: str | None = None
    description: str | None = None
    only_title: bool = Field(default=False, alias="only-title")
    project: str | None = None
    # Older schema keys, still found in existing history.
    title_is_enough: bool | None = Field(default=None, alias="title-is-enough", exclude=True)
    inherit: str | None = Field(default=None, exclude=True)

    @field_validator("section", mode="before")
    @classmethod
    def null_section_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("title", "description", "project", mode="before")
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def apply_legacy_keys(self) -> ChangelogBlock:
        if self.title_is_enough is not None:
            logger.warning("'title-is-enough' is deprecated, use 'only-title'")
            self.only_title = self.only_title or self.title_is_enough
        if self.inherit is not None:
            logger.warning("'inherit' is deprecated and ignored; titles and descriptions are inherited by default")
        return self


class ParsedMessage(BaseModel):
    """Result of scanning one commit message.

    ``kind`` tags the outcome; ``title`` and ``description`` are the candidate
    texts taken from the free-form part of the message in every case.
    """

    kind: Literal["skip", "metadata", "absent", "malformed"]
    block: ChangelogBlock | None = None
    reason: str | None = None
    title: str = ""
    description: str = ""


class Rejection(BaseModel):
    """Why a commit cannot go into the changelog."""

    kind: RejectionKind
    message: str

    @property
    def is_project_error(self) -> bool:
        return self.kind in PROJECT_REJECTIONS


class ChangelogEntry(BaseModel):
    """An accepted commit, ready for assembly."""

    model_config = ConfigDict(frozen=True)

    commit_id: str
    section: str
    subsection: str | None = None
    title: str = Field(min_length=1)
    description: str | None = None
    project: str | None = None

    @property
    def section_path(self) -> str:
        return f"{self.section}.{self.subsection}" if self.subsection else self.section

    @property
    def has_description(self) -> bool:
        return bool(self.description)


class Classification(BaseModel):
    """Terminal outcome for one commit. Exactly one payload is set."""

    commit_id: str
    status: Literal["skipped", "rejected", "accepted"]
    entry: ChangelogEntry | None = None
    rejection: Rejection | None = None
    skip_reason: str | None = None

    @model_validator(mode="after")
    def check_payload(self) -> Classification:
        expected = {
            "accepted": self.entry is not None,
            "rejected": self.rejection is not None,
            "skipped": self.skip_reason is not None,
        }
        payloads = sum(
            x is not None for x in (self.entry, self.rejection, self.skip_reason)
        )
        if not expected[self.status] or payloads != 1:
            raise ValueError(f"Classification '{self.status}' must carry exactly its own payload")
        return self

    @classmethod
    def skipped(cls, commit_id: str, reason: str) -> Classification:
        return cls(commit_id=commit_id, status="skipped", skip_reason=reason)

    @classmethod
    def rejected(cls, commit_id: str, kind: RejectionKind, message: str) -> Classification:
        return cls(
            commit_id=commit_id,
            status="rejected",
            rejection=Rejection(kind=kind, message=message),
        )

    @classmethod
    def accepted(cls, entry: ChangelogEntry) -> Classification:
        return cls(commit_id=entry.commit_id, status="accepted", entry=entry)


class AssembledSection(BaseModel):
    """A section (or subsection) that has at least one entry below it."""

    id: str
    title: str
    description: str | None = None
    entries: list[ChangelogEntry] = Field(default_factory=list)
    subsections: list[AssembledSection] = Field(default_factory=list)


class AssembledTree(BaseModel):
    """The section tree pruned to non-empty branches, in declared order."""

    sections: list[AssembledSection] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.sections


class CheckReport(BaseModel):
    """Aggregate of a ``check`` run over the whole commit range."""

    checked: int = 0
    skipped: int = 0
    accepted: int = 0
    rejected: list[Classification] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected

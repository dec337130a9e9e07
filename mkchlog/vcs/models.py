"""Pydantic models for commit history data."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GitError(Exception):
    """Raised when the git command cannot be run or fails."""


class CommitRecord(BaseModel):
    """One commit as delivered by a commit source. Read-only."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    message: str
    files: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("message")
    @classmethod
    def strip_carriage_returns(cls, v: str) -> str:
        return v.replace("\r", "")

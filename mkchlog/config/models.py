"""Pydantic models for the .mkchlog.yml configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator


class ConfigError(ValueError):
    """Raised when the configuration cannot be loaded or is inconsistent."""


class SectionSpec(BaseModel):
    """A section as written in the YAML file (the id is its mapping key)."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    description: str | None = None
    subsections: dict[str, SectionSpec] = Field(default_factory=dict)

    @field_validator("description", mode="before")
    @classmethod
    def blank_description_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("subsections", mode="before")
    @classmethod
    def null_subsections_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class SectionDef(BaseModel):
    """A resolved section or subsection, addressable by id."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str | None = None
    parent: str | None = None

    @property
    def path(self) -> str:
        """Dotted path as written in a changelog block (``top`` or ``top.sub``)."""
        return f"{self.parent}.{self.id}" if self.parent else self.id


class SectionIndex:
    """Flat id -> SectionDef table plus the declared order at each level.

    Lookup by id does not depend on the order lists, so rendering order is
    always the declaration order regardless of how entries arrive.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, SectionDef] = {}
        self._top: list[str] = []
        self._children: dict[str, list[str]] = {}

    @classmethod
    def build(cls, sections: dict[str, SectionSpec]) -> SectionIndex:
        index = cls()
        for sec_id, spec in sections.items():
            index._add(SectionDef(id=sec_id, title=spec.title, description=spec.description))
            for sub_id, sub in spec.subsections.items():
                if sub.subsections:
                    raise ValueError(
                        f"Subsection '{sec_id}.{sub_id}' cannot declare its own subsections"
                    )
                index._add(
                    SectionDef(
                        id=sub_id,
                        title=sub.title,
                        description=sub.description,
                        parent=sec_id,
                    )
                )
        return index

    def _add(self, section: SectionDef) -> None:
        if section.id in self._by_id:
            raise ValueError(f"Duplicate section id '{section.id}'")
        self._by_id[section.id] = section
        if section.parent is None:
            self._top.append(section.id)
            self._children[section.id] = []
        else:
            self._children[section.parent].append(section.id)

    def __contains__(self, section_id: object) -> bool:
        return section_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, section_id: str) -> SectionDef | None:
        return self._by_id.get(section_id)

    def top_level(self) -> list[SectionDef]:
        return [self._by_id[i] for i in self._top]

    def children(self, section_id: str) -> list[SectionDef]:
        return [self._by_id[i] for i in self._children.get(section_id, [])]

    def resolve(self, path: str) -> tuple[str, str | None] | None:
        """Resolve ``top`` or ``top.sub`` to (section_id, subsection_id).

        Returns None when either part is not declared at that position.
        """
        top, _, sub = path.partition(".")
        top, sub = top.strip(), sub.strip()
        section = self._by_id.get(top)
        if section is None or section.parent is not None:
            return None
        if not sub:
            return top, None
        if sub not in self._children[top]:
            return None
        return top, sub


class ProjectDef(BaseModel):
    """One project of a multi-project repository."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    dirs: list[str] = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def unwrap_project_key(cls, data: Any) -> Any:
        # Accept both ``{name, dirs}`` and the ``{project: {name, dirs}}`` list item form.
        if isinstance(data, dict) and set(data) == {"project"}:
            return data["project"]
        return data

    @field_validator("dirs", mode="before")
    @classmethod
    def single_dir_as_list(cls, v: Any) -> Any:
        return [v] if isinstance(v, str) else v


class ProjectsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, coerce_numbers_to_str=True)

    projects: list[ProjectDef] = Field(alias="list", min_length=1)
    since_commit: str | None = Field(default=None, alias="since-commit")
    default_project: str | None = Field(default=None, alias="default")

    @model_validator(mode="after")
    def check_names(self) -> ProjectsConfig:
        names = [p.name for p in self.projects]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Duplicate project name(s): {', '.join(dupes)}")
        if self.since_commit and not self.default_project:
            raise ValueError("'since-commit' requires a 'default' project name")
        if self.default_project and self.default_project not in names:
            raise ValueError(
                f"Default project '{self.default_project}' is not in the projects list"
            )
        return self

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.projects]

    def get(self, name: str) -> ProjectDef | None:
        for project in self.projects:
            if project.name == name:
                return project
        return None


class MkchlogConfig(BaseModel):
    """Top-level configuration, immutable once loaded."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    sections: dict[str, SectionSpec] = Field(min_length=1)
    projects: ProjectsConfig | None = None
    skip_commits_up_to: str | None = Field(default=None, alias="skip-commits-up-to")
    skip_commits_list: list[str] = Field(default_factory=list, alias="skip-commits-list")
    git_path: str | None = Field(default=None, alias="git-path")

    _index: SectionIndex = PrivateAttr()

    @field_validator("skip_commits_list", mode="before")
    @classmethod
    def null_list_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @model_validator(mode="after")
    def build_section_index(self) -> MkchlogConfig:
        self._index = SectionIndex.build(self.sections)
        return self

    @property
    def section_index(self) -> SectionIndex:
        return self._index

    @property
    def multi_project(self) -> bool:
        return self.projects is not None

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Dialect-neutral data model shared by parsers, stores and the aggregator."""

from __future__ import annotations

import time
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field

from .constants import RECENT_SECTION_ID
from .paths import relative_key


class Dialect(str, Enum):
    """Enumerate the configuration dialects understood by the source parsers."""

    DEBUG = "debug-configuration"
    COMPOUND = "compound-debug-configuration"
    SCRIPT = "package-script"
    BUILD_TARGET = "build-target"
    RUN_CONFIG = "ide-run-configuration"


class SectionKind(str, Enum):
    """Enumerate the section groupings rendered by the aggregated tree."""

    RECENT = "recent"
    DEBUG = "debug-configurations"
    SCRIPTS = "package-scripts"
    RUN_CONFIGS = "ide-run-configurations"
    BUILD_TARGETS = "build-targets"


SECTION_KIND_FOR_DIALECT: Final[dict[Dialect, SectionKind]] = {
    Dialect.DEBUG: SectionKind.DEBUG,
    Dialect.COMPOUND: SectionKind.DEBUG,
    Dialect.SCRIPT: SectionKind.SCRIPTS,
    Dialect.BUILD_TARGET: SectionKind.BUILD_TARGETS,
    Dialect.RUN_CONFIG: SectionKind.RUN_CONFIGS,
}


class ProjectRoot(BaseModel):
    """One top-level folder of the workspace being scanned."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path

    @classmethod
    def from_path(cls, path: Path, *, name: str | None = None) -> ProjectRoot:
        """Return a root for ``path`` named after its directory unless ``name`` is given."""

        resolved = path.expanduser().resolve()
        return cls(name=name or resolved.name or str(resolved), path=resolved)


def line_column(text: str, offset: int) -> tuple[int, int]:
    """Return the 0-based ``(line, column)`` of ``offset`` within ``text``."""

    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start


class SourcePosition(BaseModel):
    """Line/column span of a task's definition, used for jump-to-edit."""

    model_config = ConfigDict(frozen=True)

    start_line: int
    start_column: int
    end_line: int
    end_column: int
    start_offset: int
    end_offset: int

    @classmethod
    def from_offsets(cls, text: str, start: int, end: int) -> SourcePosition:
        """Build a position from character offsets into ``text``.

        Args:
            text: Full document text the offsets refer to.
            start: Offset of the first character of the span.
            end: Offset one past the last character of the span.

        Returns:
            SourcePosition: Span with both offsets and line/column coordinates.
        """

        start_line, start_column = line_column(text, start)
        end_line, end_column = line_column(text, end)
        return cls(
            start_line=start_line,
            start_column=start_column,
            end_line=end_line,
            end_column=end_column,
            start_offset=start,
            end_offset=end,
        )


class DebugLaunchSpec(BaseModel):
    """Structured debug launch descriptor handed to the host debugger."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["debug"] = "debug"
    configuration: dict[str, Any]


class CompoundLaunchSpec(BaseModel):
    """Launch descriptor that starts several named debug configurations."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["compound"] = "compound"
    configurations: list[str]


class ShellCommandSpec(BaseModel):
    """Shell command string plus the directory and environment it runs in."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["shell"] = "shell"
    command: str = Field(min_length=1)
    cwd: Path
    env: dict[str, str] = Field(default_factory=dict)
    target: str | None = None


class DiagnosticSpec(BaseModel):
    """Placeholder spec carried by the distinguished debug-configuration error task."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["diagnostic"] = "diagnostic"
    message: str


ExecutionSpec = Annotated[
    DebugLaunchSpec | CompoundLaunchSpec | ShellCommandSpec | DiagnosticSpec,
    Field(discriminator="kind"),
]


class DiscoveredTask(BaseModel):
    """The normalised unit of "something the user can run"."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    dialect: Dialect
    source_file: Path
    root: ProjectRoot
    execution: ExecutionSpec
    position: SourcePosition | None = None
    detail: str = ""
    task_id: str | None = None

    @property
    def identity(self) -> str:
        """Return the explicit task id, falling back to ``name-dialect``."""

        return self.task_id or f"{self.name}-{self.dialect.value}"

    @property
    def is_error(self) -> bool:
        return isinstance(self.execution, DiagnosticSpec)


def section_identity(kind: SectionKind, root: ProjectRoot | None, manifest_path: Path | None = None) -> str:
    """Return the deterministic identity string for a section.

    Args:
        kind: Section kind.
        root: Project root the section belongs to; ``None`` only for the recent section.
        manifest_path: Manifest or build file disambiguating nested sections.

    Returns:
        str: ``kind:root-name:relative-path`` (``recent`` for the synthetic section).
    """

    if kind is SectionKind.RECENT or root is None:
        return RECENT_SECTION_ID
    return f"{kind.value}:{root.name}:{relative_key(manifest_path, root.path)}"


class Section(BaseModel):
    """A named grouping of tasks sharing a dialect, root and optional manifest."""

    model_config = ConfigDict(frozen=True)

    kind: SectionKind
    title: str
    root: ProjectRoot | None = None
    manifest_path: Path | None = None
    hidden_count: int = 0

    @property
    def identity(self) -> str:
        return section_identity(self.kind, self.root, self.manifest_path)

    @property
    def catalog_key(self) -> str:
        """Return the identity qualified by the root directory.

        Identities only carry the root name, so two roots sharing a directory
        name collide there; this key keeps their tasks apart in a snapshot.
        """

        if self.root is None:
            return self.identity
        return f"{self.identity}@{self.root.path}"

    @property
    def display_title(self) -> str:
        """Return the title annotated with the hidden-task indicator."""

        if self.hidden_count:
            return f"{self.title} ({self.hidden_count} hidden)"
        return self.title


class RecentEntry(BaseModel):
    """Denormalised snapshot of an executed task, sufficient to re-run it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    dialect: Dialect
    detail: str = ""
    source_file: str
    root_name: str
    root_path: str
    execution: ExecutionSpec
    task_id: str | None = None
    recorded_at: float = Field(default_factory=time.time)

    @classmethod
    def from_task(cls, task: DiscoveredTask) -> RecentEntry:
        return cls(
            name=task.name,
            dialect=task.dialect,
            detail=task.detail,
            source_file=str(task.source_file),
            root_name=task.root.name,
            root_path=str(task.root.path),
            execution=task.execution,
            task_id=task.task_id,
        )

    @property
    def key(self) -> tuple[str, Dialect]:
        return self.name, self.dialect

    def matches_root(self, root: ProjectRoot) -> bool:
        """Return whether ``root`` is the root this entry was recorded under."""

        return root.name == self.root_name and str(root.path) == self.root_path

    def to_task(self, root: ProjectRoot) -> DiscoveredTask:
        """Rebuild a runnable task bound to the live ``root``."""

        return DiscoveredTask(
            name=self.name,
            dialect=self.dialect,
            source_file=Path(self.source_file),
            root=root,
            execution=self.execution,
            detail=self.detail,
            task_id=self.task_id,
        )


class HiddenEntry(BaseModel):
    """Persisted exclusion for a task or section, with display metadata for restore dialogs."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    kind: Literal["task", "section"]
    dialect: str | None = None
    path: str | None = None
    folder: str | None = None
    section_id: str | None = None

    @classmethod
    def for_task(cls, task: DiscoveredTask, *, section_id: str | None = None) -> HiddenEntry:
        return cls(
            id=task.identity,
            name=task.name,
            kind="task",
            dialect=task.dialect.value,
            path=str(task.source_file),
            folder=task.root.name,
            section_id=section_id,
        )

    @classmethod
    def for_section(cls, section: Section) -> HiddenEntry:
        return cls(
            id=section.identity,
            name=section.title,
            kind="section",
            dialect=section.kind.value,
            path=str(section.manifest_path) if section.manifest_path else None,
            folder=section.root.name if section.root else None,
            section_id=section.identity,
        )


class CatalogSnapshot(BaseModel):
    """Complete tree produced by one aggregation pass.

    ``tasks`` is keyed by :attr:`Section.catalog_key`.
    """

    model_config = ConfigDict(frozen=True)

    generation: int
    sections: list[Section] = Field(default_factory=list)
    tasks: dict[str, list[DiscoveredTask]] = Field(default_factory=dict)

    def tasks_for(self, section: Section) -> list[DiscoveredTask]:
        return list(self.tasks.get(section.catalog_key, []))


__all__ = [
    "CatalogSnapshot",
    "CompoundLaunchSpec",
    "DebugLaunchSpec",
    "DiagnosticSpec",
    "Dialect",
    "DiscoveredTask",
    "ExecutionSpec",
    "HiddenEntry",
    "ProjectRoot",
    "RecentEntry",
    "SECTION_KIND_FOR_DIALECT",
    "Section",
    "SectionKind",
    "ShellCommandSpec",
    "SourcePosition",
    "line_column",
    "section_identity",
]

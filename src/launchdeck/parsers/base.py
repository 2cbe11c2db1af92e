# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared contract for the per-dialect source parsers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Final

from pydantic import ValidationError

from ..config import LaunchdeckConfig
from ..errors import LaunchdeckError
from ..logging import ComponentLogger
from ..models import DiscoveredTask, ProjectRoot, Section, SectionKind

RECOVERABLE_ERRORS: Final[tuple[type[Exception], ...]] = (
    LaunchdeckError,
    OSError,
    UnicodeDecodeError,
    ValidationError,
    ValueError,
)


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def task_id_for(section: Section, name: str) -> str:
    """Return the section-scoped identity assigned to a task named ``name``."""

    return f"{section.identity}::{name}"


class SourceParser(ABC):
    """Convert one configuration dialect into sections and tasks.

    Subclasses implement :meth:`sections` (which files exist under a root) and
    :meth:`_parse` (what one section contains). The public entry points never
    raise; failures are logged and the offending section yields no tasks.
    """

    section_kind: ClassVar[SectionKind]

    def __init__(self, config: LaunchdeckConfig, logger: ComponentLogger) -> None:
        self.config = config
        self.logger = logger

    @abstractmethod
    def sections(self, root: ProjectRoot) -> list[Section]:
        """Return the sections this dialect contributes for ``root``."""

    @abstractmethod
    def _parse(self, section: Section) -> list[DiscoveredTask]:
        """Return the tasks of ``section``; may raise any recoverable error."""

    def tasks(self, section: Section) -> list[DiscoveredTask]:
        """Return the tasks of ``section`` without raising."""

        try:
            return self._parse(section)
        except RECOVERABLE_ERRORS as exc:
            return self._recover(section, exc)

    def discover(self, root: ProjectRoot) -> list[Section]:
        """Return the sections for ``root`` without raising."""

        try:
            return self.sections(root)
        except RECOVERABLE_ERRORS as exc:
            self.logger.warn(f"Unable to locate sources in {root.name}: {exc}")
            return []

    def scan(self, root: ProjectRoot) -> list[DiscoveredTask]:
        """Return every task this dialect discovers under ``root``."""

        discovered: list[DiscoveredTask] = []
        for section in self.discover(root):
            discovered.extend(self.tasks(section))
        return discovered

    def _recover(self, section: Section, exc: Exception) -> list[DiscoveredTask]:
        self.logger.warn(f"Skipping {section.title} in {section.root.name if section.root else '?'}: {exc}")
        return []


__all__ = ["RECOVERABLE_ERRORS", "SourceParser", "read_text", "task_id_for"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reader for build-file (Makefile) targets."""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ..constants import BUILD_FILENAMES
from ..models import Dialect, DiscoveredTask, ProjectRoot, Section, SectionKind, ShellCommandSpec, SourcePosition
from .base import SourceParser, read_text, task_id_for

TARGET_PATTERN: Final[re.Pattern[str]] = re.compile(r"^([A-Za-z0-9_][A-Za-z0-9_.\-/]*)[ \t]*:(?![:=])")
PAGE_BREAKS: Final[str] = "\f\v"


@dataclass(slots=True, frozen=True)
class BuildTarget:
    """Target declared at the top level of a build file."""

    name: str
    line: int
    recipe: tuple[str, ...]
    column: int = 0


def split_lines(text: str) -> list[str]:
    """Split ``text`` on newlines only; form feeds and other separators stay in the line."""

    return text.split("\n")


def parse_targets(text: str) -> list[BuildTarget]:
    """Return targets in file order with their recipe preview lines.

    A recipe is the run of indented, non-comment lines immediately following the
    declaration; it stops at the first line that is not indented. Repeated
    declarations keep the first occurrence.
    """

    lines = split_lines(text)
    targets: list[BuildTarget] = []
    seen: set[str] = set()
    for index, line in enumerate(lines):
        content = line.lstrip(PAGE_BREAKS)
        match = TARGET_PATTERN.match(content)
        if match is None:
            continue
        name = match.group(1)
        if name in seen:
            continue
        seen.add(name)
        recipe: list[str] = []
        for follower in lines[index + 1 :]:
            follower = follower.lstrip(PAGE_BREAKS)
            if not follower[:1].isspace() or not follower.strip():
                break
            stripped = follower.strip()
            if stripped.startswith("#"):
                continue
            recipe.append(stripped)
        column = len(line) - len(content)
        targets.append(BuildTarget(name=name, line=index, recipe=tuple(recipe), column=column))
    return targets


def make_command(build_file: Path, target: str) -> str:
    """Return the shell command that builds ``target`` from ``build_file``."""

    if build_file.name in BUILD_FILENAMES:
        return f"make {shlex.quote(target)}"
    return f"make -f {shlex.quote(build_file.name)} {shlex.quote(target)}"


class BuildFileParser(SourceParser):
    """Emit one task per top-level target of the first build file found in a root."""

    section_kind = SectionKind.BUILD_TARGETS

    def locate(self, root: ProjectRoot) -> Path | None:
        for filename in self.config.build_files:
            candidate = root.path / filename
            if candidate.is_file():
                return candidate
        return None

    def sections(self, root: ProjectRoot) -> list[Section]:
        build_file = self.locate(root)
        if build_file is None:
            return []
        title = f"{build_file.name} Targets"
        return [Section(kind=self.section_kind, title=title, root=root, manifest_path=build_file)]

    def _parse(self, section: Section) -> list[DiscoveredTask]:
        root = section.root
        build_file = section.manifest_path
        if root is None or build_file is None:
            raise ValueError(f"section {section.identity} is not bound to a build file")
        text = read_text(build_file)
        lines = split_lines(text)
        starts = _line_starts(lines)
        tasks: list[DiscoveredTask] = []
        for target in parse_targets(text):
            declaration = lines[target.line].rstrip("\r")
            line_start = starts[target.line]
            position = SourcePosition.from_offsets(text, line_start + target.column, line_start + len(declaration))
            tasks.append(
                DiscoveredTask(
                    name=target.name,
                    dialect=Dialect.BUILD_TARGET,
                    source_file=build_file,
                    root=root,
                    execution=ShellCommandSpec(
                        command=make_command(build_file, target.name),
                        cwd=build_file.parent,
                        target=target.name,
                    ),
                    position=position,
                    detail="\n".join(target.recipe),
                    task_id=task_id_for(section, target.name),
                ),
            )
        return tasks


def _line_starts(lines: list[str]) -> list[int]:
    starts: list[int] = []
    offset = 0
    for line in lines:
        starts.append(offset)
        offset += len(line) + 1
    return starts


__all__ = ["BuildFileParser", "BuildTarget", "make_command", "parse_targets", "split_lines"]

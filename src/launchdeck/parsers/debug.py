# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reader for the IDE debug configuration file (``.vscode/launch.json``)."""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Final

from ..config import LaunchdeckConfig
from ..errors import MalformedSourceError
from ..logging import ComponentLogger
from ..models import (
    CompoundLaunchSpec,
    DebugLaunchSpec,
    DiagnosticSpec,
    Dialect,
    DiscoveredTask,
    ProjectRoot,
    Section,
    SectionKind,
    SourcePosition,
)
from .base import SourceParser, read_text, task_id_for
from .jsonc import JsoncLoader, load_jsonc

SECTION_TITLE: Final[str] = "Debug Configurations"
_QUOTES: Final[str] = "\"'"


def _skip_string(text: str, index: int) -> int:
    """Return the offset just past the string literal opening at ``index``."""

    quote = text[index]
    cursor = index + 1
    length = len(text)
    while cursor < length:
        char = text[cursor]
        if char == "\\":
            cursor += 2
            continue
        if char == quote:
            return cursor + 1
        if char == "\n":
            return cursor
        cursor += 1
    return length


def _skip_comment(text: str, index: int) -> int | None:
    if text.startswith("//", index):
        end = text.find("\n", index)
        return len(text) if end == -1 else end
    if text.startswith("/*", index):
        end = text.find("*/", index + 2)
        return len(text) if end == -1 else end + 2
    return None


def _tokens(text: str, start: int) -> Iterator[tuple[int, str]]:
    """Yield ``(offset, brace)`` pairs from ``start`` ignoring strings and comments."""

    cursor = start
    length = len(text)
    while cursor < length:
        char = text[cursor]
        if char in _QUOTES:
            cursor = _skip_string(text, cursor)
            continue
        if char == "/" and (after := _skip_comment(text, cursor)) is not None:
            cursor = after
            continue
        if char in "{}":
            yield cursor, char
        cursor += 1


def _enclosing_brace(text: str, offset: int) -> int | None:
    """Return the offset of the ``{`` that encloses ``offset``.

    ``None`` is returned when no object encloses the offset or when ``offset``
    lies inside a string or comment.
    """

    stack: list[int] = []
    cursor = 0
    while cursor < offset:
        char = text[cursor]
        if char in _QUOTES:
            cursor = _skip_string(text, cursor)
            continue
        if char == "/" and (after := _skip_comment(text, cursor)) is not None:
            cursor = after
            continue
        if char == "{":
            stack.append(cursor)
        elif char == "}" and stack:
            stack.pop()
        cursor += 1
    if cursor != offset:
        return None
    return stack[-1] if stack else None


def _closing_brace(text: str, open_index: int) -> int | None:
    """Return the offset one past the ``}`` balancing ``open_index``, or ``None``."""

    depth = 0
    for offset, brace in _tokens(text, open_index):
        depth += 1 if brace == "{" else -1
        if depth == 0:
            return offset + 1
    return None


def find_block_span(text: str, name: str, *, search_from: int = 0) -> tuple[int, int] | None:
    """Locate the object literal whose ``name`` member equals ``name``.

    The name is JSON-encoded and regex-escaped before matching, so names
    containing quotes or regex metacharacters are found literally.

    Args:
        text: Raw document text.
        name: Configuration name to locate.
        search_from: Offset from which candidate ``name`` members are considered.

    Returns:
        tuple[int, int] | None: ``(start, end)`` offsets of the block, or ``None``
        when the name is absent or brace balancing runs off the end of the text.
    """

    pattern = re.compile(r'"name"\s*:\s*' + re.escape(json.dumps(name, ensure_ascii=False)))
    for match in pattern.finditer(text, search_from):
        opening = _enclosing_brace(text, match.start())
        if opening is None:
            continue
        closing = _closing_brace(text, opening)
        if closing is None:
            return None
        return opening, closing
    return None


def _key_offset(text: str, key: str) -> int:
    match = re.search(rf'"{re.escape(key)}"\s*:', text)
    return match.end() if match else 0


def _sort_key(entry: Mapping[str, Any]) -> tuple[str, str]:
    name = str(entry["name"])
    return name.casefold(), name


class DebugConfigurationParser(SourceParser):
    """Read ``configurations`` and ``compounds`` from the debug configuration file."""

    section_kind = SectionKind.DEBUG

    def __init__(
        self,
        config: LaunchdeckConfig,
        logger: ComponentLogger,
        *,
        loader: JsoncLoader = load_jsonc,
    ) -> None:
        super().__init__(config, logger)
        self._loader = loader

    def source_path(self, root: ProjectRoot) -> Path:
        return root.path / self.config.debug_config_path

    def sections(self, root: ProjectRoot) -> list[Section]:
        if not self.source_path(root).is_file():
            return []
        return [Section(kind=self.section_kind, title=SECTION_TITLE, root=root)]

    def _parse(self, section: Section) -> list[DiscoveredTask]:
        root = _require_root(section)
        path = self.source_path(root)
        text = read_text(path)
        try:
            document = self._loader(text)
        except ValueError as exc:
            raise MalformedSourceError(path, str(exc)) from exc
        if not isinstance(document, Mapping):
            raise MalformedSourceError(path, "expected an object at the top level")
        configurations = _entries(document, "configurations", path)
        compounds = _entries(document, "compounds", path)

        tasks: list[DiscoveredTask] = []
        configurations_from = _key_offset(text, "configurations")
        for entry in sorted(self._valid_configurations(configurations, path), key=_sort_key):
            name = entry["name"]
            tasks.append(
                DiscoveredTask(
                    name=name,
                    dialect=Dialect.DEBUG,
                    source_file=path,
                    root=root,
                    execution=DebugLaunchSpec(configuration=dict(entry)),
                    position=_position(text, name, configurations_from),
                    detail=str(entry["type"]),
                    task_id=task_id_for(section, name),
                ),
            )
        compounds_from = _key_offset(text, "compounds")
        for entry in sorted(self._valid_compounds(compounds, path), key=_sort_key):
            name = entry["name"]
            members = [str(member) for member in entry["configurations"]]
            tasks.append(
                DiscoveredTask(
                    name=name,
                    dialect=Dialect.COMPOUND,
                    source_file=path,
                    root=root,
                    execution=CompoundLaunchSpec(configurations=members),
                    position=_position(text, name, compounds_from),
                    detail=f"compound: {', '.join(members)}",
                    task_id=task_id_for(section, name),
                ),
            )
        self.logger.debug(f"debug configurations root={root.name} count={len(tasks)}")
        return tasks

    def _recover(self, section: Section, exc: Exception) -> list[DiscoveredTask]:
        if not isinstance(exc, MalformedSourceError) or section.root is None:
            return super()._recover(section, exc)
        root = section.root
        name = f"Error in {root.name}/{self.config.debug_config_path}"
        self.logger.error(f"Unable to parse {exc.path}: {exc.message}")
        return [
            DiscoveredTask(
                name=name,
                dialect=Dialect.DEBUG,
                source_file=exc.path,
                root=root,
                execution=DiagnosticSpec(message=exc.message),
                detail=exc.message,
                task_id=task_id_for(section, name),
            ),
        ]

    def _valid_configurations(self, entries: list[Any], path: Path) -> Iterator[Mapping[str, Any]]:
        for entry in entries:
            if isinstance(entry, Mapping) and _nonblank(entry.get("name")) and _nonblank(entry.get("type")):
                yield entry
                continue
            self.logger.debug(f"skipping debug configuration without name/type file={path}")

    def _valid_compounds(self, entries: list[Any], path: Path) -> Iterator[Mapping[str, Any]]:
        for entry in entries:
            if (
                isinstance(entry, Mapping)
                and _nonblank(entry.get("name"))
                and isinstance(entry.get("configurations"), list)
            ):
                yield entry
                continue
            self.logger.debug(f"skipping compound without name/configurations file={path}")


def _require_root(section: Section) -> ProjectRoot:
    if section.root is None:
        raise ValueError(f"section {section.identity} has no project root")
    return section.root


def _nonblank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _entries(document: Mapping[str, Any], key: str, path: Path) -> list[Any]:
    value = document.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedSourceError(path, f"'{key}' must be an array")
    return value


def _position(text: str, name: str, search_from: int) -> SourcePosition | None:
    span = find_block_span(text, name, search_from=search_from)
    if span is None and search_from:
        span = find_block_span(text, name)
    if span is None:
        return None
    return SourcePosition.from_offsets(text, *span)


__all__ = ["DebugConfigurationParser", "find_block_span"]

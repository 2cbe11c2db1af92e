# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reader for ``package.json`` scripts, including nested workspace manifests."""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from ..constants import MANIFEST_FILENAME
from ..errors import MalformedSourceError
from ..models import Dialect, DiscoveredTask, ProjectRoot, Section, SectionKind, ShellCommandSpec, SourcePosition
from ..package_manager import resolve, resolve_inherited
from ..paths import relative_key
from .base import SourceParser, read_text, task_id_for

SECTION_TITLE: Final[str] = "Scripts"


def _script_position(text: str, name: str) -> SourcePosition | None:
    """Return the span of the ``"name": ...`` entry inside the ``scripts`` object."""

    scripts_key = re.search(r'"scripts"\s*:', text)
    search_from = scripts_key.end() if scripts_key else 0
    pattern = re.compile(re.escape(json.dumps(name, ensure_ascii=False)) + r"\s*:")
    match = pattern.search(text, search_from)
    if match is None:
        return None
    line_end = text.find("\n", match.start())
    end = len(text) if line_end == -1 else line_end
    return SourcePosition.from_offsets(text, match.start(), end)


class ManifestScriptParser(SourceParser):
    """Emit one section per manifest and one task per script entry."""

    section_kind = SectionKind.SCRIPTS

    def discover_manifests(self, root: ProjectRoot) -> list[Path]:
        """Return the root manifest followed by nested manifests sorted by relative path.

        Nested manifests are searched at most ``manifest_depth`` directory levels
        below the root; dependency-cache directories are never entered.
        """

        excluded = self.config.dependency_dir_set
        depth_limit = self.config.manifest_depth
        nested: list[Path] = []
        for current, dirnames, filenames in os.walk(root.path):
            current_path = Path(current)
            depth = len(current_path.relative_to(root.path).parts)
            if depth < depth_limit:
                dirnames[:] = sorted(name for name in dirnames if name not in excluded)
            else:
                dirnames[:] = []
            if depth and MANIFEST_FILENAME in filenames:
                nested.append(current_path / MANIFEST_FILENAME)
        nested.sort(key=lambda path: (relative_key(path, root.path).casefold(), relative_key(path, root.path)))
        manifests: list[Path] = []
        root_manifest = root.path / MANIFEST_FILENAME
        if root_manifest.is_file():
            manifests.append(root_manifest)
        manifests.extend(nested)
        return manifests

    def sections(self, root: ProjectRoot) -> list[Section]:
        sections: list[Section] = []
        for manifest in self.discover_manifests(root):
            if manifest.parent == root.path:
                title = SECTION_TITLE
            else:
                title = f"{relative_key(manifest.parent, root.path)}: {SECTION_TITLE}"
            sections.append(Section(kind=self.section_kind, title=title, root=root, manifest_path=manifest))
        return sections

    def _parse(self, section: Section) -> list[DiscoveredTask]:
        root = section.root
        manifest_path = section.manifest_path
        if root is None or manifest_path is None:
            raise ValueError(f"section {section.identity} is not bound to a manifest")
        text = read_text(manifest_path)
        try:
            document = json.loads(text)
        except ValueError as exc:
            raise MalformedSourceError(manifest_path, str(exc)) from exc
        if not isinstance(document, Mapping):
            raise MalformedSourceError(manifest_path, "expected an object at the top level")
        scripts = document.get("scripts")
        if not isinstance(scripts, Mapping) or not scripts:
            return []

        inherited = resolve_inherited(root.path, logger=self.logger)
        manager = resolve(manifest_path, inherited, workspace_root=root.path, logger=self.logger)
        self.logger.debug(f"scripts manifest={relative_key(manifest_path, root.path)} manager={manager.value}")

        tasks: list[DiscoveredTask] = []
        for name in sorted(scripts, key=lambda key: (key.casefold(), key)):
            body = scripts[name]
            if not isinstance(body, str) or not name.strip():
                self.logger.debug(f"skipping script with non-string body name={name!r}")
                continue
            tasks.append(
                DiscoveredTask(
                    name=name,
                    dialect=Dialect.SCRIPT,
                    source_file=manifest_path,
                    root=root,
                    execution=ShellCommandSpec(
                        command=manager.run_command(name),
                        cwd=manifest_path.parent,
                        target=name,
                    ),
                    position=_script_position(text, name),
                    detail=body,
                    task_id=task_id_for(section, name),
                ),
            )
        return tasks


__all__ = ["ManifestScriptParser"]

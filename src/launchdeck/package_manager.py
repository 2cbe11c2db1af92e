# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decide which package manager should run the scripts of a manifest."""

from __future__ import annotations

import json
import re
import shlex
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Final

from .constants import MANIFEST_FILENAME
from .logging import ComponentLogger


class PackageManager(str, Enum):
    """Enumerate the supported script runners."""

    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"

    def run_command(self, script: str) -> str:
        return f"{self.value} run {shlex.quote(script)}"


DEFAULT_PACKAGE_MANAGER: Final[PackageManager] = PackageManager.NPM

LOCKFILES: Final[tuple[tuple[str, PackageManager], ...]] = (
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("package-lock.json", PackageManager.NPM),
)

_ENGINE_ORDER: Final[tuple[PackageManager, ...]] = (
    PackageManager.NPM,
    PackageManager.YARN,
    PackageManager.PNPM,
)

_INVOCATION_PATTERNS: Final[dict[PackageManager, re.Pattern[str]]] = {
    manager: re.compile(rf"(?<![\w./-]){manager.value}\b") for manager in PackageManager
}


def _declared_manager(manifest: Mapping[str, Any]) -> PackageManager | None:
    declared = manifest.get("packageManager")
    if isinstance(declared, str):
        lowered = declared.strip().lower()
        for manager in (PackageManager.PNPM, PackageManager.YARN, PackageManager.NPM):
            if lowered.startswith(f"{manager.value}@") or lowered == manager.value:
                return manager
    engines = manifest.get("engines")
    if isinstance(engines, Mapping):
        for manager in _ENGINE_ORDER:
            if engines.get(manager.value):
                return manager
    return None


def _script_manager(manifest: Mapping[str, Any]) -> PackageManager | None:
    """Return the only package manager invoked by the manifest's scripts, if exactly one is."""

    scripts = manifest.get("scripts")
    if not isinstance(scripts, Mapping):
        return None
    bodies = " ".join(str(body) for body in scripts.values())
    used = [manager for manager, pattern in _INVOCATION_PATTERNS.items() if pattern.search(bodies)]
    return used[0] if len(used) == 1 else None


def lockfile_manager(directory: Path) -> PackageManager | None:
    """Return the manager implied by the first lock file present in ``directory``."""

    for filename, manager in LOCKFILES:
        if (directory / filename).is_file():
            return manager
    return None


def _read_manifest(manifest_path: Path, logger: ComponentLogger | None) -> Mapping[str, Any]:
    try:
        document = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        if logger is not None:
            logger.debug(f"package manager detection skipped manifest={manifest_path} error={exc}")
        return {}
    return document if isinstance(document, Mapping) else {}


def resolve(
    manifest_path: Path,
    inherited: PackageManager | None = None,
    *,
    workspace_root: Path | None = None,
    logger: ComponentLogger | None = None,
) -> PackageManager:
    """Return the package manager that should run scripts from ``manifest_path``.

    Each rule short-circuits:

    1. a non-root manifest adopts ``inherited`` when supplied;
    2. ``packageManager`` or ``engines`` declarations in the manifest;
    3. scripts that invoke exactly one manager;
    4. a lock file beside the manifest;
    5. a lock file at the workspace root;
    6. npm.

    Args:
        manifest_path: Path of the ``package.json`` being resolved.
        inherited: Choice resolved for the workspace's top-level manifest.
        workspace_root: Directory holding the top-level manifest. Defaults to the
            manifest's own directory, which makes the manifest the root manifest.
        logger: Optional logger receiving debug diagnostics.

    Returns:
        PackageManager: Selected manager.
    """

    manifest_dir = manifest_path.parent
    root_dir = workspace_root if workspace_root is not None else manifest_dir
    is_root_manifest = manifest_dir.resolve() == root_dir.resolve()

    if inherited is not None and not is_root_manifest:
        return inherited

    return _detect(manifest_path, root_dir, is_root_manifest, logger) or DEFAULT_PACKAGE_MANAGER


def _detect(
    manifest_path: Path,
    root_dir: Path,
    is_root_manifest: bool,
    logger: ComponentLogger | None,
) -> PackageManager | None:
    manifest = _read_manifest(manifest_path, logger)
    if (declared := _declared_manager(manifest)) is not None:
        return declared
    if (scripted := _script_manager(manifest)) is not None:
        return scripted
    if (local := lockfile_manager(manifest_path.parent)) is not None:
        return local
    if not is_root_manifest:
        return lockfile_manager(root_dir)
    return None


def resolve_inherited(workspace_root: Path, *, logger: ComponentLogger | None = None) -> PackageManager | None:
    """Return the choice nested manifests under ``workspace_root`` should inherit.

    The top-level manifest's own resolution wins unless it only fell back to
    the default; otherwise a lock file at the workspace root decides. ``None``
    means nested manifests resolve on their own.
    """

    root_manifest = workspace_root / MANIFEST_FILENAME
    if root_manifest.is_file() and (
        detected := _detect(root_manifest, workspace_root, True, logger)
    ) is not None:
        return detected
    return lockfile_manager(workspace_root)


__all__ = [
    "DEFAULT_PACKAGE_MANAGER",
    "LOCKFILES",
    "PackageManager",
    "lockfile_manager",
    "resolve",
    "resolve_inherited",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reasoning about filesystem paths relative to project roots."""

from __future__ import annotations

import os
from os import PathLike
from pathlib import Path

_Pathish = str | PathLike[str] | Path


def best_effort_resolve(path: Path) -> Path:
    """Return ``path`` resolved where possible without raising.

    Args:
        path: Candidate path to resolve.

    Returns:
        Path: Absolute variant when resolution succeeds; otherwise the closest
        achievable approximation.
    """

    try:
        return path.resolve(strict=False)
    except (OSError, RuntimeError):
        return path.absolute() if not path.is_absolute() else path


def normalize_path(path: _Pathish, *, base_dir: _Pathish) -> Path:
    """Return ``path`` relative to ``base_dir`` when they share a lineage.

    Args:
        path: Filesystem path supplied by the caller.
        base_dir: Base directory used to relativise the path.

    Returns:
        Path: Relative path when both inputs share a lineage, otherwise the
        resolved absolute candidate.
    """

    raw_path = Path(path).expanduser()
    base = best_effort_resolve(Path(base_dir).expanduser())
    candidate = best_effort_resolve(raw_path if raw_path.is_absolute() else base / raw_path)
    try:
        return candidate.relative_to(base)
    except ValueError:
        try:
            return Path(os.path.relpath(candidate, base))
        except ValueError:
            return candidate


def relative_key(path: _Pathish | None, root: _Pathish) -> str:
    """Return a POSIX key for ``path`` relative to ``root``; blank for ``None``.

    The key is stable across scans of an unchanged tree, so it is safe to embed
    in persisted identities.
    """

    if path is None:
        return ""
    key = normalize_path(path, base_dir=root).as_posix()
    return "" if key == "." else key


__all__ = ["best_effort_resolve", "normalize_path", "relative_key"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Well-known file names, storage keys and limits."""

from __future__ import annotations

from typing import Final

PROJECT_NAME: Final[str] = "launchdeck"

DEBUG_CONFIG_PATH: Final[str] = ".vscode/launch.json"
MANIFEST_FILENAME: Final[str] = "package.json"
BUILD_FILENAMES: Final[tuple[str, ...]] = ("Makefile", "makefile", "GNUmakefile")
RUN_CONFIG_DIRS: Final[tuple[str, ...]] = (".run", ".idea/runConfigurations")

DEFAULT_MANIFEST_DEPTH: Final[int] = 2
DEFAULT_RECENT_CAPACITY: Final[int] = 10

DEPENDENCY_CACHE_DIRS: Final[frozenset[str]] = frozenset(
    {
        "node_modules",
        "bower_components",
        "jspm_packages",
        ".pnpm-store",
        ".yarn",
        ".git",
    },
)

RECENT_ITEMS_KEY: Final[str] = "launchdeck.recentItems"
HIDDEN_ITEMS_KEY: Final[str] = "launchdeck.hiddenItems"
HIDDEN_SECTIONS_KEY: Final[str] = "launchdeck.hiddenSections"

RECENT_SECTION_ID: Final[str] = "recent"
RECENT_SECTION_TITLE: Final[str] = "Recently Used"

PROJECT_DIR_TOKENS: Final[tuple[str, ...]] = ("$PROJECT_DIR$", "$MODULE_DIR$")

__all__ = [
    "BUILD_FILENAMES",
    "DEBUG_CONFIG_PATH",
    "DEFAULT_MANIFEST_DEPTH",
    "DEFAULT_RECENT_CAPACITY",
    "DEPENDENCY_CACHE_DIRS",
    "HIDDEN_ITEMS_KEY",
    "HIDDEN_SECTIONS_KEY",
    "MANIFEST_FILENAME",
    "PROJECT_DIR_TOKENS",
    "PROJECT_NAME",
    "RECENT_ITEMS_KEY",
    "RECENT_SECTION_ID",
    "RECENT_SECTION_TITLE",
    "RUN_CONFIG_DIRS",
]

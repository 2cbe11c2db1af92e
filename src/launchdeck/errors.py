# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by parsers, stores and the launcher."""

from __future__ import annotations

from pathlib import Path


class LaunchdeckError(Exception):
    """Base class for all launchdeck failures."""


class ConfigError(LaunchdeckError):
    """Raised when configuration input is invalid."""


class MalformedSourceError(LaunchdeckError):
    """Raised when a configuration file exists but cannot be parsed."""

    def __init__(self, path: Path, message: str) -> None:
        """Initialise the error with the offending ``path`` and parser ``message``.

        Args:
            path: Configuration file that failed to parse.
            message: Human-readable parser diagnostic.
        """

        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class UnresolvedExecutionSpecError(LaunchdeckError):
    """Raised when a dialect extractor cannot determine what to run."""


class LaunchError(LaunchdeckError):
    """Raised when an execution request cannot be started."""


class StateStoreError(LaunchdeckError):
    """Raised when persisted state cannot be written."""


__all__ = [
    "ConfigError",
    "LaunchError",
    "LaunchdeckError",
    "MalformedSourceError",
    "StateStoreError",
    "UnresolvedExecutionSpecError",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from launchdeck.config import LaunchdeckConfig
from launchdeck.logging import ComponentLogger, build_logger
from launchdeck.models import ProjectRoot
from launchdeck.state import MemoryStore


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    """Return a helper writing text files and creating parent directories."""

    return _write


@pytest.fixture
def make_root(tmp_path: Path) -> Callable[..., ProjectRoot]:
    """Return a factory creating named project roots below ``tmp_path``."""

    def _make(name: str = "project") -> ProjectRoot:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        return ProjectRoot.from_path(directory)

    return _make


@pytest.fixture
def root(make_root: Callable[..., ProjectRoot]) -> ProjectRoot:
    return make_root()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def capture_logger() -> ComponentLogger:
    """Return a debug-enabled logger writing into an in-memory console."""

    console = Console(file=StringIO(), no_color=True, width=200)
    return build_logger("test", debug=True, console=console)


@pytest.fixture
def config() -> LaunchdeckConfig:
    return LaunchdeckConfig()

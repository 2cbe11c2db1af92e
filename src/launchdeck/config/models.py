# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typed configuration models for launchdeck."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import (
    BUILD_FILENAMES,
    DEBUG_CONFIG_PATH,
    DEFAULT_MANIFEST_DEPTH,
    DEFAULT_RECENT_CAPACITY,
    DEPENDENCY_CACHE_DIRS,
    RUN_CONFIG_DIRS,
)


class OutputConfig(BaseModel):
    """Rendering preferences shared by the CLI and the component loggers."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    emoji: bool = False
    color: bool = True
    debug: bool = False


class LaunchdeckConfig(BaseModel):
    """Resolved configuration controlling discovery, persistence and output."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    recent_capacity: int = Field(default=DEFAULT_RECENT_CAPACITY, ge=1)
    manifest_depth: int = Field(default=DEFAULT_MANIFEST_DEPTH, ge=0)
    dependency_dirs: list[str] = Field(default_factory=lambda: sorted(DEPENDENCY_CACHE_DIRS))
    debug_config_path: str = DEBUG_CONFIG_PATH
    run_config_dirs: list[str] = Field(default_factory=lambda: list(RUN_CONFIG_DIRS))
    build_files: list[str] = Field(default_factory=lambda: list(BUILD_FILENAMES))
    state_file: Path = Field(default_factory=lambda: Path("~/.launchdeck/state.json"))
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("run_config_dirs", "build_files", "dependency_dirs")
    @classmethod
    def _reject_blank_entries(cls, value: list[str]) -> list[str]:
        if any(not entry.strip() for entry in value):
            raise ValueError("entries must be non-empty strings")
        return value

    @field_validator("debug_config_path")
    @classmethod
    def _require_relative(cls, value: str) -> str:
        if not value.strip() or Path(value).is_absolute():
            raise ValueError("debug_config_path must be a relative path")
        return value

    @property
    def dependency_dir_set(self) -> frozenset[str]:
        return frozenset(self.dependency_dirs)

    def resolved_state_file(self) -> Path:
        return self.state_file.expanduser()

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping of the configuration."""

        return self.model_dump(mode="json")


__all__ = ["LaunchdeckConfig", "OutputConfig"]

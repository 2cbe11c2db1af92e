# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Config loading utilities with layered precedence and traceability."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ConfigError
from .models import LaunchdeckConfig
from .sources import ConfigSource, DefaultConfigSource, PyProjectConfigSource, TomlConfigSource, deep_merge

USER_CONFIG_FILENAME: Final[str] = ".launchdeck.toml"
PROJECT_CONFIG_FILENAME: Final[str] = ".launchdeck.toml"


class ConfigLoadResult(BaseModel):
    """Container bundling a resolved config with the sources that shaped it."""

    model_config = ConfigDict(validate_assignment=True)

    config: LaunchdeckConfig
    applied_sources: list[str] = Field(default_factory=list)


class ConfigLoader:
    """Apply layered configuration sources with predictable precedence."""

    def __init__(self, *, sources: Sequence[ConfigSource]) -> None:
        if not sources:
            raise ValueError("at least one configuration source is required")
        self._sources = list(sources)

    @classmethod
    def for_root(
        cls,
        project_root: Path,
        *,
        user_config: Path | None = None,
        project_config: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ConfigLoader:
        """Build a loader that respects user, project, and default sources.

        Args:
            project_root: Directory used to discover project configuration files.
            user_config: Optional path to a user-level override.
            project_config: Optional project-level override path.
            env: Environment used for ``${VAR}`` expansion (defaults to ``os.environ``).

        Returns:
            ConfigLoader: Loader configured with default precedence ordering.
        """

        root = project_root.resolve()
        home_config = user_config if user_config is not None else Path.home() / USER_CONFIG_FILENAME
        project_file = project_config if project_config is not None else root / PROJECT_CONFIG_FILENAME
        pyproject = root / "pyproject.toml"
        sources: list[ConfigSource] = [
            DefaultConfigSource(),
            TomlConfigSource(home_config, name=str(home_config), env=env),
        ]
        if pyproject.exists():
            sources.append(PyProjectConfigSource(pyproject, env=env))
        if project_file != home_config:
            sources.append(TomlConfigSource(project_file, name=str(project_file), env=env))
        return cls(sources=sources)

    def load(self) -> LaunchdeckConfig:
        return self.load_with_trace().config

    def load_with_trace(self) -> ConfigLoadResult:
        """Return the resolved configuration with the names of contributing sources.

        Raises:
            ConfigError: If the merged payload fails validation.
        """

        merged: dict[str, Any] = {}
        applied: list[str] = []
        for source in self._sources:
            if not (fragment := source.load()):
                continue
            merged = deep_merge(merged, fragment)
            applied.append(source.name)
        try:
            config = LaunchdeckConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid launchdeck configuration: {exc}") from exc
        return ConfigLoadResult(config=config, applied_sources=applied)


def load_config(project_root: Path) -> LaunchdeckConfig:
    """Load configuration for ``project_root`` using the default tiered sources."""

    return ConfigLoader.for_root(project_root).load()


__all__ = ["ConfigLoadResult", "ConfigLoader", "load_config"]

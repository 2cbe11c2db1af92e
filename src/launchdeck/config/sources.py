# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Configuration fragments read from built-in defaults and TOML files."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Protocol

from ..errors import ConfigError
from .models import LaunchdeckConfig

DEFAULT_INCLUDE_KEY: Final[str] = "include"
PYPROJECT_TABLE: Final[tuple[str, ...]] = ("tool", "launchdeck")

_ENV_REFERENCE: Final[re.Pattern[str]] = re.compile(r"\$\{([^}]+)\}")


class ConfigSource(Protocol):
    """One layer of configuration consumed by :class:`~launchdeck.config.loader.ConfigLoader`."""

    name: str

    def load(self) -> Mapping[str, Any]: ...

    def describe(self) -> str: ...


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``base`` with ``override`` layered on top; nested tables merge key by key."""

    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        both_tables = isinstance(current, Mapping) and isinstance(value, Mapping)
        merged[key] = deep_merge(current, value) if both_tables else value
    return merged


def expand_env(value: Any, env: Mapping[str, str]) -> Any:
    """Substitute ``${NAME}`` references found in any string nested inside ``value``.

    References to variables missing from ``env`` stay as written.
    """

    if isinstance(value, str):
        return _ENV_REFERENCE.sub(lambda found: env.get(found.group(1), found.group(0)), value)
    if isinstance(value, Mapping):
        return {key: expand_env(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item, env) for item in value]
    return value


def read_toml_table(path: Path) -> dict[str, Any]:
    """Parse ``path`` as TOML.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Unable to read configuration at {path}: {exc}") from exc


def include_targets(declaration: Any, including_file: Path) -> list[Path]:
    """Return the files named by an include declaration, relative to ``including_file``.

    Raises:
        ConfigError: If the declaration is neither a path string nor a list of them.
    """

    if declaration is None:
        return []
    entries = declaration if isinstance(declaration, list) else [declaration]
    if not all(isinstance(entry, str) for entry in entries):
        raise ConfigError(f"Unsupported include declaration in {including_file}: {declaration!r}")
    return [including_file.parent / Path(entry).expanduser() for entry in entries]


class DefaultConfigSource:
    """Built-in defaults; always the lowest layer."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return LaunchdeckConfig().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """A TOML file whose ``include`` entries are merged underneath its own keys.

    Missing files contribute nothing. Included files are resolved relative to
    the file that names them, and an include cycle is an error.
    """

    def __init__(
        self,
        path: Path,
        *,
        name: str | None = None,
        include_key: str = DEFAULT_INCLUDE_KEY,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.path = path
        self.name = name or str(path)
        self.include_key = include_key
        self.env = os.environ if env is None else env

    def load(self) -> Mapping[str, Any]:
        return expand_env(self._collect(self.path, []), self.env)

    def _collect(self, path: Path, chain: list[Path]) -> dict[str, Any]:
        if not path.exists():
            return {}
        if path in chain:
            cycle = " -> ".join(str(step) for step in [*chain, path])
            raise ConfigError(f"Circular include detected: {cycle}")
        document = read_toml_table(path)
        layered: dict[str, Any] = {}
        for target in include_targets(document.pop(self.include_key, None), path):
            layered = deep_merge(layered, self._collect(target, [*chain, path]))
        return deep_merge(layered, document)

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """The ``[tool.launchdeck]`` table of a ``pyproject.toml``."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        super().__init__(path, name=str(path), env=env)

    def load(self) -> Mapping[str, Any]:
        table: Any = super().load()
        for key in PYPROJECT_TABLE:
            table = table.get(key) if isinstance(table, Mapping) else None
        return dict(table) if isinstance(table, Mapping) else {}

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


__all__ = [
    "ConfigSource",
    "DEFAULT_INCLUDE_KEY",
    "DefaultConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "deep_merge",
    "expand_env",
    "include_targets",
    "read_toml_table",
]

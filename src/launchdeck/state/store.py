# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Key-value persistence backing the recency and visibility stores."""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Protocol, TypeAlias, runtime_checkable

from ..errors import StateStoreError
from ..logging import ComponentLogger

JsonValue: TypeAlias = Any


@runtime_checkable
class KeyValueStore(Protocol):
    """Persistent storage the host provides; values are JSON-serialisable."""

    def get(self, key: str) -> JsonValue | None: ...

    def set(self, key: str, value: JsonValue) -> None: ...


class MemoryStore:
    """In-process store used by embedding hosts and tests."""

    def __init__(self, initial: dict[str, JsonValue] | None = None) -> None:
        self._data: dict[str, JsonValue] = json.loads(json.dumps(initial or {}))
        self.writes = 0

    def get(self, key: str) -> JsonValue | None:
        value = self._data.get(key)
        return json.loads(json.dumps(value)) if value is not None else None

    def set(self, key: str, value: JsonValue) -> None:
        self._data[key] = json.loads(json.dumps(value))
        self.writes += 1


class JsonFileStore:
    """Persist every key into one JSON document on disk.

    Reads are cached after the first load. A document that cannot be read or
    decoded is logged and treated as empty; writes replace the file atomically
    and raise :class:`StateStoreError` on failure. Concurrent writers are not
    detected, so the last write wins.
    """

    def __init__(self, path: Path, logger: ComponentLogger) -> None:
        self._path = path
        self._logger = logger
        self._lock = threading.Lock()
        self._data: dict[str, JsonValue] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> JsonValue | None:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: JsonValue) -> None:
        with self._lock:
            data = dict(self._load())
            data[key] = value
            self._write(data)
            self._data = data

    def _load(self) -> dict[str, JsonValue]:
        if self._data is not None:
            return self._data
        self._data = {}
        if not self._path.is_file():
            return self._data
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self._logger.warn(f"Ignoring unreadable state file {self._path}: {exc}")
            return self._data
        if not isinstance(raw, dict):
            self._logger.warn(f"Ignoring state file {self._path}: expected a JSON object")
            return self._data
        self._data = raw
        return self._data

    def _write(self, data: dict[str, JsonValue]) -> None:
        temporary = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temporary.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(temporary, self._path)
        except (OSError, TypeError, ValueError) as exc:
            raise StateStoreError(f"Unable to write state file {self._path}: {exc}") from exc


__all__ = ["JsonFileStore", "JsonValue", "KeyValueStore", "MemoryStore"]

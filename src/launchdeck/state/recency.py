# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bounded most-recently-used list of executed tasks."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence

from pydantic import ValidationError

from ..constants import DEFAULT_RECENT_CAPACITY, RECENT_ITEMS_KEY
from ..events import EventEmitter
from ..logging import ComponentLogger
from ..models import Dialect, DiscoveredTask, ProjectRoot, RecentEntry
from .store import KeyValueStore


class RecencyStore:
    """Record executed tasks most-recent-first, deduplicated by ``(name, dialect)``.

    Persisted entries are rehydrated at construction: an entry survives only if
    its recorded root (name and absolute path) is one of ``roots``. Entries that
    fail to rehydrate stay in storage until the next mutation rewrites the list.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        roots: Sequence[ProjectRoot],
        logger: ComponentLogger,
        *,
        capacity: int = DEFAULT_RECENT_CAPACITY,
        key: str = RECENT_ITEMS_KEY,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._storage = storage
        self._logger = logger
        self._capacity = capacity
        self._key = key
        self._lock = threading.Lock()
        self._roots = list(roots)
        self.changed: EventEmitter[None] = EventEmitter()
        self._entries = self._rehydrate()

    @property
    def capacity(self) -> int:
        return self._capacity

    def entries(self) -> list[RecentEntry]:
        """Return entries most-recent-first."""

        with self._lock:
            return list(self._entries)

    def tasks(self) -> list[DiscoveredTask]:
        """Return runnable tasks rebuilt from the entries against the live roots."""

        rebuilt: list[DiscoveredTask] = []
        for entry in self.entries():
            root = self._root_for(entry)
            if root is not None:
                rebuilt.append(entry.to_task(root))
        return rebuilt

    def record(self, task: DiscoveredTask) -> None:
        """Move ``task`` to the front, evicting the tail beyond capacity."""

        entry = RecentEntry.from_task(task)
        with self._lock:
            entries = [existing for existing in self._entries if existing.key != entry.key]
            entries.insert(0, entry)
            del entries[self._capacity :]
            self._persist(entries)
            self._entries = entries
        self._logger.debug(f"recorded name={task.name!r} dialect={task.dialect.value} size={len(entries)}")
        self.changed.fire(None)

    def remove(self, name: str, dialect: Dialect) -> bool:
        """Remove the entry matching ``(name, dialect)``.

        Returns:
            bool: ``True`` when an entry was removed.
        """

        with self._lock:
            entries = [existing for existing in self._entries if existing.key != (name, dialect)]
            if len(entries) == len(self._entries):
                return False
            self._persist(entries)
            self._entries = entries
        self.changed.fire(None)
        return True

    def remove_task(self, task: DiscoveredTask) -> bool:
        return self.remove(task.name, task.dialect)

    def clear(self) -> None:
        with self._lock:
            self._persist([])
            self._entries = []
        self.changed.fire(None)

    def _persist(self, entries: Iterable[RecentEntry]) -> None:
        self._storage.set(self._key, [entry.model_dump(mode="json") for entry in entries])

    def _root_for(self, entry: RecentEntry) -> ProjectRoot | None:
        for root in self._roots:
            if entry.matches_root(root):
                return root
        return None

    def _rehydrate(self) -> list[RecentEntry]:
        raw = self._storage.get(self._key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            self._logger.warn(f"Ignoring malformed recent list under {self._key}")
            return []
        entries: list[RecentEntry] = []
        seen: set[tuple[str, Dialect]] = set()
        for item in raw:
            try:
                entry = RecentEntry.model_validate(item)
            except ValidationError as exc:
                self._logger.debug(f"skipping unreadable recent entry error={exc.error_count()}")
                continue
            if self._root_for(entry) is None:
                self._logger.debug(f"recent entry root not open name={entry.name!r} root={entry.root_name}")
                continue
            if entry.key in seen:
                continue
            seen.add(entry.key)
            entries.append(entry)
        return entries[: self._capacity]


__all__ = ["RecencyStore"]

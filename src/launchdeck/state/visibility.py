# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-maintained exclusion sets for tasks and sections."""

from __future__ import annotations

import threading
from collections.abc import Callable

from pydantic import ValidationError

from ..constants import HIDDEN_ITEMS_KEY, HIDDEN_SECTIONS_KEY
from ..events import EventEmitter
from ..logging import ComponentLogger
from ..models import DiscoveredTask, HiddenEntry, Section
from .store import KeyValueStore


class VisibilityStore:
    """Persist hidden tasks and hidden sections as two independent lists.

    Hiding is a pure filter: callers consult :meth:`is_task_hidden` and
    :meth:`is_section_hidden` and nothing is ever deleted from the scan. Every
    mutation persists immediately and fires :attr:`changed` once.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        logger: ComponentLogger,
        *,
        tasks_key: str = HIDDEN_ITEMS_KEY,
        sections_key: str = HIDDEN_SECTIONS_KEY,
    ) -> None:
        self._storage = storage
        self._logger = logger
        self._tasks_key = tasks_key
        self._sections_key = sections_key
        self._lock = threading.Lock()
        self.changed: EventEmitter[None] = EventEmitter()
        self._tasks = self._load(tasks_key)
        self._sections = self._load(sections_key)

    # Queries

    def is_task_hidden(self, task_id: str) -> bool:
        with self._lock:
            return any(entry.id == task_id for entry in self._tasks)

    def is_section_hidden(self, section_id: str) -> bool:
        with self._lock:
            return any(entry.id == section_id for entry in self._sections)

    def hidden_tasks(self) -> list[HiddenEntry]:
        with self._lock:
            return list(self._tasks)

    def hidden_sections(self) -> list[HiddenEntry]:
        with self._lock:
            return list(self._sections)

    def hidden_count_for(self, section_id: str) -> int:
        """Return how many hidden tasks belong to the section ``section_id``."""

        with self._lock:
            return sum(1 for entry in self._tasks if entry.section_id == section_id)

    def total_hidden(self) -> int:
        with self._lock:
            return len(self._tasks) + len(self._sections)

    # Mutations

    def hide_task(self, task: DiscoveredTask, *, section_id: str | None = None) -> bool:
        """Hide ``task``; a task that is already hidden is left untouched.

        Args:
            task: Task to hide, identified by :attr:`DiscoveredTask.identity`.
            section_id: Identity of the section listing the task, used for
                hidden-count annotations.

        Returns:
            bool: ``True`` when the hidden set changed.
        """

        return self._add(self._tasks_key, HiddenEntry.for_task(task, section_id=section_id))

    def hide_section(self, section: Section) -> bool:
        return self._add(self._sections_key, HiddenEntry.for_section(section))

    def restore_task(self, task_id: str) -> bool:
        return self._discard(self._tasks_key, lambda entry: entry.id == task_id)

    def restore_section(self, section_id: str) -> bool:
        return self._discard(self._sections_key, lambda entry: entry.id == section_id)

    def clear_tasks(self) -> None:
        self._reset(tasks=True, sections=False)

    def clear_sections(self) -> None:
        self._reset(tasks=False, sections=True)

    def clear_all(self) -> None:
        self._reset(tasks=True, sections=True)

    # Internals

    def _entries_for(self, key: str) -> list[HiddenEntry]:
        return self._tasks if key == self._tasks_key else self._sections

    def _replace(self, key: str, entries: list[HiddenEntry]) -> None:
        self._storage.set(key, [entry.model_dump(mode="json") for entry in entries])
        if key == self._tasks_key:
            self._tasks = entries
        else:
            self._sections = entries

    def _add(self, key: str, entry: HiddenEntry) -> bool:
        with self._lock:
            current = self._entries_for(key)
            if any(existing.id == entry.id for existing in current):
                return False
            self._replace(key, [*current, entry])
        self._logger.debug(f"hidden kind={entry.kind} id={entry.id!r}")
        self.changed.fire(None)
        return True

    def _discard(self, key: str, predicate: Callable[[HiddenEntry], bool]) -> bool:
        with self._lock:
            current = self._entries_for(key)
            remaining = [entry for entry in current if not predicate(entry)]
            if len(remaining) == len(current):
                return False
            self._replace(key, remaining)
        self.changed.fire(None)
        return True

    def _reset(self, *, tasks: bool, sections: bool) -> None:
        with self._lock:
            if tasks:
                self._replace(self._tasks_key, [])
            if sections:
                self._replace(self._sections_key, [])
        self.changed.fire(None)

    def _load(self, key: str) -> list[HiddenEntry]:
        raw = self._storage.get(key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            self._logger.warn(f"Ignoring malformed hidden list under {key}")
            return []
        entries: list[HiddenEntry] = []
        for item in raw:
            try:
                entries.append(HiddenEntry.model_validate(item))
            except ValidationError as exc:
                self._logger.debug(f"skipping unreadable hidden entry key={key} error={exc.error_count()}")
        return entries


__all__ = ["VisibilityStore"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build the two-level section/task tree from every project root."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Mapping, Sequence

from .constants import RECENT_SECTION_TITLE
from .events import EventEmitter, Unsubscribe
from .logging import ComponentLogger
from .models import CatalogSnapshot, DiscoveredTask, ProjectRoot, Section, SectionKind
from .parsers import SourceParser
from .state import RecencyStore, VisibilityStore


def sort_roots(roots: Sequence[ProjectRoot]) -> list[ProjectRoot]:
    return sorted(roots, key=lambda root: (root.name.casefold(), root.name, str(root.path)))


class Aggregator:
    """Pull-model tree builder over the configured project roots.

    :meth:`list_sections` and :meth:`list_tasks` re-read the filesystem on every
    call; nothing from a previous scan is reused. :meth:`refresh` wraps both in a
    numbered :class:`CatalogSnapshot` and publishes it on :attr:`model_changed`.
    """

    def __init__(
        self,
        roots: Sequence[ProjectRoot],
        *,
        parsers: Mapping[SectionKind, SourceParser],
        recency: RecencyStore,
        visibility: VisibilityStore,
        logger: ComponentLogger,
    ) -> None:
        self._roots = sort_roots(roots)
        self._parsers = dict(parsers)
        self._recency = recency
        self._visibility = visibility
        self._logger = logger
        self._generation = itertools.count(1)
        self._generation_lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        self.model_changed: EventEmitter[CatalogSnapshot] = EventEmitter()
        self._subscriptions: list[Unsubscribe] = [
            recency.changed.subscribe(self._on_state_changed),
            visibility.changed.subscribe(self._on_state_changed),
        ]

    @property
    def roots(self) -> list[ProjectRoot]:
        return list(self._roots)

    @property
    def recency(self) -> RecencyStore:
        return self._recency

    @property
    def visibility(self) -> VisibilityStore:
        return self._visibility

    def recent_section(self) -> Section:
        return Section(kind=SectionKind.RECENT, title=RECENT_SECTION_TITLE)

    def list_sections(self, *, include_hidden: bool = False) -> list[Section]:
        """Return the recent section followed by each root's sections.

        Args:
            include_hidden: Also return sections the user has hidden.

        Returns:
            list[Section]: Sections annotated with their hidden-task counts.
        """

        sections = [self.recent_section()]
        for root in self._roots:
            for parser in self._parsers.values():
                for section in parser.discover(root):
                    identity = section.identity
                    if not include_hidden and self._visibility.is_section_hidden(identity):
                        continue
                    hidden = self._visibility.hidden_count_for(identity)
                    sections.append(section.model_copy(update={"hidden_count": hidden}))
        self._logger.debug(f"sections roots={len(self._roots)} count={len(sections)}")
        return sections

    def list_tasks(self, section: Section, *, include_hidden: bool = False) -> list[DiscoveredTask]:
        """Return the tasks of ``section`` with hidden tasks filtered out.

        The recent section is served from the recency store and is never
        filtered.
        """

        if section.kind is SectionKind.RECENT:
            return self._recency.tasks()
        if not include_hidden and self._visibility.is_section_hidden(section.identity):
            return []
        parser = self._parsers.get(section.kind)
        if parser is None:
            self._logger.warn(f"No parser registered for {section.kind.value}")
            return []
        tasks = parser.tasks(section)
        if include_hidden:
            return tasks
        return [task for task in tasks if not self._visibility.is_task_hidden(task.identity)]

    def find_section(self, section_id: str) -> Section | None:
        for section in self.list_sections(include_hidden=True):
            if section.identity == section_id:
                return section
        return None

    def find_task(self, section: Section, name: str) -> DiscoveredTask | None:
        for task in self.list_tasks(section, include_hidden=True):
            if task.name == name:
                return task
        return None

    def snapshot(self) -> CatalogSnapshot:
        """Scan every root once and return the numbered result."""

        with self._generation_lock:
            generation = next(self._generation)
        sections = self.list_sections()
        tasks = {section.catalog_key: self.list_tasks(section) for section in sections}
        return CatalogSnapshot(generation=generation, sections=sections, tasks=tasks)

    def refresh(self) -> CatalogSnapshot:
        """Build a snapshot and publish it on :attr:`model_changed`.

        Refreshes are serialised; a refresh requested while another runs waits
        for it and then performs its own full scan.
        """

        with self._refresh_lock:
            snapshot = self.snapshot()
        self._logger.debug(f"refresh generation={snapshot.generation} sections={len(snapshot.sections)}")
        self.model_changed.fire(snapshot)
        return snapshot

    def close(self) -> None:
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()

    def _on_state_changed(self, _payload: None) -> None:
        if self.model_changed.listener_count:
            self.refresh()


__all__ = ["Aggregator", "sort_roots"]

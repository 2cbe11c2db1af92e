# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""React to filesystem changes by rescanning the catalog."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path, PurePath

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from .aggregator import Aggregator
from .config import LaunchdeckConfig
from .constants import MANIFEST_FILENAME
from .logging import ComponentLogger
from .models import CatalogSnapshot, Dialect, ProjectRoot


def _is_run_config(parts: Sequence[str], config: LaunchdeckConfig) -> bool:
    lowered = [part.lower() for part in parts[:-1]]
    for relative in config.run_config_dirs:
        needle = [part.lower() for part in PurePath(relative).parts]
        width = len(needle)
        if any(lowered[index : index + width] == needle for index in range(len(lowered) - width + 1)):
            return True
    return False


def classify_change(path: str | os.PathLike[str], config: LaunchdeckConfig | None = None) -> Dialect | None:
    """Return the dialect whose sources include ``path``, or ``None``.

    Paths inside dependency-cache directories are never relevant.
    """

    settings = config or LaunchdeckConfig()
    candidate = PurePath(os.fspath(path))
    parts = candidate.parts
    if not parts or any(part in settings.dependency_dir_set for part in parts[:-1]):
        return None
    name = candidate.name
    debug_parts = PurePath(settings.debug_config_path).parts
    if tuple(parts[-len(debug_parts) :]) == debug_parts:
        return Dialect.DEBUG
    if name == MANIFEST_FILENAME:
        return Dialect.SCRIPT
    if name.lower().endswith(".xml") and _is_run_config(parts, settings):
        return Dialect.RUN_CONFIG
    if name in settings.build_files:
        return Dialect.BUILD_TARGET
    return None


class ChangeReactor:
    """Turn relevant change notifications into full aggregator refreshes."""

    def __init__(self, aggregator: Aggregator, logger: ComponentLogger, *, config: LaunchdeckConfig | None = None) -> None:
        self._aggregator = aggregator
        self._logger = logger
        self._config = config or LaunchdeckConfig()

    def is_relevant(self, path: str | os.PathLike[str]) -> bool:
        return classify_change(path, self._config) is not None

    def notify(self, path: str | os.PathLike[str], event: str = "modified") -> CatalogSnapshot | None:
        """Refresh the catalog when ``path`` belongs to a watched dialect.

        Args:
            path: File reported by the watcher.
            event: Change kind (``created``, ``modified``, ``deleted``, ``moved``).

        Returns:
            CatalogSnapshot | None: The refreshed snapshot, or ``None`` when the path is irrelevant.
        """

        dialect = classify_change(path, self._config)
        if dialect is None:
            return None
        self._logger.debug(f"change event={event} dialect={dialect.value} path={path}")
        return self._aggregator.refresh()


class WatchdogEventBridge(FileSystemEventHandler):
    """Forward watchdog file events to a :class:`ChangeReactor`."""

    def __init__(self, reactor: ChangeReactor) -> None:
        super().__init__()
        self.reactor = reactor

    def on_created(self, event: FileSystemEvent) -> None:
        self._forward(event, "created")

    def on_modified(self, event: FileSystemEvent) -> None:
        self._forward(event, "modified")

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._forward(event, "deleted")

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        source = os.fsdecode(event.src_path)
        destination = os.fsdecode(event.dest_path) if event.dest_path else ""
        if destination and not self.reactor.is_relevant(source):
            self.reactor.notify(destination, "moved")
            return
        self.reactor.notify(source, "moved")

    def _forward(self, event: FileSystemEvent, kind: str) -> None:
        if event.is_directory:
            return
        self.reactor.notify(os.fsdecode(event.src_path), kind)


def start_observer(roots: Sequence[ProjectRoot], reactor: ChangeReactor) -> BaseObserver:
    """Schedule a recursive watch on every root and start the observer thread."""

    observer = Observer()
    bridge = WatchdogEventBridge(reactor)
    for root in roots:
        if Path(root.path).is_dir():
            observer.schedule(bridge, str(root.path), recursive=True)
    observer.start()
    return observer


__all__ = ["ChangeReactor", "WatchdogEventBridge", "classify_change", "start_observer"]

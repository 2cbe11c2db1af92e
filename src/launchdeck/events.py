# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Minimal synchronous event emitter used to wire stores to renderers."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

PayloadT = TypeVar("PayloadT")

Unsubscribe = Callable[[], None]


class EventEmitter(Generic[PayloadT]):
    """Deliver payloads to subscribed callbacks in subscription order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: list[Callable[[PayloadT], None]] = []

    def subscribe(self, listener: Callable[[PayloadT], None]) -> Unsubscribe:
        """Register ``listener`` and return a callable that removes it again."""

        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def fire(self, payload: PayloadT) -> None:
        with self._lock:
            listeners = tuple(self._listeners)
        for listener in listeners:
            listener(payload)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)


__all__ = ["EventEmitter", "Unsubscribe"]

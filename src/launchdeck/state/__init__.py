# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Persisted user state: recently used tasks and hidden items."""

from __future__ import annotations

from .recency import RecencyStore
from .store import JsonFileStore, KeyValueStore, MemoryStore
from .visibility import VisibilityStore

__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore", "RecencyStore", "VisibilityStore"]

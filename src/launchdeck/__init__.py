# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Discover runnable tasks across project roots and hand them to a host for execution."""

from __future__ import annotations

from .aggregator import Aggregator
from .config import LaunchdeckConfig, load_config
from .errors import (
    ConfigError,
    LaunchdeckError,
    LaunchError,
    MalformedSourceError,
    StateStoreError,
    UnresolvedExecutionSpecError,
)
from .models import CatalogSnapshot, Dialect, DiscoveredTask, ProjectRoot, Section, SectionKind

__version__ = "0.1.0"

__all__ = [
    "Aggregator",
    "CatalogSnapshot",
    "ConfigError",
    "Dialect",
    "DiscoveredTask",
    "LaunchError",
    "LaunchdeckConfig",
    "LaunchdeckError",
    "MalformedSourceError",
    "ProjectRoot",
    "Section",
    "SectionKind",
    "StateStoreError",
    "UnresolvedExecutionSpecError",
    "__version__",
    "load_config",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and layered loaders."""

from __future__ import annotations

from .loader import ConfigLoader, ConfigLoadResult, load_config
from .models import LaunchdeckConfig, OutputConfig
from .sources import DefaultConfigSource, PyProjectConfigSource, TomlConfigSource

__all__ = [
    "ConfigLoadResult",
    "ConfigLoader",
    "DefaultConfigSource",
    "LaunchdeckConfig",
    "OutputConfig",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "load_config",
]

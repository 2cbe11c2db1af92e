# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Source parsers, one per configuration dialect."""

from __future__ import annotations

from ..config import LaunchdeckConfig
from ..logging import ComponentLogger
from ..models import SectionKind
from .base import SourceParser
from .buildfile import BuildFileParser
from .debug import DebugConfigurationParser
from .manifest import ManifestScriptParser
from .runconfig import RunConfigurationParser


def build_parsers(config: LaunchdeckConfig, logger: ComponentLogger) -> dict[SectionKind, SourceParser]:
    """Return one parser per section kind, in per-root section order."""

    return {
        SectionKind.DEBUG: DebugConfigurationParser(config, logger.child("debug")),
        SectionKind.SCRIPTS: ManifestScriptParser(config, logger.child("scripts")),
        SectionKind.RUN_CONFIGS: RunConfigurationParser(config, logger.child("runconfig")),
        SectionKind.BUILD_TARGETS: BuildFileParser(config, logger.child("buildfile")),
    }


__all__ = [
    "BuildFileParser",
    "DebugConfigurationParser",
    "ManifestScriptParser",
    "RunConfigurationParser",
    "SourceParser",
    "build_parsers",
]

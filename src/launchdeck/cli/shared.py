# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared CLI plumbing: errors, option declarations and service wiring."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from ..aggregator import Aggregator
from ..config import ConfigLoader, LaunchdeckConfig
from ..console import detect_tty, get_console_manager
from ..errors import ConfigError
from ..logging import ComponentLogger, build_logger
from ..models import ProjectRoot
from ..parsers import build_parsers
from ..state import JsonFileStore, RecencyStore, VisibilityStore


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


ROOTS_ARGUMENT = Annotated[
    list[Path] | None,
    typer.Argument(help="Project roots to scan (defaults to the current directory).", show_default=False),
]
ROOT_OPTION = Annotated[
    list[Path] | None,
    typer.Option("--root", "-r", help="Project root (repeatable; defaults to the current directory)."),
]
STATE_FILE_OPTION = Annotated[
    Path | None,
    typer.Option("--state-file", help="Override the persisted state file."),
]
EMOJI_OPTION = Annotated[
    bool | None,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Show debug logging."),
]


@dataclass(slots=True)
class CLIContext:
    """Services assembled for one CLI invocation."""

    config: LaunchdeckConfig
    logger: ComponentLogger
    console: Console
    aggregator: Aggregator
    recency: RecencyStore
    visibility: VisibilityStore
    use_emoji: bool
    use_color: bool


def resolve_roots(paths: Sequence[Path] | None) -> list[ProjectRoot]:
    """Return project roots for ``paths``, defaulting to the current directory.

    Raises:
        CLIError: If a supplied root is not a directory.
    """

    candidates = list(paths) if paths else [Path.cwd()]
    roots: list[ProjectRoot] = []
    for candidate in candidates:
        resolved = candidate.expanduser().resolve()
        if not resolved.is_dir():
            raise CLIError(f"Project root {candidate} is not a directory", exit_code=2)
        roots.append(ProjectRoot.from_path(resolved))
    return roots


def build_context(
    paths: Sequence[Path] | None,
    *,
    state_file: Path | None = None,
    emoji: bool | None = None,
    debug: bool = False,
) -> CLIContext:
    """Load configuration and wire parsers, stores and the aggregator.

    Args:
        paths: Root directories supplied on the command line.
        state_file: Optional override for the persisted state location.
        emoji: Optional emoji preference overriding configuration.
        debug: Whether debug logging should be rendered.

    Returns:
        CLIContext: Ready-to-use services.

    Raises:
        CLIError: If configuration is invalid or a root is not a directory.
    """

    roots = resolve_roots(paths)
    try:
        config = ConfigLoader.for_root(roots[0].path).load()
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    use_emoji = config.output.emoji if emoji is None else emoji
    use_color = config.output.color and detect_tty()
    logger = build_logger(
        "launchdeck",
        emoji=use_emoji,
        debug=debug or config.output.debug,
        no_color=not use_color,
    )
    storage = JsonFileStore((state_file or config.resolved_state_file()).expanduser(), logger.child("state"))
    recency = RecencyStore(storage, roots, logger.child("recent"), capacity=config.recent_capacity)
    visibility = VisibilityStore(storage, logger.child("hidden"))
    aggregator = Aggregator(
        roots,
        parsers=build_parsers(config, logger.child("parsers")),
        recency=recency,
        visibility=visibility,
        logger=logger.child("aggregator"),
    )
    console = get_console_manager().get(color=use_color, emoji=use_emoji)
    return CLIContext(
        config=config,
        logger=logger,
        console=console,
        aggregator=aggregator,
        recency=recency,
        visibility=visibility,
        use_emoji=use_emoji,
        use_color=use_color,
    )


__all__ = [
    "CLIContext",
    "CLIError",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "ROOTS_ARGUMENT",
    "ROOT_OPTION",
    "STATE_FILE_OPTION",
    "build_context",
    "resolve_roots",
]

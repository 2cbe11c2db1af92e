# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

from .commands import register_commands
from .typer_ext import create_typer

app = create_typer(
    name="launchdeck",
    help="Discover and launch the runnable tasks of your project roots.",
    no_args_is_help=True,
)
register_commands(app)


def main() -> None:
    """Run the ``launchdeck`` console script."""

    app()


__all__ = ["app", "main"]

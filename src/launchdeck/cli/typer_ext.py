# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer helpers giving every launchdeck command the same help layout."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Final, TypeVar

import typer
from click.core import Context, Parameter
from click.formatting import HelpFormatter
from typer.core import TyperCommand, TyperGroup

ARGUMENT_PARAM_TYPE: Final[str] = "argument"

# Options wired by ``build_context``; listed after the command's own options.
SHARED_OPTION_NAMES: Final[frozenset[str]] = frozenset({"root", "state-file", "emoji", "debug", "help"})


def option_sort_key(param: Parameter) -> str:
    """Return the lowercase long name used to order ``param`` in help output."""

    names = [*getattr(param, "opts", ()), *getattr(param, "secondary_opts", ())]
    long_names = [name for name in names if name.startswith("--")]
    primary = long_names[0] if long_names else (names[0] if names else param.name or "")
    return primary.lstrip("-").lower()


class LaunchdeckCommand(TyperCommand):
    """Command whose help lists arguments, its own options, then shared options."""

    def format_options(self, ctx: Context, formatter: HelpFormatter) -> None:
        arguments: list[tuple[str, str]] = []
        own: list[tuple[str, tuple[str, str]]] = []
        shared: list[tuple[str, tuple[str, str]]] = []
        for param in self.get_params(ctx):
            record = param.get_help_record(ctx)
            if record is None:
                continue
            if getattr(param, "param_type_name", "") == ARGUMENT_PARAM_TYPE:
                arguments.append(record)
                continue
            key = option_sort_key(param)
            (shared if key in SHARED_OPTION_NAMES else own).append((key, record))

        for title, records in (
            ("Arguments", arguments),
            ("Options", [record for _, record in sorted(own)]),
            ("Shared options", [record for _, record in sorted(shared)]),
        ):
            if records:
                with formatter.section(title):
                    formatter.write_dl(records)


class LaunchdeckGroup(TyperGroup):
    """Group listing commands alphabetically and building :class:`LaunchdeckCommand`."""

    command_class = LaunchdeckCommand

    def list_commands(self, ctx: Context) -> list[str]:
        return sorted(super().list_commands(ctx))


CommandCallback = TypeVar("CommandCallback", bound=Callable[..., Any])


class LaunchdeckTyper(typer.Typer):
    """Typer application defaulting to :class:`LaunchdeckGroup` and :class:`LaunchdeckCommand`."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("cls", LaunchdeckGroup)
        kwargs.setdefault("rich_markup_mode", None)
        super().__init__(*args, **kwargs)

    def command(self, name: str | None = None, **kwargs: Any) -> Callable[[CommandCallback], CommandCallback]:
        kwargs.setdefault("cls", LaunchdeckCommand)
        return super().command(name, **kwargs)


def create_typer(**kwargs: Any) -> LaunchdeckTyper:
    """Return the launchdeck Typer application shell.

    Args:
        **kwargs: Keyword arguments forwarded to :class:`typer.Typer`.

    Returns:
        LaunchdeckTyper: Application whose commands share one help layout.
    """

    return LaunchdeckTyper(**kwargs)


__all__ = [
    "LaunchdeckCommand",
    "LaunchdeckGroup",
    "LaunchdeckTyper",
    "SHARED_OPTION_NAMES",
    "create_typer",
    "option_sort_key",
]

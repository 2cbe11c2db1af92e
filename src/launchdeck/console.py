# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared rich consoles for catalog rendering and user-facing messages."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import cache

from rich.console import Console


def detect_tty() -> bool:
    """Return ``True`` when stdout is attached to a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@dataclass(frozen=True, slots=True)
class ConsoleProfile:
    """Presentation flags a cached console was built for.

    Attributes:
        color: Whether colour output was requested.
        emoji: Whether emoji glyphs may be rendered.
        tty: Whether stdout was a terminal when the console was built.
    """

    color: bool
    emoji: bool
    tty: bool

    @property
    def styled(self) -> bool:
        return self.color and self.tty

    def build(self) -> Console:
        return Console(
            color_system="auto" if self.styled else None,
            force_terminal=self.tty,
            no_color=not self.styled,
            emoji=self.emoji,
            soft_wrap=True,
            highlight=False,
        )


class RichConsoleManager:
    """Hand out one :class:`Console` per :class:`ConsoleProfile`.

    The console writes to whatever ``sys.stdout`` is at print time, so output
    captured by test runners is routed correctly.
    """

    def __init__(self) -> None:
        self._consoles: dict[ConsoleProfile, Console] = {}

    def get(self, *, color: bool, emoji: bool) -> Console:
        """Return the console matching ``color``/``emoji`` and the current TTY state.

        Args:
            color: ``True`` when ANSI colour output is wanted.
            emoji: ``True`` when rich should render emoji glyphs.

        Returns:
            Console: Cached console for the resulting profile.
        """

        profile = ConsoleProfile(color=color, emoji=emoji, tty=detect_tty())
        if profile not in self._consoles:
            self._consoles[profile] = profile.build()
        return self._consoles[profile]


@cache
def get_console_manager() -> RichConsoleManager:
    """Return the process-wide :class:`RichConsoleManager`."""

    return RichConsoleManager()


__all__ = ["ConsoleProfile", "RichConsoleManager", "detect_tty", "get_console_manager"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging helpers and the component logger injected into every service."""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from typing import Final

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

from .console import detect_tty, get_console_manager

_RECORD_LIMIT: Final[int] = 1000
_KEY_VALUE_RE: Final[re.Pattern[str]] = re.compile(r"([\w-]+)=(\".*?\"|\S+)")

_LEVEL_STYLES: Final[dict[str, str]] = {
    "debug": "dim",
    "info": "cyan",
    "warn": "yellow",
    "error": "red",
}

_LEVEL_EMOJI: Final[dict[str, str]] = {
    "info": "ℹ️ ",
    "warn": "⚠️ ",
    "error": "❌ ",
}


def emoji(symbol: str, enable: bool) -> str:
    """Return *symbol* when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _print_line(
    msg: str,
    *,
    style: str | None,
    use_emoji: bool,
    use_color: bool | None = None,
) -> None:
    """Render ``msg`` to the shared console using the requested style.

    Args:
        msg: Message text to print to the console.
        style: Rich style name to apply when colour output is active.
        use_emoji: Flag indicating whether emoji output is desired.
        use_color: Optional explicit colour flag overriding TTY detection.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def section(title: str, *, use_color: bool) -> None:
    """Render a section header to delineate console output blocks."""

    console = get_console_manager().get(color=use_color, emoji=True)
    if use_color:
        console.print()
        console.print(Rule(title))
    else:
        console.print(f"\n--- {title} ---")


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    _print_line(f"{emoji('ℹ️ ', use_emoji)}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _print_line(f"{emoji('✅ ', use_emoji)}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message."""

    _print_line(f"{emoji('❌ ', use_emoji)}{msg}", style="red", use_emoji=use_emoji, use_color=use_color)


@dataclass(slots=True)
class ComponentLogger:
    """Structured logger tagged with the component that owns it.

    Instances are passed by reference into every service at construction time;
    :meth:`child` derives a logger for a sub-component sharing the same console.

    Attributes:
        console: Rich console receiving rendered log lines.
        component: Tag rendered as a ``[component]`` prefix.
        use_emoji: Whether level glyphs should prefix messages.
        debug_enabled: Whether :meth:`debug` output is rendered.
    """

    console: Console
    component: str
    use_emoji: bool = False
    debug_enabled: bool = False
    records: deque[tuple[str, str, str]] = field(default_factory=lambda: deque(maxlen=_RECORD_LIMIT))

    def child(self, name: str) -> ComponentLogger:
        """Return a logger for ``name`` nested under this component."""

        return ComponentLogger(
            console=self.console,
            component=f"{self.component}.{name}",
            use_emoji=self.use_emoji,
            debug_enabled=self.debug_enabled,
            records=self.records,
        )

    def info(self, message: str) -> None:
        self._emit("info", message)

    def warn(self, message: str) -> None:
        self._emit("warn", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def debug(self, message: str) -> None:
        """Emit a debug message with ``key=value`` pairs highlighted.

        Args:
            message: Debug payload; recorded even when rendering is disabled.
        """

        self.records.append(("debug", self.component, message))
        if not self.debug_enabled:
            return
        text = Text(f"[{self.component}] ", style="bold cyan")
        cursor = 0
        for match in _KEY_VALUE_RE.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            key, raw_value = match.group(1), match.group(2)
            text.append(key, style="bold magenta")
            text.append("=", style="dim")
            value_style = "bold blue" if key in {"command", "cmd"} else "bold green"
            text.append(raw_value, style=value_style)
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)

    def messages(self, level: str | None = None) -> list[str]:
        """Return recorded messages, optionally filtered by ``level``."""

        return [message for recorded, _, message in self.records if level is None or recorded == level]

    def _emit(self, level: str, message: str) -> None:
        self.records.append((level, self.component, message))
        prefix = emoji(_LEVEL_EMOJI.get(level, ""), self.use_emoji)
        text = Text(f"{prefix}[{self.component}] {message}")
        text.stylize(_LEVEL_STYLES[level])
        self.console.print(text)


def build_logger(
    component: str,
    *,
    emoji: bool = False,
    debug: bool = False,
    no_color: bool = False,
    console: Console | None = None,
) -> ComponentLogger:
    """Return a :class:`ComponentLogger` bound to ``console`` or a fresh stderr console.

    Args:
        component: Root component tag.
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        no_color: Whether terminal colour output should be disabled.
        console: Optional console override, used by tests to capture output.

    Returns:
        ComponentLogger: Logger instance bound to a dedicated Rich console.
    """

    target = console or Console(stderr=True, no_color=no_color, highlight=False)
    return ComponentLogger(console=target, component=component, use_emoji=emoji, debug_enabled=debug)


__all__ = [
    "ComponentLogger",
    "build_logger",
    "emoji",
    "fail",
    "info",
    "ok",
    "section",
]

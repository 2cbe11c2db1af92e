# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich renderers for catalog snapshots, requests and persisted state."""

from __future__ import annotations

import json
from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from ..execution import DebugSessionRequest, ExecutionRequest
from ..models import CatalogSnapshot, HiddenEntry, RecentEntry, Section


def _section_label(section: Section, *, show_ids: bool) -> Text:
    label = Text(section.display_title, style="bold")
    if section.root is not None:
        label.append(f"  [{section.root.name}]", style="cyan")
    if show_ids:
        label.append(f"  {section.identity}", style="dim")
    return label


def render_snapshot(console: Console, snapshot: CatalogSnapshot, *, show_ids: bool = False) -> None:
    """Print ``snapshot`` as a two-level tree.

    Args:
        console: Destination console.
        snapshot: Sections and their visible tasks.
        show_ids: Also print section identities for use with ``run`` and ``hide-*``.
    """

    tree = Tree(Text("launchdeck", style="bold magenta"))
    for section in snapshot.sections:
        node = tree.add(_section_label(section, show_ids=show_ids))
        tasks = snapshot.tasks_for(section)
        if not tasks:
            node.add(Text("(empty)", style="dim"))
            continue
        for task in tasks:
            if task.is_error:
                node.add(Text(task.name, style="bold red"))
                continue
            entry = Text(task.name)
            if task.detail:
                entry.append(f"  {task.detail}", style="dim")
            node.add(entry)
    console.print(tree)


def render_request(console: Console, request: ExecutionRequest) -> None:
    """Print the request a host would receive for a task."""

    if isinstance(request, DebugSessionRequest):
        console.print(Text(f"debug session in {request.root.name}", style="bold"))
        console.print(json.dumps(request.configuration, indent=2, sort_keys=True), markup=False)
        return
    console.print(Text(f"{request.title}  (cwd: {request.cwd})", style="bold"))
    for line in request.script_lines():
        console.print(line, markup=False)


def render_recent(console: Console, entries: Sequence[RecentEntry]) -> None:
    table = Table(title="Recently Used", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Dialect", style="cyan")
    table.add_column("Root")
    table.add_column("Detail", style="dim", overflow="fold")
    for index, entry in enumerate(entries, start=1):
        table.add_row(str(index), Text(entry.name), entry.dialect.value, Text(entry.root_name), Text(entry.detail))
    console.print(table)


def render_hidden(console: Console, tasks: Sequence[HiddenEntry], sections: Sequence[HiddenEntry]) -> None:
    """Print hidden sections and tasks with the identifiers ``restore`` accepts."""

    table = Table(title="Hidden Items", box=box.SIMPLE_HEAVY)
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Folder")
    table.add_column("Path", style="dim", overflow="fold")
    table.add_column("Id", overflow="fold")
    for entry in [*sections, *tasks]:
        table.add_row(entry.kind, Text(entry.name), Text(entry.folder or ""), Text(entry.path or ""), Text(entry.id))
    console.print(table)


__all__ = ["render_hidden", "render_recent", "render_request", "render_snapshot"]

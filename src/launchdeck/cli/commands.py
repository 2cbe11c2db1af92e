# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Commands exposed by the ``launchdeck`` CLI."""

from __future__ import annotations

import time
from typing import Annotated, NoReturn

import typer

from ..errors import LaunchError, StateStoreError
from ..execution import SubprocessExecutor, TaskLauncher, build_request
from ..logging import fail, info, ok
from ..logging import section as section_header
from ..models import CatalogSnapshot, Dialect, DiscoveredTask, Section, SectionKind
from ..watch import ChangeReactor, start_observer
from .rendering import render_hidden, render_recent, render_request, render_snapshot
from .shared import (
    DEBUG_OPTION,
    EMOJI_OPTION,
    ROOT_OPTION,
    ROOTS_ARGUMENT,
    STATE_FILE_OPTION,
    CLIContext,
    CLIError,
    build_context,
)
from .typer_ext import LaunchdeckTyper

SECTION_ID_ARGUMENT = Annotated[str, typer.Argument(help="Section identity as printed by `list --ids`.")]
TASK_ARGUMENT = Annotated[str, typer.Argument(help="Task name within the section.")]


def _abort(exc: CLIError, *, use_emoji: bool = False) -> NoReturn:
    fail(str(exc), use_emoji=use_emoji)
    raise typer.Exit(code=exc.exit_code) from exc


def _require_section(context: CLIContext, section_id: str) -> Section:
    section = context.aggregator.find_section(section_id)
    if section is None:
        raise CLIError(f"Unknown section '{section_id}'")
    return section


def _require_task(context: CLIContext, section: Section, name: str) -> DiscoveredTask:
    task = context.aggregator.find_task(section, name)
    if task is None:
        raise CLIError(f"No task named '{name}' in {section.title}")
    return task


def list_command(
    roots: ROOTS_ARGUMENT = None,
    ids: Annotated[bool, typer.Option("--ids", help="Print section identities.")] = False,
    state_file: STATE_FILE_OPTION = None,
    emoji: EMOJI_OPTION = None,
    debug: DEBUG_OPTION = False,
) -> None:
    """Render every section and its visible tasks."""

    try:
        context = build_context(roots, state_file=state_file, emoji=emoji, debug=debug)
    except CLIError as exc:
        _abort(exc)
    render_snapshot(context.console, context.aggregator.snapshot(), show_ids=ids)


def run_command(
    section_id: SECTION_ID_ARGUMENT,
    task_name: TASK_ARGUMENT,
    root: ROOT_OPTION = None,
    execute: Annotated[bool, typer.Option("--execute", help="Run shell tasks locally and record them.")] = False,
    state_file: STATE_FILE_OPTION = None,
    emoji: EMOJI_OPTION = None,
    debug: DEBUG_OPTION = False,
) -> None:
    """Print the execution request for a task, or run it with ``--execute``."""

    try:
        context = build_context(root, state_file=state_file, emoji=emoji, debug=debug)
        task = _require_task(context, _require_section(context, section_id), task_name)
        if not execute:
            render_request(context.console, build_request(task))
            return
        launcher = TaskLauncher(
            SubprocessExecutor(context.logger.child("executor")),
            context.recency,
            context.logger.child("launcher"),
        )
        launcher.launch(task)
    except (LaunchError, StateStoreError) as exc:
        _abort(CLIError(str(exc)))
    except CLIError as exc:
        _abort(exc)


def recent_command(
    root: ROOT_OPTION = None,
    clear: Annotated[bool, typer.Option("--clear", help="Forget every recently used task.")] = False,
    remove: Annotated[str | None, typer.Option("--remove", help="Forget one task by name.")] = None,
    dialect: Annotated[Dialect | None, typer.Option("--dialect", help="Dialect of the task given to --remove.")] = None,
    state_file: STATE_FILE_OPTION = None,
    emoji: EMOJI_OPTION = None,
) -> None:
    """Show or edit the recently used list."""

    try:
        context = build_context(root, state_file=state_file, emoji=emoji)
        if clear:
            context.recency.clear()
            ok("Cleared recently used tasks", use_emoji=context.use_emoji)
            return
        if remove is not None:
            if dialect is None:
                raise CLIError("--remove requires --dialect", exit_code=2)
            if not context.recency.remove(remove, dialect):
                raise CLIError(f"'{remove}' is not in the recently used list")
            ok(f"Removed {remove}", use_emoji=context.use_emoji)
            return
    except StateStoreError as exc:
        _abort(CLIError(str(exc)))
    except CLIError as exc:
        _abort(exc)
    render_recent(context.console, context.recency.entries())


def hide_task_command(
    section_id: SECTION_ID_ARGUMENT,
    task_name: TASK_ARGUMENT,
    root: ROOT_OPTION = None,
    state_file: STATE_FILE_OPTION = None,
    emoji: EMOJI_OPTION = None,
) -> None:
    """Hide one task from its section."""

    try:
        context = build_context(root, state_file=state_file, emoji=emoji)
        section = _require_section(context, section_id)
        if section.kind is SectionKind.RECENT:
            raise CLIError("Recently used tasks are removed with `recent --remove`", exit_code=2)
        task = _require_task(context, section, task_name)
        if context.visibility.hide_task(task, section_id=section.identity):
            ok(f"Hid {task.name}", use_emoji=context.use_emoji)
        else:
            ok(f"{task.name} was already hidden", use_emoji=context.use_emoji)
    except StateStoreError as exc:
        _abort(CLIError(str(exc)))
    except CLIError as exc:
        _abort(exc)


def hide_section_command(
    section_id: SECTION_ID_ARGUMENT,
    root: ROOT_OPTION = None,
    state_file: STATE_FILE_OPTION = None,
    emoji: EMOJI_OPTION = None,
) -> None:
    """Hide a whole section."""

    try:
        context = build_context(root, state_file=state_file, emoji=emoji)
        section = _require_section(context, section_id)
        if section.kind is SectionKind.RECENT:
            raise CLIError("The recently used section cannot be hidden", exit_code=2)
        if context.visibility.hide_section(section):
            ok(f"Hid {section.title}", use_emoji=context.use_emoji)
        else:
            ok(f"{section.title} was already hidden", use_emoji=context.use_emoji)
    except StateStoreError as exc:
        _abort(CLIError(str(exc)))
    except CLIError as exc:
        _abort(exc)


def restore_command(
    item_id: Annotated[str, typer.Argument(help="Identity of a hidden task or section (see `hidden`).")],
    root: ROOT_OPTION = None,
    state_file: STATE_FILE_OPTION = None,
    emoji: EMOJI_OPTION = None,
) -> None:
    """Restore one hidden task or section."""

    try:
        context = build_context(root, state_file=state_file, emoji=emoji)
        restored = context.visibility.restore_task(item_id) or context.visibility.restore_section(item_id)
        if not restored:
            raise CLIError(f"Nothing hidden under '{item_id}'")
        ok(f"Restored {item_id}", use_emoji=context.use_emoji)
    except StateStoreError as exc:
        _abort(CLIError(str(exc)))
    except CLIError as exc:
        _abort(exc)


def restore_all_command(
    root: ROOT_OPTION = None,
    tasks_only: Annotated[bool, typer.Option("--tasks", help="Only restore hidden tasks.")] = False,
    sections_only: Annotated[bool, typer.Option("--sections", help="Only restore hidden sections.")] = False,
    state_file: STATE_FILE_OPTION = None,
    emoji: EMOJI_OPTION = None,
) -> None:
    """Restore every hidden task and section."""

    try:
        context = build_context(root, state_file=state_file, emoji=emoji)
        if tasks_only and not sections_only:
            context.visibility.clear_tasks()
        elif sections_only and not tasks_only:
            context.visibility.clear_sections()
        else:
            context.visibility.clear_all()
    except StateStoreError as exc:
        _abort(CLIError(str(exc)))
    except CLIError as exc:
        _abort(exc)
    ok("Restored hidden items", use_emoji=context.use_emoji)


def hidden_command(
    root: ROOT_OPTION = None,
    state_file: STATE_FILE_OPTION = None,
    emoji: EMOJI_OPTION = None,
) -> None:
    """List hidden tasks and sections."""

    try:
        context = build_context(root, state_file=state_file, emoji=emoji)
    except CLIError as exc:
        _abort(exc)
    visibility = context.visibility
    if not visibility.total_hidden():
        ok("Nothing is hidden", use_emoji=context.use_emoji)
        return
    render_hidden(context.console, visibility.hidden_tasks(), visibility.hidden_sections())


def watch_command(
    roots: ROOTS_ARGUMENT = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", min=0, help="Stop watching after this many seconds."),
    ] = None,
    state_file: STATE_FILE_OPTION = None,
    emoji: EMOJI_OPTION = None,
    debug: DEBUG_OPTION = False,
) -> None:
    """Render the catalog and re-render it whenever a source file changes."""

    try:
        context = build_context(roots, state_file=state_file, emoji=emoji, debug=debug)
    except CLIError as exc:
        _abort(exc)
    aggregator = context.aggregator
    latest = 0

    def _render(snapshot: CatalogSnapshot) -> None:
        nonlocal latest
        if snapshot.generation <= latest:
            return
        latest = snapshot.generation
        section_header(f"Catalog generation {snapshot.generation}", use_color=context.use_color)
        render_snapshot(context.console, snapshot)

    unsubscribe = aggregator.model_changed.subscribe(_render)
    aggregator.refresh()
    reactor = ChangeReactor(aggregator, context.logger.child("watch"), config=context.config)
    observer = start_observer(aggregator.roots, reactor)
    info(f"Watching {len(aggregator.roots)} root(s); press Ctrl+C to stop", use_emoji=context.use_emoji)
    deadline = None if timeout is None else time.monotonic() + timeout
    try:
        while deadline is None or time.monotonic() < deadline:
            time.sleep(0.2)
    except KeyboardInterrupt:
        context.logger.info("Stopping watcher")
    finally:
        observer.stop()
        observer.join()
        unsubscribe()
        aggregator.close()


def register_commands(app: LaunchdeckTyper) -> None:
    """Attach every launchdeck command to ``app``."""

    app.command("list", help="Render sections and their visible tasks.")(list_command)
    app.command("run", help="Print or execute the request for a task.")(run_command)
    app.command("recent", help="Show, prune or clear the recently used list.")(recent_command)
    app.command("hide-task", help="Hide a task from its section.")(hide_task_command)
    app.command("hide-section", help="Hide a whole section.")(hide_section_command)
    app.command("restore", help="Restore a hidden task or section.")(restore_command)
    app.command("restore-all", help="Restore every hidden item.")(restore_all_command)
    app.command("hidden", help="List hidden tasks and sections.")(hidden_command)
    app.command("watch", help="Re-render the catalog whenever sources change.")(watch_command)


__all__ = ["register_commands"]

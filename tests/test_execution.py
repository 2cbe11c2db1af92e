# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for execution requests, the subprocess executor and the launcher."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import pytest

from launchdeck.errors import LaunchError
from launchdeck.execution import (
    DebugSessionRequest,
    ExecutionRequest,
    ShellRunRequest,
    SubprocessExecutor,
    TaskLauncher,
    build_request,
)
from launchdeck.models import (
    CompoundLaunchSpec,
    DebugLaunchSpec,
    DiagnosticSpec,
    Dialect,
    DiscoveredTask,
    ProjectRoot,
    ShellCommandSpec,
)
from launchdeck.state import RecencyStore


def _task(root: ProjectRoot, name: str, dialect: Dialect, execution) -> DiscoveredTask:
    return DiscoveredTask(
        name=name,
        dialect=dialect,
        source_file=root.path / "source",
        root=root,
        execution=execution,
    )


class _RecordingRunner:
    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls: list[tuple[list[str], dict[str, Any]]] = []

    def __call__(self, args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, self.returncode)


class _Executor:
    def __init__(self, error: LaunchError | None = None) -> None:
        self.error = error
        self.requests: list[ExecutionRequest] = []

    def execute(self, request: ExecutionRequest) -> None:
        if self.error is not None:
            raise self.error
        self.requests.append(request)


def test_debug_task_becomes_debug_session(root) -> None:
    configuration = {"name": "API", "type": "node", "request": "launch"}
    task = _task(root, "API", Dialect.DEBUG, DebugLaunchSpec(configuration=configuration))

    request = build_request(task)

    assert request == DebugSessionRequest(root=root, name="API", configuration=configuration)


def test_compound_task_synthesises_descriptor(root) -> None:
    task = _task(root, "Full", Dialect.COMPOUND, CompoundLaunchSpec(configurations=["API", "Web"]))

    request = build_request(task)

    assert isinstance(request, DebugSessionRequest)
    assert request.compound == ["API", "Web"]
    assert request.configuration == {
        "type": "compound",
        "request": "launch",
        "name": "Full",
        "configurations": ["API", "Web"],
    }


def test_shell_task_becomes_run_request_with_exports(root) -> None:
    spec = ShellCommandSpec(command="make build", cwd=root.path, env={"MODE": "dev mode", "LEVEL": "3"})
    task = _task(root, "build", Dialect.BUILD_TARGET, spec)

    request = build_request(task)

    assert isinstance(request, ShellRunRequest)
    assert request.title == "make: build"
    assert request.script_lines() == ["export MODE='dev mode'", "export LEVEL=3", "make build"]
    assert request.script() == "export MODE='dev mode'\nexport LEVEL=3\nmake build"


def test_diagnostic_task_cannot_be_launched(root) -> None:
    task = _task(root, "Error in project/.vscode/launch.json", Dialect.DEBUG, DiagnosticSpec(message="bad json"))

    with pytest.raises(LaunchError, match="bad json"):
        build_request(task)


def test_subprocess_executor_runs_shell_command(root, capture_logger) -> None:
    runner = _RecordingRunner()
    executor = SubprocessExecutor(capture_logger, shell="/bin/sh", runner=runner, base_env={"PATH": "/usr/bin"})

    executor.execute(ShellRunRequest(title="script: build", command="npm run build", cwd=root.path, env={"CI": "1"}))

    ((args, kwargs),) = runner.calls
    assert args == ["/bin/sh", "-c", "npm run build"]
    assert kwargs["cwd"] == str(root.path)
    assert kwargs["env"] == {"PATH": "/usr/bin", "CI": "1"}


def test_subprocess_executor_reports_failures(root, capture_logger, tmp_path: Path) -> None:
    failing = SubprocessExecutor(capture_logger, shell="/bin/sh", runner=_RecordingRunner(returncode=2))
    request = ShellRunRequest(title="script: test", command="npm test", cwd=root.path)

    with pytest.raises(LaunchError, match="status 2"):
        failing.execute(request)
    with pytest.raises(LaunchError, match="does not exist"):
        failing.execute(request.model_copy(update={"cwd": tmp_path / "missing"}))
    with pytest.raises(LaunchError, match="IDE host"):
        failing.execute(DebugSessionRequest(root=root, name="API", configuration={}))


def test_subprocess_executor_reports_missing_shell(root, capture_logger) -> None:
    executor = SubprocessExecutor(capture_logger, shell="definitely-not-a-shell", runner=_RecordingRunner())

    with pytest.raises(LaunchError, match="not found"):
        executor.execute(ShellRunRequest(title="t", command="true", cwd=root.path))


def test_launcher_records_successful_launches(root, memory_store, capture_logger) -> None:
    recency = RecencyStore(memory_store, [root], capture_logger)
    executor = _Executor()
    task = _task(root, "build", Dialect.SCRIPT, ShellCommandSpec(command="npm run build", cwd=root.path))

    request = TaskLauncher(executor, recency, capture_logger).launch(task)

    assert executor.requests == [request]
    assert [entry.name for entry in recency.entries()] == ["build"]


def test_launcher_failure_leaves_recency_untouched(root, memory_store, capture_logger) -> None:
    recency = RecencyStore(memory_store, [root], capture_logger)
    executor = _Executor(error=LaunchError("terminal unavailable"))
    task = _task(root, "build", Dialect.SCRIPT, ShellCommandSpec(command="npm run build", cwd=root.path))

    with pytest.raises(LaunchError):
        TaskLauncher(executor, recency, capture_logger).launch(task)

    assert recency.entries() == []
    assert memory_store.writes == 0
    assert any("terminal unavailable" in message for message in capture_logger.messages("error"))

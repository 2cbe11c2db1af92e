# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Execution boundary: turn tasks into host requests and dispatch them."""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Final, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field

from .errors import LaunchError
from .logging import ComponentLogger
from .models import (
    CompoundLaunchSpec,
    DebugLaunchSpec,
    DiagnosticSpec,
    Dialect,
    DiscoveredTask,
    ProjectRoot,
    ShellCommandSpec,
)
from .state import RecencyStore

TITLE_PREFIXES: Final[dict[Dialect, str]] = {
    Dialect.SCRIPT: "script",
    Dialect.BUILD_TARGET: "make",
    Dialect.RUN_CONFIG: "run",
    Dialect.DEBUG: "debug",
    Dialect.COMPOUND: "debug",
}


def compound_descriptor(name: str, members: list[str]) -> dict[str, Any]:
    """Return the launch descriptor synthesised for a compound configuration."""

    return {"type": "compound", "request": "launch", "name": name, "configurations": list(members)}


class DebugSessionRequest(BaseModel):
    """Ask the host to start a debug session for a named configuration."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["debug"] = "debug"
    root: ProjectRoot
    name: str
    configuration: dict[str, Any]
    compound: list[str] | None = None


class ShellRunRequest(BaseModel):
    """Ask the host to run a shell command in a working directory."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["shell"] = "shell"
    title: str
    command: str
    cwd: Path
    env: dict[str, str] = Field(default_factory=dict)

    def script_lines(self) -> list[str]:
        """Return ``export`` statements for the environment followed by the command."""

        exports = [f"export {key}={shlex.quote(value)}" for key, value in self.env.items()]
        return [*exports, self.command]

    def script(self) -> str:
        return "\n".join(self.script_lines())


ExecutionRequest = DebugSessionRequest | ShellRunRequest


def build_request(task: DiscoveredTask) -> ExecutionRequest:
    """Translate ``task`` into the request the host must carry out.

    Raises:
        LaunchError: If ``task`` is the diagnostic placeholder for a malformed file.
    """

    spec = task.execution
    if isinstance(spec, DebugLaunchSpec):
        return DebugSessionRequest(root=task.root, name=task.name, configuration=dict(spec.configuration))
    if isinstance(spec, CompoundLaunchSpec):
        return DebugSessionRequest(
            root=task.root,
            name=task.name,
            configuration=compound_descriptor(task.name, spec.configurations),
            compound=list(spec.configurations),
        )
    if isinstance(spec, ShellCommandSpec):
        prefix = TITLE_PREFIXES.get(task.dialect, task.dialect.value)
        return ShellRunRequest(title=f"{prefix}: {task.name}", command=spec.command, cwd=spec.cwd, env=dict(spec.env))
    if isinstance(spec, DiagnosticSpec):
        raise LaunchError(f"{task.name}: {spec.message}")
    raise LaunchError(f"{task.name}: unsupported execution spec {type(spec).__name__}")


class Executor(Protocol):
    """Host facility that carries out execution requests."""

    def execute(self, request: ExecutionRequest) -> None:
        """Start ``request``; raise :class:`LaunchError` when it cannot be started."""


Runner = Callable[..., subprocess.CompletedProcess[str]]


class SubprocessExecutor:
    """Run shell requests locally through ``sh -c``."""

    def __init__(
        self,
        logger: ComponentLogger,
        *,
        shell: str = "sh",
        runner: Runner = subprocess.run,
        base_env: Mapping[str, str] | None = None,
    ) -> None:
        self._logger = logger
        self._shell = shell
        self._runner = runner
        self._base_env = base_env

    def _shell_path(self) -> str:
        if Path(self._shell).is_absolute():
            return self._shell
        resolved = shutil.which(self._shell)
        if resolved is None:
            raise LaunchError(f"Shell '{self._shell}' was not found on PATH")
        return resolved

    def execute(self, request: ExecutionRequest) -> None:
        if isinstance(request, DebugSessionRequest):
            raise LaunchError(f"Debug session '{request.name}' requires an IDE host")
        if not request.cwd.is_dir():
            raise LaunchError(f"Working directory {request.cwd} does not exist")
        env = dict(os.environ if self._base_env is None else self._base_env)
        env.update(request.env)
        self._logger.debug(f"executing cwd={request.cwd} command={shlex.quote(request.command)}")
        try:
            completed = self._runner(
                [self._shell_path(), "-c", request.command],
                cwd=str(request.cwd),
                env=env,
                check=False,
                text=True,
            )
        except OSError as exc:
            raise LaunchError(f"Unable to start {request.title}: {exc}") from exc
        if completed.returncode != 0:
            raise LaunchError(f"{request.title} exited with status {completed.returncode}")


class TaskLauncher:
    """Dispatch tasks to an executor and record successful launches."""

    def __init__(self, executor: Executor, recency: RecencyStore, logger: ComponentLogger) -> None:
        self._executor = executor
        self._recency = recency
        self._logger = logger

    def launch(self, task: DiscoveredTask) -> ExecutionRequest:
        """Execute ``task`` and move it to the front of the recent list.

        Raises:
            LaunchError: If the request cannot be built or started. Recency and
                visibility state are left untouched in that case.
        """

        try:
            request = build_request(task)
            self._executor.execute(request)
        except LaunchError as exc:
            self._logger.error(f"Failed to launch {task.name}: {exc}")
            raise
        self._recency.record(task)
        self._logger.info(f"Launched {task.name}")
        return request


__all__ = [
    "DebugSessionRequest",
    "ExecutionRequest",
    "Executor",
    "ShellRunRequest",
    "SubprocessExecutor",
    "TaskLauncher",
    "build_request",
    "compound_descriptor",
]

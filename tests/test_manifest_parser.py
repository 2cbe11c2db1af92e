# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the package manifest script reader."""

from __future__ import annotations

import json

from launchdeck.config import LaunchdeckConfig
from launchdeck.models import Dialect, ShellCommandSpec
from launchdeck.parsers import ManifestScriptParser


def _manifest(write_file, directory, scripts, **extra):
    return write_file(directory / "package.json", json.dumps({"name": "pkg", "scripts": scripts, **extra}, indent=2))


def test_scripts_become_sorted_tasks(root, config, capture_logger, write_file) -> None:
    _manifest(write_file, root.path, {"test": "jest", "build": "tsc -p .", "Lint": "eslint ."})
    parser = ManifestScriptParser(config, capture_logger)

    tasks = parser.scan(root)

    assert [task.name for task in tasks] == ["build", "Lint", "test"]
    build = tasks[0]
    assert build.dialect is Dialect.SCRIPT
    assert build.detail == "tsc -p ."
    assert build.execution == ShellCommandSpec(command="npm run build", cwd=root.path, target="build")


def test_script_position_points_at_entry(root, config, capture_logger, write_file) -> None:
    path = _manifest(write_file, root.path, {"build": "tsc", "dev": "vite"}, description="build the dev server")
    text = path.read_text(encoding="utf-8")

    tasks = ManifestScriptParser(config, capture_logger).scan(root)

    for task in tasks:
        assert task.position is not None
        span = text[task.position.start_offset : task.position.end_offset]
        assert span.startswith(json.dumps(task.name))


def test_nested_manifests_respect_depth_and_dependency_dirs(make_root, config, capture_logger, write_file) -> None:
    root = make_root("workspace")
    _manifest(write_file, root.path, {"build": "turbo build"})
    _manifest(write_file, root.path / "packages" / "web", {"dev": "vite"})
    _manifest(write_file, root.path / "apps", {"start": "node ."})
    _manifest(write_file, root.path / "packages" / "deep" / "nested", {"hidden": "true"})
    _manifest(write_file, root.path / "node_modules" / "left-pad", {"prepare": "true"})
    _manifest(write_file, root.path / "packages" / "node_modules", {"prepare": "true"})
    parser = ManifestScriptParser(config, capture_logger)

    sections = parser.sections(root)

    assert [section.title for section in sections] == ["Scripts", "apps: Scripts", "packages/web: Scripts"]
    assert [section.identity for section in sections] == [
        "package-scripts:workspace:package.json",
        "package-scripts:workspace:apps/package.json",
        "package-scripts:workspace:packages/web/package.json",
    ]


def test_manifest_depth_is_configurable(root, capture_logger, write_file) -> None:
    _manifest(write_file, root.path / "a", {"x": "true"})
    _manifest(write_file, root.path / "a" / "b" / "c", {"y": "true"})

    shallow = ManifestScriptParser(LaunchdeckConfig(manifest_depth=0), capture_logger)
    deep = ManifestScriptParser(LaunchdeckConfig(manifest_depth=3), capture_logger)

    assert shallow.sections(root) == []
    assert [section.title for section in deep.sections(root)] == ["a: Scripts", "a/b/c: Scripts"]


def test_nested_manifest_runs_in_its_directory_with_inherited_manager(root, config, capture_logger, write_file) -> None:
    _manifest(write_file, root.path, {"build": "turbo build"})
    write_file(root.path / "pnpm-lock.yaml", "lockfileVersion: 9\n")
    nested_dir = root.path / "packages" / "api"
    _manifest(write_file, nested_dir, {"serve": "node server.js"})
    parser = ManifestScriptParser(config, capture_logger)

    sections = parser.sections(root)
    nested_tasks = parser.tasks(sections[1])

    assert [task.name for task in nested_tasks] == ["serve"]
    assert nested_tasks[0].execution == ShellCommandSpec(command="pnpm run serve", cwd=nested_dir, target="serve")


def test_same_script_in_sibling_manifests_has_distinct_identities(root, config, capture_logger, write_file) -> None:
    _manifest(write_file, root.path, {"build": "tsc"})
    _manifest(write_file, root.path / "lib", {"build": "tsc"})

    tasks = ManifestScriptParser(config, capture_logger).scan(root)

    assert [task.name for task in tasks] == ["build", "build"]
    assert tasks[0].identity != tasks[1].identity


def test_malformed_manifest_is_skipped_without_aborting_siblings(root, config, capture_logger, write_file) -> None:
    write_file(root.path / "package.json", "{ not json")
    _manifest(write_file, root.path / "tools", {"gen": "node gen.js"})

    tasks = ManifestScriptParser(config, capture_logger).scan(root)

    assert [task.name for task in tasks] == ["gen"]
    assert any("Skipping" in message for message in capture_logger.messages("warn"))


def test_manifest_without_scripts_yields_no_tasks(root, config, capture_logger, write_file) -> None:
    write_file(root.path / "package.json", json.dumps({"name": "empty"}))
    parser = ManifestScriptParser(config, capture_logger)

    sections = parser.sections(root)

    assert len(sections) == 1
    assert parser.tasks(sections[0]) == []


def test_non_string_script_bodies_are_ignored(root, config, capture_logger, write_file) -> None:
    _manifest(write_file, root.path, {"ok": "echo ok", "bad": ["not", "a", "string"]})

    tasks = ManifestScriptParser(config, capture_logger).scan(root)

    assert [task.name for task in tasks] == ["ok"]

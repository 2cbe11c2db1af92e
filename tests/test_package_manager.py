# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for package-manager resolution."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from launchdeck.package_manager import PackageManager, lockfile_manager, resolve, resolve_inherited


def _manifest(directory: Path, **fields) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "package.json"
    path.write_text(json.dumps({"name": directory.name, **fields}), encoding="utf-8")
    return path


def _lock(directory: Path, filename: str) -> None:
    (directory / filename).write_text("", encoding="utf-8")


@pytest.mark.parametrize(
    ("declared", "expected"),
    [
        ("yarn@4.1.0", PackageManager.YARN),
        ("pnpm@9.0.0+sha512.abc", PackageManager.PNPM),
        ("npm@10.2.0", PackageManager.NPM),
    ],
)
def test_declared_manager_beats_lockfiles(tmp_path: Path, declared: str, expected: PackageManager) -> None:
    manifest = _manifest(tmp_path, packageManager=declared)
    for filename in ("pnpm-lock.yaml", "yarn.lock", "package-lock.json"):
        _lock(tmp_path, filename)

    assert resolve(manifest) is expected


def test_engines_declaration_is_honoured(tmp_path: Path) -> None:
    manifest = _manifest(tmp_path, engines={"pnpm": ">=8"})
    _lock(tmp_path, "yarn.lock")

    assert resolve(manifest) is PackageManager.PNPM


def test_exclusive_script_usage_selects_manager(tmp_path: Path) -> None:
    manifest = _manifest(tmp_path, scripts={"build": "pnpm -r build", "dev": "pnpm --filter web dev"})

    assert resolve(manifest) is PackageManager.PNPM


def test_mixed_script_usage_falls_through_to_lockfile(tmp_path: Path) -> None:
    manifest = _manifest(tmp_path, scripts={"a": "yarn build", "b": "npm test"})
    _lock(tmp_path, "pnpm-lock.yaml")

    assert resolve(manifest) is PackageManager.PNPM


def test_tool_names_inside_paths_are_not_invocations(tmp_path: Path) -> None:
    manifest = _manifest(tmp_path, scripts={"check": "node ./node_modules/.bin/yarn", "lint": "eslint ."})
    _lock(tmp_path, "pnpm-lock.yaml")

    assert resolve(manifest) is PackageManager.PNPM


def test_local_lockfile_then_default(tmp_path: Path) -> None:
    manifest = _manifest(tmp_path)

    assert resolve(manifest) is PackageManager.NPM
    _lock(tmp_path, "yarn.lock")
    assert resolve(manifest) is PackageManager.YARN


def test_nested_manifest_inherits_root_choice(tmp_path: Path) -> None:
    _manifest(tmp_path)
    _lock(tmp_path, "yarn.lock")
    nested = _manifest(tmp_path / "packages" / "ui")

    inherited = resolve_inherited(tmp_path)

    assert inherited is PackageManager.YARN
    assert resolve(nested, inherited, workspace_root=tmp_path) is PackageManager.YARN


def test_inherited_choice_beats_nested_declaration(tmp_path: Path) -> None:
    nested = _manifest(tmp_path / "app", packageManager="npm@10.0.0")

    assert resolve(nested, PackageManager.PNPM, workspace_root=tmp_path) is PackageManager.PNPM


def test_root_manifest_ignores_inherited_choice(tmp_path: Path) -> None:
    manifest = _manifest(tmp_path)
    _lock(tmp_path, "yarn.lock")

    assert resolve(manifest, PackageManager.PNPM, workspace_root=tmp_path) is PackageManager.YARN


def test_nested_manifest_uses_workspace_lockfile_without_inheritance(tmp_path: Path) -> None:
    _lock(tmp_path, "pnpm-lock.yaml")
    nested = _manifest(tmp_path / "svc")

    assert resolve(nested, None, workspace_root=tmp_path) is PackageManager.PNPM


def test_resolve_inherited_without_signals_is_none(tmp_path: Path) -> None:
    _manifest(tmp_path)

    assert resolve_inherited(tmp_path) is None


def test_lockfile_priority(tmp_path: Path) -> None:
    _lock(tmp_path, "package-lock.json")
    _lock(tmp_path, "yarn.lock")

    assert lockfile_manager(tmp_path) is PackageManager.YARN


def test_unreadable_manifest_defaults_to_npm(tmp_path: Path) -> None:
    manifest = tmp_path / "package.json"
    manifest.write_text("{ broken", encoding="utf-8")

    assert resolve(manifest) is PackageManager.NPM


def test_run_command_quotes_script_names() -> None:
    assert PackageManager.YARN.run_command("test:unit") == "yarn run test:unit"
    assert PackageManager.NPM.run_command("my script") == "npm run 'my script'"

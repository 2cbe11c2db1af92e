# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the debug configuration reader."""

from __future__ import annotations

import json

from launchdeck.models import CompoundLaunchSpec, DebugLaunchSpec, DiagnosticSpec, Dialect
from launchdeck.parsers import DebugConfigurationParser
from launchdeck.parsers.debug import find_block_span


def _launch(root, text: str):
    path = root.path / ".vscode" / "launch.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _block(text: str, task) -> str:
    assert task.position is not None
    return text[task.position.start_offset : task.position.end_offset]


def test_two_configurations_are_sorted_by_name(root, config, capture_logger) -> None:
    text = '{"configurations":[{"name":"Run B","type":"node"},{"name":"Run A","type":"node"}]}'
    _launch(root, text)
    parser = DebugConfigurationParser(config, capture_logger)

    tasks = parser.scan(root)

    assert [task.name for task in tasks] == ["Run A", "Run B"]
    assert all(task.dialect is Dialect.DEBUG for task in tasks)
    assert tasks[0].execution == DebugLaunchSpec(configuration={"name": "Run A", "type": "node"})
    assert tasks[0].detail == "node"


def test_position_spans_contain_configuration_name(root, config, capture_logger) -> None:
    text = """{
  // launch targets { not a brace that counts
  "version": "0.2.0",
  "configurations": [
    {
      "name": "Attach (port 9229) [*]",
      "type": "node",
      "request": "attach",
      "env": {"NODE_ENV": "development"},
    },
    {
      "name": "Say \\"hi\\"",
      "type": "python",
      "args": ["}", "{"],
    },
  ],
}
"""
    _launch(root, text)
    tasks = DebugConfigurationParser(config, capture_logger).scan(root)

    assert [task.name for task in tasks] == ["Attach (port 9229) [*]", 'Say "hi"']
    for task in tasks:
        block = _block(text, task)
        assert block.startswith("{")
        assert block.endswith("}")
        assert json.dumps(task.name) in block
    assert tasks[0].position is not None
    assert tasks[0].position.start_line == 4
    assert tasks[0].position.end_line == 9


def test_compounds_follow_configurations(root, config, capture_logger) -> None:
    document = {
        "configurations": [
            {"name": "Server", "type": "node"},
            {"name": "Client", "type": "chrome"},
        ],
        "compounds": [{"name": "Full Stack", "configurations": ["Server", "Client"]}],
    }
    text = json.dumps(document, indent=2)
    _launch(root, text)

    tasks = DebugConfigurationParser(config, capture_logger).scan(root)

    assert [task.name for task in tasks] == ["Client", "Server", "Full Stack"]
    compound = tasks[-1]
    assert compound.dialect is Dialect.COMPOUND
    assert compound.execution == CompoundLaunchSpec(configurations=["Server", "Client"])
    assert compound.detail == "compound: Server, Client"
    assert '"Full Stack"' in _block(text, compound)


def test_entries_without_name_or_type_are_skipped(root, config, capture_logger) -> None:
    document = {
        "configurations": [
            {"name": "Valid", "type": "go"},
            {"name": "No type"},
            {"type": "node"},
            "not an object",
        ],
        "compounds": [{"name": "Broken"}],
    }
    _launch(root, json.dumps(document))

    tasks = DebugConfigurationParser(config, capture_logger).scan(root)

    assert [task.name for task in tasks] == ["Valid"]


def test_malformed_file_yields_error_task(root, config, capture_logger) -> None:
    path = _launch(root, '{"configurations": [ {"name": ')
    parser = DebugConfigurationParser(config, capture_logger)

    tasks = parser.scan(root)

    assert len(tasks) == 1
    error = tasks[0]
    assert error.name == f"Error in {root.name}/.vscode/launch.json"
    assert error.is_error
    assert isinstance(error.execution, DiagnosticSpec)
    assert error.execution.message
    assert error.source_file == path
    assert any("Unable to parse" in message for message in capture_logger.messages("error"))


def test_non_array_configurations_is_malformed(root, config, capture_logger) -> None:
    _launch(root, '{"configurations": {"name": "x"}}')

    tasks = DebugConfigurationParser(config, capture_logger).scan(root)

    assert len(tasks) == 1
    assert tasks[0].is_error


def test_missing_file_contributes_no_section(root, config, capture_logger) -> None:
    parser = DebugConfigurationParser(config, capture_logger)

    assert parser.sections(root) == []
    assert parser.scan(root) == []


def test_section_identity_is_stable(root, config, capture_logger) -> None:
    _launch(root, '{"configurations": []}')
    parser = DebugConfigurationParser(config, capture_logger)

    first = parser.sections(root)
    second = parser.sections(root)

    assert [section.identity for section in first] == [section.identity for section in second]
    assert first[0].identity == f"debug-configurations:{root.name}:"
    assert first[0].title == "Debug Configurations"


def test_custom_loader_is_used(root, config, capture_logger) -> None:
    _launch(root, '{"configurations": [{"name": "A", "type": "node"}]}')
    calls: list[str] = []

    def loader(text: str):
        calls.append(text)
        return json.loads(text)

    tasks = DebugConfigurationParser(config, capture_logger, loader=loader).scan(root)

    assert [task.name for task in tasks] == ["A"]
    assert len(calls) == 1


def test_find_block_span_gives_up_when_braces_run_off_the_end() -> None:
    assert find_block_span('{"configurations": [{"name": "x", "env": {', "x") is None


def test_find_block_span_ignores_names_inside_comments() -> None:
    text = '{\n  // "name": "x"\n  "items": [{"name": "x"}]}'

    span = find_block_span(text, "x")

    assert span is not None
    assert text[span[0] : span[1]] == '{"name": "x"}'


def test_find_block_span_escapes_regex_characters() -> None:
    text = '[{"name": "a.b"}, {"name": "a+b"}]'

    span = find_block_span(text, "a+b")

    assert span is not None
    assert text[span[0] : span[1]] == '{"name": "a+b"}'
    assert find_block_span(text, "a?b") is None

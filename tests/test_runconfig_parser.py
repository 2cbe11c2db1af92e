# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the IDE run-configuration reader."""

from __future__ import annotations

import shlex
from pathlib import Path

import pytest

from launchdeck.errors import MalformedSourceError, UnresolvedExecutionSpecError
from launchdeck.models import Dialect, ProjectRoot, ShellCommandSpec
from launchdeck.parsers import RunConfigurationParser
from launchdeck.parsers.runconfig import extract_generic, extract_go, extractor_for, read_configuration

GO_SERVER = """\
<component name="ProjectRunConfigurationManager">
  <configuration default="false" name="Server" type="GoApplicationRunConfiguration" factoryName="Go Application">
    <module name="project" />
    <working_directory value="$PROJECT_DIR$/cmd" />
    <kind value="PACKAGE" />
    <package value="./cmd/server" />
    <parameters value="--port 8080" />
    <envs>
      <env name="MODE" value="dev" />
      <env name="DATA" value="$PROJECT_DIR$/data" />
    </envs>
    <method v="2" />
  </configuration>
</component>
"""

SHELL_FILE = """\
<project version="4">
  <component name="ProjectRunConfigurationManager">
    <configuration name="Migrate" type="ShConfigurationType">
      <option name="SCRIPT_TEXT" value="" />
      <option name="SCRIPT_PATH" value="$PROJECT_DIR$/scripts/migrate.sh" />
      <option name="SCRIPT_OPTIONS" value="--all" />
      <option name="SCRIPT_WORKING_DIRECTORY" value="$PROJECT_DIR$/db" />
      <option name="INTERPRETER_PATH" value="/bin/bash" />
      <option name="INTERPRETER_OPTIONS" value="" />
      <option name="EXECUTE_SCRIPT_FILE" value="true" />
      <envs />
    </configuration>
  </component>
</project>
"""

SHELL_INLINE = """\
<component name="ProjectRunConfigurationManager">
  <configuration name="Hello" type="ShConfigurationType">
    <option name="SCRIPT_TEXT" value="echo hello" />
    <option name="SCRIPT_PATH" value="" />
    <option name="EXECUTE_SCRIPT_FILE" value="false" />
  </configuration>
</component>
"""

PYTHON_MODULE = """\
<component name="ProjectRunConfigurationManager">
  <configuration name="Tool" type="PythonConfigurationType" factoryName="Python">
    <option name="SCRIPT_NAME">
      <value value="tool.cli" />
    </option>
    <option name="MODULE_MODE" value="true" />
    <option name="PARAMETERS">
      <value>--verbose</value>
    </option>
    <option name="WORKING_DIRECTORY" value="$PROJECT_DIR$" />
    <option name="envs">
      <map>
        <entry key="PYTHONPATH" value="$MODULE_DIR$/src" />
      </map>
    </option>
  </configuration>
</component>
"""

GO_FLATTENED = """\
<configuration name="Worker" type="GoApplicationRunConfiguration" kind="FILE" \
filePath="$PROJECT_DIR$/worker/main.go" working_directory="$PROJECT_DIR$" />
"""


def _config_file(root: ProjectRoot, name: str, text: str, directory: str = ".run") -> Path:
    path = root.path / directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _only_task(root, config, capture_logger):
    tasks = RunConfigurationParser(config, capture_logger).scan(root)
    assert len(tasks) == 1
    return tasks[0]


def test_go_application_with_project_dir_token(root, config, capture_logger) -> None:
    _config_file(root, "Server.run.xml", GO_SERVER)

    task = _only_task(root, config, capture_logger)

    assert task.name == "Server"
    assert task.dialect is Dialect.RUN_CONFIG
    assert task.detail == "GoApplicationRunConfiguration"
    assert task.execution == ShellCommandSpec(
        command="go run ./cmd/server --port 8080",
        cwd=root.path / "cmd",
        env={"MODE": "dev", "DATA": f"{root.path}/data"},
        target="./cmd/server",
    )


def test_shell_script_file_mode(root, config, capture_logger) -> None:
    _config_file(root, "migrate.xml", SHELL_FILE)

    task = _only_task(root, config, capture_logger)

    script = f"{root.path}/scripts/migrate.sh"
    assert isinstance(task.execution, ShellCommandSpec)
    assert task.execution.command == f"/bin/bash {shlex.quote(script)} --all"
    assert task.execution.cwd == root.path / "db"
    assert task.execution.target == script


def test_shell_inline_script(root, config, capture_logger) -> None:
    _config_file(root, "hello.xml", SHELL_INLINE)

    task = _only_task(root, config, capture_logger)

    assert task.execution == ShellCommandSpec(command="echo hello", cwd=root.path)


def test_python_module_with_nested_value_elements(root, config, capture_logger) -> None:
    _config_file(root, "tool.xml", PYTHON_MODULE, directory=".idea/runConfigurations")

    task = _only_task(root, config, capture_logger)

    assert task.execution == ShellCommandSpec(
        command="python -m tool.cli --verbose",
        cwd=root.path,
        env={"PYTHONPATH": f"{root.path}/src"},
        target="tool.cli",
    )


def test_flattened_attribute_schema(root, config, capture_logger) -> None:
    _config_file(root, "worker.xml", GO_FLATTENED)

    task = _only_task(root, config, capture_logger)

    target = f"{root.path}/worker/main.go"
    assert task.execution == ShellCommandSpec(command=f"go run {target}", cwd=root.path, target=target)


def test_templates_and_unnamed_configurations_are_skipped(root, config, capture_logger) -> None:
    _config_file(root, "template.xml", GO_SERVER.replace('default="false"', 'default="true"'))
    _config_file(root, "untyped.xml", '<configuration name="Nameless" />')
    _config_file(root, "anonymous.xml", '<configuration type="ShConfigurationType" />')

    assert RunConfigurationParser(config, capture_logger).scan(root) == []


def test_unsupported_type_is_dropped_and_logged(root, config, capture_logger) -> None:
    _config_file(root, "node.xml", '<configuration name="Node" type="NodeJSConfigurationType" working_directory="$PROJECT_DIR$" />')
    _config_file(root, "hello.xml", SHELL_INLINE)

    tasks = RunConfigurationParser(config, capture_logger).scan(root)

    assert [task.name for task in tasks] == ["Hello"]
    assert any("Dropping run configuration" in message for message in capture_logger.messages("info"))


def test_malformed_file_does_not_abort_remaining_files(root, config, capture_logger) -> None:
    _config_file(root, "broken.xml", "<component><configuration name=")
    _config_file(root, "no-config.xml", "<project><component /></project>")
    _config_file(root, "hello.xml", SHELL_INLINE)

    tasks = RunConfigurationParser(config, capture_logger).scan(root)

    assert [task.name for task in tasks] == ["Hello"]
    assert len(set(capture_logger.messages("warn"))) == 2


def test_duplicate_names_keep_first_directory(root, config, capture_logger) -> None:
    first = _config_file(root, "server.xml", GO_SERVER)
    _config_file(root, "server.xml", GO_SERVER.replace("./cmd/server", "./cmd/other"), directory=".idea/runConfigurations")

    task = _only_task(root, config, capture_logger)

    assert task.source_file == first
    assert isinstance(task.execution, ShellCommandSpec)
    assert task.execution.target == "./cmd/server"


def test_results_are_sorted_by_name(root, config, capture_logger) -> None:
    _config_file(root, "a.xml", SHELL_INLINE.replace('name="Hello"', 'name="zeta"'))
    _config_file(root, "b.xml", SHELL_INLINE.replace('name="Hello"', 'name="Alpha"'))
    _config_file(root, "c.xml", SHELL_INLINE.replace('name="Hello"', 'name="beta"'))

    tasks = RunConfigurationParser(config, capture_logger).scan(root)

    assert [task.name for task in tasks] == ["Alpha", "beta", "zeta"]


def test_directory_lookup_is_case_insensitive(root, config, capture_logger) -> None:
    _config_file(root, "hello.xml", SHELL_INLINE, directory=".idea/RunConfigurations")

    assert _only_task(root, config, capture_logger).name == "Hello"


def test_directory_without_valid_configurations_has_no_section(root, config, capture_logger) -> None:
    (root.path / ".run").mkdir()
    _config_file(root, "node.xml", '<configuration name="Node" type="NodeJSConfigurationType" />')
    parser = RunConfigurationParser(config, capture_logger)

    assert parser.sections(root) == []


def test_section_exists_when_a_configuration_resolves(root, config, capture_logger) -> None:
    _config_file(root, "hello.xml", SHELL_INLINE)

    sections = RunConfigurationParser(config, capture_logger).sections(root)

    assert [section.title for section in sections] == ["Run Configurations"]
    assert sections[0].identity == f"ide-run-configurations:{root.name}:"


def test_read_configuration_rejects_documents_without_configuration(root) -> None:
    with pytest.raises(MalformedSourceError):
        read_configuration("<project />", root.path / "x.xml", root)


def test_extractors_dispatch_by_substring() -> None:
    assert extractor_for("GoApplicationRunConfiguration") is extract_go
    assert extractor_for("com.vendor.GoApplicationRunConfiguration:v2") is extract_go
    assert extractor_for("SomethingElse") is extract_generic


def test_catch_all_extractor_never_resolves(root) -> None:
    document = """\
<component name="ProjectRunConfigurationManager">
  <configuration name="Tool" type="CustomToolType">
    <option name="WORKING_DIRECTORY" value="$PROJECT_DIR$/tools" />
    <option name="SCRIPT_TEXT" value="echo hi" />
  </configuration>
</component>
"""
    configuration = read_configuration(document, root.path / "tool.xml", root)
    assert configuration is not None

    with pytest.raises(UnresolvedExecutionSpecError, match="no command can be derived for type CustomToolType"):
        extract_generic(configuration, root)

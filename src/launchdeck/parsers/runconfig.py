# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reader for third-party IDE run configurations stored as XML.

Run configuration files have been written in several shapes over time. The
``<configuration>`` element may be wrapped in ``<component>`` (itself wrapped
in a project element) or stand on its own, and its fields may be expressed as
``<option name=".." value=".."/>`` lists, as ``<option>`` elements holding a
nested ``<value>``, as dedicated elements carrying a ``value`` attribute, or as
attributes flattened onto ``<configuration>`` itself. Each shape is modelled
as a reader; readers are tried newest first and earlier readers win.
"""

from __future__ import annotations

import shlex
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final
from xml.etree.ElementTree import Element

from defusedxml.ElementTree import ParseError, fromstring

from ..constants import PROJECT_DIR_TOKENS
from ..errors import MalformedSourceError, UnresolvedExecutionSpecError
from ..models import Dialect, DiscoveredTask, ProjectRoot, Section, SectionKind, ShellCommandSpec, SourcePosition
from .base import RECOVERABLE_ERRORS, SourceParser, read_text, task_id_for

SECTION_TITLE: Final[str] = "Run Configurations"
XML_SUFFIX: Final[str] = ".xml"
DEFAULT_SHELL_INTERPRETER: Final[str] = "sh"
DEFAULT_PYTHON_INTERPRETER: Final[str] = "python"

_RESERVED_ATTRIBUTES: Final[frozenset[str]] = frozenset({"name", "type", "default", "factoryName", "folderName"})
_ENV_OPTION_NAMES: Final[frozenset[str]] = frozenset({"ENV_VARIABLES", "envs"})
_TRUE_VALUES: Final[frozenset[str]] = frozenset({"true", "1", "yes"})


@dataclass(slots=True, frozen=True)
class RunConfiguration:
    """Schema-independent view of one ``<configuration>`` element."""

    name: str
    type: str
    source_file: Path
    fields: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)

    def get(self, *names: str) -> str | None:
        """Return the first non-blank field among ``names``."""

        for name in names:
            value = self.fields.get(name)
            if value is not None and value.strip():
                return value
        return None

    def flag(self, name: str) -> bool | None:
        value = self.fields.get(name)
        if value is None:
            return None
        return value.strip().lower() in _TRUE_VALUES


def substitute_tokens(value: str, root: ProjectRoot) -> str:
    """Replace project-directory tokens in ``value`` with the concrete root path."""

    for token in PROJECT_DIR_TOKENS:
        value = value.replace(token, str(root.path))
    return value


# Locating strategies for the <configuration> element.


def _wrapped_in_project(document: Element) -> Element | None:
    return document.find("./component/configuration")


def _wrapped_in_component(document: Element) -> Element | None:
    return document.find("./configuration") if document.tag == "component" else None


def _bare_configuration(document: Element) -> Element | None:
    return document if document.tag == "configuration" else None


LOCATORS: Final[tuple[Callable[[Element], Element | None], ...]] = (
    _wrapped_in_project,
    _wrapped_in_component,
    _bare_configuration,
)


# Field readers, newest schema shape first.


def _option_fields(configuration: Element) -> dict[str, str]:
    fields: dict[str, str] = {}
    for option in configuration.findall("./option"):
        name = option.get("name")
        if not name or name in _ENV_OPTION_NAMES:
            continue
        value = option.get("value")
        if value is None:
            nested = option.find("./value")
            if nested is not None:
                value = nested.get("value", nested.text or "")
        if value is not None:
            fields.setdefault(name, value)
    return fields


def _element_fields(configuration: Element) -> dict[str, str]:
    fields: dict[str, str] = {}
    for child in configuration:
        if child.tag in {"option", "envs", "method"}:
            continue
        value = child.get("value")
        if value is not None:
            fields.setdefault(child.tag, value)
    return fields


def _attribute_fields(configuration: Element) -> dict[str, str]:
    return {key: value for key, value in configuration.attrib.items() if key not in _RESERVED_ATTRIBUTES}


FIELD_READERS: Final[tuple[Callable[[Element], dict[str, str]], ...]] = (
    _option_fields,
    _element_fields,
    _attribute_fields,
)


def _env_entries(configuration: Element) -> Iterator[tuple[str, str]]:
    for env in configuration.findall("./envs/env"):
        if name := env.get("name"):
            yield name, env.get("value", "")
    for option in configuration.findall("./option"):
        if option.get("name") not in _ENV_OPTION_NAMES:
            continue
        for entry in option.iter("entry"):
            if key := entry.get("key"):
                yield key, entry.get("value", "")


def locate_configuration(document: Element) -> Element | None:
    """Return the ``<configuration>`` element using the first matching strategy."""

    for locator in LOCATORS:
        if (found := locator(document)) is not None:
            return found
    return None


def read_configuration(text: str, source_file: Path, root: ProjectRoot) -> RunConfiguration | None:
    """Parse one run configuration document.

    Args:
        text: XML document text.
        source_file: File the text was read from.
        root: Project root used for token substitution.

    Returns:
        RunConfiguration | None: Parsed configuration, or ``None`` for templates and
        documents missing a name or type.

    Raises:
        MalformedSourceError: If the XML is invalid or no configuration element exists.
    """

    try:
        document = fromstring(text)
    except ParseError as exc:
        raise MalformedSourceError(source_file, str(exc)) from exc
    configuration = locate_configuration(document)
    if configuration is None:
        raise MalformedSourceError(source_file, "no <configuration> element found")
    if configuration.get("default", "").lower() == "true":
        return None
    name = (configuration.get("name") or "").strip()
    type_name = (configuration.get("type") or "").strip()
    if not name or not type_name:
        return None
    merged: dict[str, str] = {}
    for reader in FIELD_READERS:
        for key, value in reader(configuration).items():
            merged.setdefault(key, substitute_tokens(value, root))
    env = {key: substitute_tokens(value, root) for key, value in _env_entries(configuration)}
    return RunConfiguration(name=name, type=type_name, source_file=source_file, fields=merged, env=env)


# Type-specific extractors.


def _working_directory(configuration: RunConfiguration, root: ProjectRoot, *names: str) -> Path:
    value = configuration.get(*names)
    if value is None:
        return root.path
    path = Path(value).expanduser()
    return path if path.is_absolute() else root.path / path


def extract_shell(configuration: RunConfiguration, root: ProjectRoot) -> ShellCommandSpec:
    """Build the command for a shell-script configuration (inline text or script file)."""

    script_text = configuration.get("SCRIPT_TEXT")
    script_path = configuration.get("SCRIPT_PATH")
    execute_file = configuration.flag("EXECUTE_SCRIPT_FILE")
    if execute_file is None:
        execute_file = script_path is not None and script_text is None
    cwd = _working_directory(configuration, root, "SCRIPT_WORKING_DIRECTORY")
    if execute_file and script_path:
        parts = [configuration.get("INTERPRETER_PATH") or DEFAULT_SHELL_INTERPRETER]
        if interpreter_options := configuration.get("INTERPRETER_OPTIONS"):
            parts.append(interpreter_options)
        parts.append(shlex.quote(script_path))
        if options := configuration.get("SCRIPT_OPTIONS"):
            parts.append(options)
        return ShellCommandSpec(command=" ".join(parts), cwd=cwd, env=dict(configuration.env), target=script_path)
    if script_text:
        return ShellCommandSpec(command=script_text, cwd=cwd, env=dict(configuration.env))
    raise UnresolvedExecutionSpecError(f"{configuration.name}: shell configuration has neither script text nor path")


_GO_TARGET_FIELDS: Final[dict[str, str]] = {
    "PACKAGE": "package",
    "FILE": "filePath",
    "DIRECTORY": "directory",
}


def extract_go(configuration: RunConfiguration, root: ProjectRoot) -> ShellCommandSpec:
    """Build ``go run`` for a compiled application configuration."""

    kind = (configuration.get("kind") or "PACKAGE").upper()
    preferred = _GO_TARGET_FIELDS.get(kind, "package")
    target = configuration.get(preferred, *_GO_TARGET_FIELDS.values())
    if target is None:
        raise UnresolvedExecutionSpecError(f"{configuration.name}: application configuration has no run target")
    parts = ["go", "run"]
    if go_parameters := configuration.get("go_parameters"):
        parts.append(go_parameters)
    parts.append(target)
    if parameters := configuration.get("parameters"):
        parts.append(parameters)
    return ShellCommandSpec(
        command=" ".join(parts),
        cwd=_working_directory(configuration, root, "working_directory"),
        env=dict(configuration.env),
        target=target,
    )


def extract_python(configuration: RunConfiguration, root: ProjectRoot) -> ShellCommandSpec:
    """Build the interpreter invocation for a Python script or module configuration."""

    parts = [configuration.get("SDK_HOME") or DEFAULT_PYTHON_INTERPRETER]
    if interpreter_options := configuration.get("INTERPRETER_OPTIONS"):
        parts.append(interpreter_options)
    script = configuration.get("SCRIPT_NAME")
    if script is None:
        raise UnresolvedExecutionSpecError(f"{configuration.name}: python configuration has no script or module")
    if configuration.flag("MODULE_MODE"):
        parts.extend(["-m", script])
    else:
        parts.append(shlex.quote(script))
    if parameters := configuration.get("PARAMETERS"):
        parts.append(parameters)
    return ShellCommandSpec(
        command=" ".join(parts),
        cwd=_working_directory(configuration, root, "WORKING_DIRECTORY"),
        env=dict(configuration.env),
        target=script,
    )


def extract_generic(configuration: RunConfiguration, root: ProjectRoot) -> ShellCommandSpec:
    """Catch-all extractor for unrecognised configuration types.

    It never yields a command: the working directory is resolved for the error
    message only, and :class:`UnresolvedExecutionSpecError` is always raised, so
    the parser drops every such configuration and logs it.
    """

    cwd = _working_directory(configuration, root, "working_directory", "WORKING_DIRECTORY")
    raise UnresolvedExecutionSpecError(
        f"{configuration.name}: no command can be derived for type {configuration.type} (cwd={cwd})",
    )


Extractor = Callable[[RunConfiguration, ProjectRoot], ShellCommandSpec]

EXTRACTORS: Final[tuple[tuple[str, Extractor], ...]] = (
    ("ShConfigurationType", extract_shell),
    ("GoApplicationRunConfiguration", extract_go),
    ("PythonConfigurationType", extract_python),
)


def extractor_for(type_name: str) -> Extractor:
    """Return the extractor whose marker occurs in ``type_name``."""

    for marker, extractor in EXTRACTORS:
        if marker in type_name:
            return extractor
    return extract_generic


def _find_directory(base: Path, relative: str) -> Path | None:
    """Resolve ``relative`` below ``base`` matching each component case-insensitively."""

    current = base
    for part in Path(relative).parts:
        exact = current / part
        if exact.is_dir():
            current = exact
            continue
        if not current.is_dir():
            return None
        matches = sorted(child for child in current.iterdir() if child.is_dir() and child.name.lower() == part.lower())
        if not matches:
            return None
        current = matches[0]
    return current


class RunConfigurationParser(SourceParser):
    """Emit a single section per root listing every valid run configuration."""

    section_kind = SectionKind.RUN_CONFIGS

    def configuration_files(self, root: ProjectRoot) -> list[Path]:
        """Return XML files from the configured directories, in directory order."""

        files: list[Path] = []
        seen: set[Path] = set()
        for relative in self.config.run_config_dirs:
            directory = _find_directory(root.path, relative)
            if directory is None:
                continue
            for path in sorted(directory.rglob("*")):
                if path.is_file() and path.suffix.lower() == XML_SUFFIX and path not in seen:
                    seen.add(path)
                    files.append(path)
        return files

    def sections(self, root: ProjectRoot) -> list[Section]:
        section = Section(kind=self.section_kind, title=SECTION_TITLE, root=root)
        return [section] if self.tasks(section) else []

    def _parse(self, section: Section) -> list[DiscoveredTask]:
        root = section.root
        if root is None:
            raise ValueError(f"section {section.identity} has no project root")
        tasks: dict[str, DiscoveredTask] = {}
        for path in self.configuration_files(root):
            task = self._parse_file(section, root, path)
            if task is None:
                continue
            if task.name in tasks:
                self.logger.debug(f"duplicate run configuration name={task.name!r} file={path}")
                continue
            tasks[task.name] = task
        return sorted(tasks.values(), key=lambda task: (task.name.casefold(), task.name))

    def _parse_file(self, section: Section, root: ProjectRoot, path: Path) -> DiscoveredTask | None:
        try:
            configuration = read_configuration(read_text(path), path, root)
            if configuration is None:
                self.logger.debug(f"skipping template or unnamed run configuration file={path}")
                return None
            spec = extractor_for(configuration.type)(configuration, root)
        except UnresolvedExecutionSpecError as exc:
            self.logger.info(f"Dropping run configuration from {path.name}: {exc}")
            return None
        except RECOVERABLE_ERRORS as exc:
            self.logger.warn(f"Skipping run configuration {path}: {exc}")
            return None
        return DiscoveredTask(
            name=configuration.name,
            dialect=Dialect.RUN_CONFIG,
            source_file=path,
            root=root,
            execution=spec,
            position=SourcePosition.from_offsets("", 0, 0),
            detail=configuration.type,
            task_id=task_id_for(section, configuration.name),
        )


__all__ = [
    "EXTRACTORS",
    "FIELD_READERS",
    "LOCATORS",
    "RunConfiguration",
    "RunConfigurationParser",
    "extract_generic",
    "extract_go",
    "extract_python",
    "extract_shell",
    "extractor_for",
    "locate_configuration",
    "read_configuration",
    "substitute_tokens",
]

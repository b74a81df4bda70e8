"""Configuration and options accepted by :func:`buildtasks.define_tasks`."""

from __future__ import annotations

import dataclasses
import pathlib
from typing import FrozenSet, Iterable, List, Mapping, Tuple, Union

import yaml

from .errors import ConfigurationError

DEFAULT_ARTIFACTS_PATH = "out"


@dataclasses.dataclass(frozen=True, slots=True)
class Configuration:
    """Settings resolved from options before any task is defined."""

    artifacts_path: str = DEFAULT_ARTIFACTS_PATH
    excluded_tasks: FrozenSet[str] = frozenset()

    def excluded(self, task: str) -> bool:
        return task in self.excluded_tasks


@dataclasses.dataclass(frozen=True, slots=True)
class SetArtifactsPath:
    """Overwrites the directory build artifacts such as coverage reports go to."""

    path: str


@dataclasses.dataclass(frozen=True, slots=True)
class ExcludeTasks:
    """Adds task names that should not be defined."""

    names: Tuple[str, ...]


Option = Union[SetArtifactsPath, ExcludeTasks]


def artifacts_path(path: str) -> Option:
    """Return an option setting the path temporary build artifacts are written to.

    If not provided, the default is ``"out"``.
    """

    return SetArtifactsPath(path)


def exclude_tasks(*names: str) -> Option:
    """Return an option excluding tasks normally added by default.

    This can be used to avoid unneeded tasks, for example to disable linting of
    Markdown while keeping the ability to autoformat it, or to redefine a task
    with a different implementation.
    """

    return ExcludeTasks(tuple(names))


def build_configuration(options: Iterable[Option]) -> Configuration:
    """Fold ``options`` in order over the default configuration."""

    configuration = Configuration()
    for option in options:
        configuration = _apply(configuration, option)
    return configuration


def _apply(configuration: Configuration, option: Option) -> Configuration:
    if isinstance(option, SetArtifactsPath):
        return dataclasses.replace(configuration, artifacts_path=option.path)
    if isinstance(option, ExcludeTasks):
        return dataclasses.replace(
            configuration,
            excluded_tasks=configuration.excluded_tasks | frozenset(option.names),
        )
    raise TypeError(f"Unsupported option: {option!r}")


def unknown_exclusions(configuration: Configuration, known: Iterable[str]) -> List[str]:
    """Return excluded names that do not match any of the ``known`` task names."""

    return sorted(configuration.excluded_tasks - set(known))


def load_options(path: pathlib.Path) -> List[Option]:
    """Read options from a YAML file.

    The document may define ``artifacts_path`` (string) and ``exclude_tasks``
    (string or list of strings). Both keys are optional.
    """

    if not path.exists():
        raise ConfigurationError(f"Options file does not exist: {path}")

    with path.open("r", encoding="utf-8") as handle:
        try:
            payload = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Options file {path} is not valid YAML: {exc}") from exc

    if payload is None:
        return []
    if not isinstance(payload, Mapping):
        raise ConfigurationError("Options file must define a mapping at the top level")

    options: List[Option] = []
    if "artifacts_path" in payload:
        value = payload["artifacts_path"]
        if not isinstance(value, str):
            raise ConfigurationError("Option 'artifacts_path' must be a string")
        options.append(artifacts_path(value))
    if "exclude_tasks" in payload:
        names = _ensure_str_list(payload["exclude_tasks"], field="exclude_tasks")
        options.append(exclude_tasks(*names))
    return options


def _ensure_str_list(value: object, *, field: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray, Mapping)):
        result: List[str] = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"Option '{field}' must contain only strings")
            result.append(item)
        return result
    raise ConfigurationError(f"Option '{field}' must be a list of strings")

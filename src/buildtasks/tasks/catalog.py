"""Built-in tasks for Go projects and the meta-tasks that aggregate them."""

from __future__ import annotations

import dataclasses
import logging
import os
import pathlib
from typing import Callable, List, Sequence, Tuple

from .. import versions
from ..config import Option, build_configuration, unknown_exclusions
from ..errors import RegistryError
from ..execution.context import TaskContext
from ..models import Task, TaskAction
from .buckets import FORMAT, GENERATE, LINT, BucketBuilder, Buckets
from .registry import TaskRegistry

logger = logging.getLogger(__name__)

GOLANGCI_LINT = f"go run github.com/golangci/golangci-lint/cmd/golangci-lint@{versions.GOLANGCI_LINT}"
PRETTIER = f"go run github.com/wasilibs/go-prettier/cmd/prettier@{versions.GO_PRETTIER} --no-error-on-unmatched-pattern"
YAMLLINT = f"go run github.com/wasilibs/go-yamllint/cmd/yamllint@{versions.GO_YAMLLINT}"

MARKDOWN_GLOBS = "'**/*.md'"
YAML_GLOBS = "'**/*.yaml' '**/*.yml'"

# Projects commonly keep their build scripts in a "build" folder; when it is
# also a Go module it is checked alongside the main one.
SECONDARY_MODULE_MARKER = pathlib.PurePath("build", "go.mod")
SECONDARY_MODULE_TARGET = "./build"


@dataclasses.dataclass(frozen=True, slots=True)
class CatalogEntry:
    name: str
    usage: str
    family: str
    render: Callable[[Sequence[str]], Tuple[str, ...]]


def _golangci(*args: str) -> Callable[[Sequence[str]], Tuple[str, ...]]:
    def render(targets: Sequence[str]) -> Tuple[str, ...]:
        return (" ".join((GOLANGCI_LINT, "run", *args, "--timeout=20m", *targets)),)

    return render


def _fixed(*commands: str) -> Callable[[Sequence[str]], Tuple[str, ...]]:
    return lambda _targets: commands


CATALOG: Tuple[CatalogEntry, ...] = (
    CatalogEntry("format-go", "Formats Go code.", FORMAT, _golangci("--fix")),
    CatalogEntry("lint-go", "Lints Go code.", LINT, _golangci()),
    CatalogEntry(
        "format-markdown",
        "Formats Markdown code.",
        FORMAT,
        _fixed(f"{PRETTIER} --write {MARKDOWN_GLOBS}"),
    ),
    CatalogEntry(
        "lint-markdown",
        "Lints Markdown code.",
        LINT,
        _fixed(f"{PRETTIER} --check {MARKDOWN_GLOBS}"),
    ),
    CatalogEntry(
        "format-yaml",
        "Formats YAML code.",
        FORMAT,
        _fixed(f"{PRETTIER} --write {YAML_GLOBS}"),
    ),
    CatalogEntry(
        "lint-yaml",
        "Lints YAML code.",
        LINT,
        _fixed(f"{PRETTIER} --check {YAML_GLOBS}", f"{YAMLLINT} ."),
    ),
)

CATALOG_NAMES = tuple(entry.name for entry in CATALOG)
META_TASK_NAMES = ("format", "lint", "generate", "test", "check")


@dataclasses.dataclass(frozen=True, slots=True)
class DefinedTasks:
    """Handles to the meta-tasks defined by :func:`define_tasks`."""

    format: Task
    lint: Task
    generate: Task
    test: Task
    check: Task
    buckets: Buckets


def golangci_targets(project_root: pathlib.Path) -> List[str]:
    """Return the package patterns golangci-lint is run against."""

    targets = ["./..."]
    if (project_root / SECONDARY_MODULE_MARKER).exists():
        targets.append(SECONDARY_MODULE_TARGET)
    return targets


def ensure_directory(path: pathlib.Path) -> pathlib.Path:
    """Create ``path`` and its parents; an existing directory is not an error."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def coverage_path(artifacts_path: str) -> str:
    return os.path.join(artifacts_path, "coverage.txt")


def unit_test_command(artifacts_path: str) -> str:
    return (
        f"go test -coverprofile={coverage_path(artifacts_path)} "
        "-covermode=atomic -v -timeout=20m ./..."
    )


def _exec_all(commands: Tuple[str, ...]) -> TaskAction:
    def action(context: TaskContext) -> None:
        for command in commands:
            context.exec(command)

    return action


def _run_tests(artifacts_path: str, command: str) -> TaskAction:
    def action(context: TaskContext) -> None:
        try:
            ensure_directory(context.workdir / artifacts_path)
        except OSError as exc:
            context.fail(f"failed to create {artifacts_path} directory: {exc}")
            return
        context.exec(command)

    return action


def define_tasks(
    registry: TaskRegistry,
    *options: Option,
    project_root: pathlib.Path | str | None = None,
) -> DefinedTasks:
    """Define the common tasks for Go projects in ``registry``.

    Leaf tasks named in an :func:`~buildtasks.exclude_tasks` option are not
    defined at all and do not appear in any meta-task's dependencies. Tasks
    contributed with :func:`register_format_task` and friends before this call
    are added to the matching meta-task.

    Name collisions with already defined tasks are reported before anything
    is defined. :class:`~buildtasks.TaskRunner` runs these tasks in
    ``project_root`` unless given another working directory.
    """

    configuration = build_configuration(options)
    root = pathlib.Path(project_root) if project_root is not None else pathlib.Path.cwd()

    for name in unknown_exclusions(configuration, CATALOG_NAMES):
        logger.warning("Excluded task '%s' is not part of the catalog; ignoring it", name)

    pending = [name for name in CATALOG_NAMES if not configuration.excluded(name)]
    taken = [name for name in (*pending, *META_TASK_NAMES) if name in registry]
    if taken:
        raise RegistryError(f"Tasks already defined: {', '.join(taken)}; exclude them to redefine")

    registry.project_root = root
    targets = golangci_targets(root)
    logger.debug("golangci-lint targets: %s", " ".join(targets))

    buckets = BucketBuilder()
    buckets.extend(registry.contributions)

    for entry in CATALOG:
        if configuration.excluded(entry.name):
            logger.debug("Skipping excluded task %s", entry.name)
            continue
        commands = entry.render(targets)
        task = registry.define(
            Task(
                name=entry.name,
                usage=entry.usage,
                action=_exec_all(commands),
                parallel=True,
                commands=commands,
            )
        )
        buckets.add(entry.family, task)
        logger.debug("Defined task %s", entry.name)

    frozen = buckets.freeze()

    format_task = registry.define(
        Task(name="format", usage="Format code in various languages.", deps=frozen.format)
    )
    lint_task = registry.define(
        Task(name="lint", usage="Lints code in various languages.", deps=frozen.lint)
    )
    generate_task = registry.define(
        Task(name="generate", usage="Generates code.", deps=frozen.generate)
    )

    command = unit_test_command(configuration.artifacts_path)
    unit_tests = registry.define(
        Task(
            name="test",
            usage="Runs unit tests.",
            action=_run_tests(configuration.artifacts_path, command),
            commands=(command,),
        )
    )

    check_task = registry.define(
        Task(name="check", usage="Runs all checks.", deps=(lint_task, unit_tests))
    )

    return DefinedTasks(
        format=format_task,
        lint=lint_task,
        generate=generate_task,
        test=unit_tests,
        check=check_task,
        buckets=frozen,
    )


def _register(registry: TaskRegistry, family: str, task: Task) -> Task:
    defined = registry.define(task)
    return registry.contributions.add(family, defined)


def register_format_task(registry: TaskRegistry, task: Task) -> Task:
    """Define ``task`` and make the ``format`` task depend on it."""

    return _register(registry, FORMAT, task)


def register_lint_task(registry: TaskRegistry, task: Task) -> Task:
    """Define ``task`` and make the ``lint`` task depend on it."""

    return _register(registry, LINT, task)


def register_generate_task(registry: TaskRegistry, task: Task) -> Task:
    """Define ``task`` and make the ``generate`` task depend on it."""

    return _register(registry, GENERATE, task)

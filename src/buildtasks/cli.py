"""Command line interface for buildtasks."""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
from typing import List, Optional

from .config import Option, artifacts_path, exclude_tasks, load_options
from .errors import ConfigurationError, RegistryError
from .execution.report import RunReport
from .runner import TaskRunner
from .tasks import TaskRegistry, define_tasks

DEFAULT_TASK = "check"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildtasks",
        description="Format, lint and test Go projects",
    )
    parser.add_argument("tasks", nargs="*", help=f"Tasks to run (defaults to '{DEFAULT_TASK}')")
    parser.add_argument("--list", action="store_true", help="List the defined tasks and exit")
    parser.add_argument(
        "--config",
        help="YAML file with 'artifacts_path' and 'exclude_tasks' options",
    )
    parser.add_argument(
        "--artifacts-path",
        help="Directory for build artifacts such as coverage reports (default: out)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="TASK",
        help="Do not define the given task (can be used multiple times)",
    )
    parser.add_argument(
        "--project-root",
        default=".",
        help="Directory the tasks run in (default: current directory)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the tasks and commands that would run without running them",
    )
    parser.add_argument("--json", action="store_true", help="Emit the run report as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    project_root = pathlib.Path(args.project_root)
    options: List[Option] = []
    if args.config:
        try:
            options.extend(load_options(pathlib.Path(args.config)))
        except ConfigurationError as exc:
            parser.error(str(exc))
            return 2
    if args.artifacts_path is not None:
        options.append(artifacts_path(args.artifacts_path))
    if args.exclude:
        options.append(exclude_tasks(*args.exclude))

    registry = TaskRegistry()
    define_tasks(registry, *options, project_root=project_root)

    if args.list:
        _print_tasks(registry)
        return 0

    runner = TaskRunner(registry, workdir=project_root)
    try:
        report = runner.run(args.tasks or [DEFAULT_TASK], dry_run=args.dry_run)
    except RegistryError as exc:
        parser.error(str(exc))
        return 2

    if args.json:
        _print_json(report)
    else:
        _print_human(report)

    return 0 if report.succeeded else 1


def _print_tasks(registry: TaskRegistry) -> None:
    width = max((len(name) for name in registry.names()), default=0)
    for task in registry:
        line = f"  {task.name.ljust(width)}  {task.summary()}"
        if task.deps:
            line += f" (deps: {', '.join(task.dependency_names)})"
        print(line.rstrip())


def _print_json(report: RunReport) -> None:
    print(json.dumps(report.as_dict(), indent=2))


def _print_human(report: RunReport) -> None:
    for task in report.tasks:
        print(f"===== {task.name}: {task.status.upper()}")
        for message in task.messages:
            print(f"  {message}")

    if report.dry_run:
        print("\nDry run, nothing was executed.")
    elif report.succeeded:
        print("\nAll tasks passed.")
    else:
        print("\nFailed tasks:")
        for name in report.failed_tasks:
            print(f"  - {name}")
        if report.skipped_tasks:
            print("Skipped tasks:")
            for name in report.skipped_tasks:
                print(f"  - {name}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())

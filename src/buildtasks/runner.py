"""Executes defined tasks in dependency order."""

from __future__ import annotations

import concurrent.futures
import logging
import pathlib
import time
from typing import Dict, Iterable, List, Optional

from .command import run_command
from .errors import TaskExecutionError
from .execution.context import CommandExecutor, TaskContext
from .execution.report import FAILED, PASSED, PLANNED, SKIPPED, RunReport, TaskResult
from .models import Task, resolve_order
from .tasks.registry import TaskRegistry

logger = logging.getLogger(__name__)


class TaskRunner:
    """Runs tasks from a registry together with their dependencies.

    Commands run in ``workdir``, which defaults to the project root the
    registry's tasks were defined for. A task starts only once all of its dependencies passed. Tasks marked
    ``parallel`` that become ready together run concurrently; a task whose
    dependency failed is reported as skipped while unrelated tasks keep going.
    """

    def __init__(
        self,
        registry: TaskRegistry,
        *,
        executor: Optional[CommandExecutor] = None,
        workdir: pathlib.Path | str | None = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self._registry = registry
        self._executor: CommandExecutor = executor or run_command
        self._workdir = _resolve_workdir(registry, workdir)
        self._max_workers = max_workers

    @property
    def registry(self) -> TaskRegistry:
        return self._registry

    def plan(self, names: Iterable[str]) -> List[List[Task]]:
        """Return the tasks that would run, grouped into dependency waves."""

        roots = [self._registry.get(name) for name in names]
        return resolve_order(roots)

    def run(self, names: Iterable[str], *, dry_run: bool = False) -> RunReport:
        requested = list(names)
        waves = self.plan(requested)
        statuses: Dict[str, str] = {}
        results: List[TaskResult] = []
        ok = (PLANNED,) if dry_run else (PASSED,)

        for wave in waves:
            ready: List[Task] = []
            for task in wave:
                blocked = [dep.name for dep in task.deps if statuses[dep.name] not in ok]
                if blocked:
                    logger.info("Skipping %s: dependencies did not pass: %s", task.name, ", ".join(blocked))
                    statuses[task.name] = SKIPPED
                    results.append(
                        TaskResult(
                            name=task.name,
                            usage=task.usage,
                            status=SKIPPED,
                            messages=[f"dependency did not pass: {name}" for name in blocked],
                        )
                    )
                else:
                    ready.append(task)

            for result in self._run_wave(ready, dry_run=dry_run):
                statuses[result.name] = result.status
                results.append(result)

        return RunReport(requested=requested, dry_run=dry_run, tasks=results)

    def _run_wave(self, tasks: List[Task], *, dry_run: bool) -> List[TaskResult]:
        if dry_run:
            return [
                TaskResult(name=task.name, usage=task.usage, status=PLANNED, messages=list(task.commands))
                for task in tasks
            ]

        concurrent_tasks = [task for task in tasks if task.parallel]
        sequential_tasks = [task for task in tasks if not task.parallel]
        results: List[TaskResult] = []

        if len(concurrent_tasks) > 1:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                futures = [pool.submit(self._execute, task) for task in concurrent_tasks]
                results.extend(future.result() for future in futures)
        else:
            results.extend(self._execute(task) for task in concurrent_tasks)

        results.extend(self._execute(task) for task in sequential_tasks)
        return results

    def _execute(self, task: Task) -> TaskResult:
        context = TaskContext(task_name=task.name, workdir=self._workdir, executor=self._executor)
        started = time.monotonic()
        if task.action is not None:
            logger.info("Running %s", task.name)
            try:
                task.action(context)
            except TaskExecutionError as exc:
                if not context.failed:
                    context.fail(str(exc))
            except Exception as exc:
                logger.exception("Task %s raised an unexpected error", task.name)
                context.fail(f"unexpected error: {exc}")

        status = FAILED if context.failed else PASSED
        duration = time.monotonic() - started
        if task.action is not None:
            logger.info("%s %s (%.2fs)", task.name, status, duration)
        return TaskResult(
            name=task.name,
            usage=task.usage,
            status=status,
            messages=context.messages,
            duration=duration,
        )


def _resolve_workdir(registry: TaskRegistry, workdir: pathlib.Path | str | None) -> pathlib.Path:
    if workdir is None:
        return registry.project_root or pathlib.Path.cwd()
    resolved = pathlib.Path(workdir)
    if registry.project_root is not None and resolved.resolve() != registry.project_root.resolve():
        logger.warning(
            "Running in %s but tasks were defined for %s; commands and artifacts use %s",
            resolved,
            registry.project_root,
            resolved,
        )
    return resolved


__all__ = ["TaskRunner"]

"""Task registry shared by the task definitions and the runner."""

from __future__ import annotations

import pathlib
from typing import Dict, Iterator, List, Optional

from ..errors import RegistryError
from ..models import Task
from .buckets import BucketBuilder


class TaskRegistry:
    """Book-keeping for defined tasks.

    A registry is the namespace tasks are defined into. It also collects the
    tasks projects contribute to the format, lint and generate buckets before
    :func:`buildtasks.define_tasks` wires the meta-tasks, and remembers the
    project root those tasks were defined for.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, Task] = {}
        self.contributions = BucketBuilder()
        self.project_root: Optional[pathlib.Path] = None

    def define(self, task: Task) -> Task:
        if not task.name:
            raise RegistryError("Task name must not be empty")
        if task.name in self._tasks:
            raise RegistryError(f"Task '{task.name}' is already defined")
        for dependency in task.deps:
            if self._tasks.get(dependency.name) is not dependency:
                raise RegistryError(
                    f"Task '{task.name}' depends on '{dependency.name}' which was not defined in this registry"
                )
        self._tasks[task.name] = task
        return task

    def get(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError as exc:
            raise RegistryError(f"Unknown task: {name}") from exc

    def names(self) -> List[str]:
        return list(self._tasks)

    def __contains__(self, name: str) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)


__all__ = ["TaskRegistry"]

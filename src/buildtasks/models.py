"""Domain models used by buildtasks."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from .execution.context import TaskContext

TaskAction = Callable[["TaskContext"], None]


@dataclasses.dataclass(frozen=True, slots=True, eq=False)
class Task:
    """A named, independently invokable unit of work.

    Tasks without an ``action`` only aggregate their dependencies.
    ``commands`` lists the external command lines the action runs so they can
    be shown without executing anything.
    """

    name: str
    usage: str = ""
    action: Optional[TaskAction] = None
    deps: Tuple["Task", ...] = ()
    parallel: bool = False
    commands: Tuple[str, ...] = ()

    @property
    def dependency_names(self) -> List[str]:
        return [dep.name for dep in self.deps]

    def summary(self) -> str:
        return self.usage or self.name


def resolve_order(roots: List[Task]) -> List[List[Task]]:
    """Return the dependency closure of ``roots`` grouped into waves.

    Every task appears after all of its dependencies; tasks within a wave do
    not depend on each other.
    """

    depth: Dict[str, int] = {}
    by_name: Dict[str, Task] = {}
    visiting: set[str] = set()

    def visit(task: Task) -> int:
        if task.name in depth:
            return depth[task.name]
        if task.name in visiting:
            raise ValueError(f"Circular dependency detected involving '{task.name}'")
        visiting.add(task.name)
        level = 0
        for dependency in task.deps:
            level = max(level, visit(dependency) + 1)
        visiting.remove(task.name)
        depth[task.name] = level
        by_name[task.name] = task
        return level

    for root in roots:
        visit(root)

    waves: List[List[Task]] = [[] for _ in range(max(depth.values(), default=-1) + 1)]
    for name, level in depth.items():
        waves[level].append(by_name[name])
    return waves

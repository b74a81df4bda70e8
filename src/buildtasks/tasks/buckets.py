"""Dependency buckets that meta-tasks are built from."""

from __future__ import annotations

import dataclasses
from typing import Dict, List, Tuple

from ..models import Task

FORMAT = "format"
LINT = "lint"
GENERATE = "generate"

FAMILIES = (FORMAT, LINT, GENERATE)


@dataclasses.dataclass(frozen=True, slots=True)
class Buckets:
    """Finalized bucket contents, in the order tasks were added."""

    format: Tuple[Task, ...] = ()
    lint: Tuple[Task, ...] = ()
    generate: Tuple[Task, ...] = ()

    def names(self, family: str) -> List[str]:
        return [task.name for task in getattr(self, family)]


class BucketBuilder:
    """Accumulates tasks per family until :meth:`freeze` is called."""

    def __init__(self) -> None:
        self._buckets: Dict[str, List[Task]] = {family: [] for family in FAMILIES}

    def add(self, family: str, task: Task) -> Task:
        try:
            bucket = self._buckets[family]
        except KeyError as exc:
            raise ValueError(f"Unknown task family: {family}") from exc
        if task not in bucket:
            bucket.append(task)
        return task

    def extend(self, other: "BucketBuilder") -> None:
        for family, tasks in other._buckets.items():
            for task in tasks:
                self.add(family, task)

    def freeze(self) -> Buckets:
        return Buckets(**{family: tuple(tasks) for family, tasks in self._buckets.items()})

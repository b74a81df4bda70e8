"""Reporting structures for task runs."""

from __future__ import annotations

import dataclasses
from typing import List

PASSED = "passed"
FAILED = "failed"
SKIPPED = "skipped"
PLANNED = "planned"


@dataclasses.dataclass(slots=True)
class TaskResult:
    name: str
    usage: str
    status: str
    messages: List[str]
    duration: float = 0.0


@dataclasses.dataclass(slots=True)
class RunReport:
    requested: List[str]
    dry_run: bool
    tasks: List[TaskResult]

    @property
    def succeeded(self) -> bool:
        return all(task.status in (PASSED, PLANNED) for task in self.tasks)

    @property
    def failed_tasks(self) -> List[str]:
        return [task.name for task in self.tasks if task.status == FAILED]

    @property
    def skipped_tasks(self) -> List[str]:
        return [task.name for task in self.tasks if task.status == SKIPPED]

    def get(self, name: str) -> TaskResult:
        for task in self.tasks:
            if task.name == name:
                return task
        raise KeyError(name)

    def as_dict(self) -> dict:
        return {
            "requested": self.requested,
            "dry_run": self.dry_run,
            "succeeded": self.succeeded,
            "tasks": [
                {
                    "name": task.name,
                    "usage": task.usage,
                    "status": task.status,
                    "duration": round(task.duration, 3),
                    "messages": task.messages,
                }
                for task in self.tasks
            ],
        }

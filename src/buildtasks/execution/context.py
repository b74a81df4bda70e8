"""Execution context objects passed to task actions."""

from __future__ import annotations

import dataclasses
import pathlib
import threading
from typing import Callable, List

from ..errors import TaskExecutionError

CommandExecutor = Callable[["TaskContext", str], bool]


@dataclasses.dataclass(slots=True)
class TaskContext:
    """Runtime information handed to a single task action."""

    task_name: str
    workdir: pathlib.Path
    executor: CommandExecutor
    messages: List[str] = dataclasses.field(default_factory=list)
    failed: bool = False
    _lock: threading.Lock = dataclasses.field(default_factory=threading.Lock, repr=False)

    def record(self, message: str) -> None:
        with self._lock:
            self.messages.append(message)

    def fail(self, message: str) -> None:
        """Record ``message`` and mark the task failed; the action keeps running."""

        self.record(message)
        self.failed = True

    def fail_now(self, message: str) -> None:
        """Mark the task failed and stop its action."""

        self.fail(message)
        raise TaskExecutionError(f"Task '{self.task_name}' failed: {message}")

    def exec(self, command: str) -> bool:
        """Run an external command line; a non-zero exit marks the task failed."""

        return self.executor(self, command)

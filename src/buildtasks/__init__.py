"""Common format, lint and test tasks for Go projects."""

from importlib import metadata

from .config import artifacts_path, exclude_tasks
from .models import Task
from .runner import TaskRunner
from .tasks import (
    TaskRegistry,
    define_tasks,
    register_format_task,
    register_generate_task,
    register_lint_task,
)

__all__ = [
    "__version__",
    "Task",
    "TaskRegistry",
    "TaskRunner",
    "artifacts_path",
    "define_tasks",
    "exclude_tasks",
    "register_format_task",
    "register_generate_task",
    "register_lint_task",
]


def __getattr__(name: str):
    if name == "__version__":
        return metadata.version("buildtasks")
    raise AttributeError(name)

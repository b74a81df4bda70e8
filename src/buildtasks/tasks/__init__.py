"""Task definitions for buildtasks."""

from .buckets import Buckets, BucketBuilder
from .catalog import (
    CATALOG_NAMES,
    META_TASK_NAMES,
    DefinedTasks,
    define_tasks,
    register_format_task,
    register_generate_task,
    register_lint_task,
)
from .registry import TaskRegistry

__all__ = [
    "CATALOG_NAMES",
    "META_TASK_NAMES",
    "BucketBuilder",
    "Buckets",
    "DefinedTasks",
    "TaskRegistry",
    "define_tasks",
    "register_format_task",
    "register_generate_task",
    "register_lint_task",
]

"""Execution helpers shared by the task runner and task actions."""

from .context import CommandExecutor, TaskContext
from .report import RunReport, TaskResult

__all__ = ["CommandExecutor", "RunReport", "TaskContext", "TaskResult"]

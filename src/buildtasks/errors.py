"""Exceptions raised while defining and running build tasks."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a YAML options file cannot be turned into options."""


class RegistryError(RuntimeError):
    """Raised for duplicate or unknown task names and undefined dependencies."""


class TaskExecutionError(RuntimeError):
    """Raised by an action to stop its task; the runner reports the task failed."""

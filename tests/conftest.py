import pathlib
import sys
import threading

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1] / "src"))


class RecordingExecutor:
    """Command executor that records command lines instead of running them."""

    def __init__(self) -> None:
        self.calls = []
        self.failing = set()
        self._lock = threading.Lock()

    def __call__(self, context, command):
        with self._lock:
            self.calls.append((context.task_name, command))
        context.record(f"$ {command}")
        if context.task_name in self.failing:
            context.fail(f"Command failed with exit code 1: {command}")
            return False
        return True

    def commands_for(self, task_name):
        return [command for name, command in self.calls if name == task_name]

    @property
    def task_names(self):
        return [name for name, _ in self.calls]


@pytest.fixture(name="executor")
def fixture_executor():
    return RecordingExecutor()

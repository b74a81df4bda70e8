"""Runs external command lines on behalf of task actions."""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import threading

from .execution.context import TaskContext

logger = logging.getLogger(__name__)

# Matches the --timeout passed to golangci-lint and go test.
COMMAND_TIMEOUT = 20 * 60


def run_command(context: TaskContext, command: str, *, timeout: float = COMMAND_TIMEOUT) -> bool:
    """Execute ``command`` in the context's working directory.

    The command line is split with shell quoting rules but not run through a
    shell, so quoted globs reach the tool unexpanded. Output lines are recorded
    on the context as they arrive. Returns ``False`` and marks the task failed
    when the command cannot be started, exits non-zero or times out.
    """

    try:
        args = shlex.split(command)
    except ValueError as exc:
        context.fail(f"Invalid command line {command!r}: {exc}")
        return False
    if not args:
        context.fail("Empty command line")
        return False

    logger.info("[%s] exec: %s", context.task_name, command)
    context.record(f"$ {command}")

    try:
        process = subprocess.Popen(
            args,
            cwd=context.workdir,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,
        )
    except OSError as exc:
        context.fail(f"Failed to start {args[0]}: {exc}")
        return False

    timed_out = threading.Event()

    def _kill() -> None:
        timed_out.set()
        _kill_group(process)

    timer = threading.Timer(timeout, _kill)
    timer.daemon = True
    timer.start()
    try:
        assert process.stdout is not None
        with process.stdout:
            for line in process.stdout:
                context.record(line.rstrip("\n"))
        returncode = process.wait()
    finally:
        timer.cancel()
        if process.poll() is None:
            _kill_group(process)
            process.wait()

    if timed_out.is_set():
        context.fail(f"Command timed out after {timeout}s: {command}")
        return False
    if returncode != 0:
        context.fail(f"Command failed with exit code {returncode}: {command}")
        return False
    return True


def _kill_group(process: subprocess.Popen) -> None:
    # go run starts the compiled tool as a grandchild in the same group.
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass

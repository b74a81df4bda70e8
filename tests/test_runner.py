import logging
import pathlib
import sys
import threading

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from buildtasks import Task, TaskRegistry, TaskRunner, artifacts_path, define_tasks, exclude_tasks  # noqa: E402
from buildtasks.errors import RegistryError  # noqa: E402


@pytest.fixture(name="registry")
def fixture_registry(tmp_path):
    registry = TaskRegistry()
    define_tasks(registry, project_root=tmp_path)
    return registry


def test_check_runs_lint_and_test(registry, executor, tmp_path):
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["check"])

    assert report.succeeded
    statuses = {task.name: task.status for task in report.tasks}
    assert statuses == {
        "lint-go": "passed",
        "lint-markdown": "passed",
        "lint-yaml": "passed",
        "test": "passed",
        "lint": "passed",
        "check": "passed",
    }
    assert [task.name for task in report.tasks][-1] == "check"
    assert len(executor.commands_for("lint-yaml")) == 2
    assert (tmp_path / "out").is_dir()


def test_dependencies_complete_before_dependents(registry, executor, tmp_path):
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["check"])
    order = [task.name for task in report.tasks]

    for leaf in ("lint-go", "lint-markdown", "lint-yaml"):
        assert order.index(leaf) < order.index("lint")
    assert order.index("lint") < order.index("check")
    assert order.index("test") < order.index("check")


def test_failed_leaf_skips_dependents_only(registry, executor, tmp_path):
    executor.failing.add("lint-markdown")
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["check"])

    assert not report.succeeded
    assert report.failed_tasks == ["lint-markdown"]
    assert report.skipped_tasks == ["lint", "check"]
    assert report.get("lint-go").status == "passed"
    assert report.get("test").status == "passed"
    assert report.get("lint").messages == ["dependency did not pass: lint-markdown"]


def test_test_task_writes_into_artifacts_path(executor, tmp_path):
    registry = TaskRegistry()
    define_tasks(registry, artifacts_path("dist"), project_root=tmp_path)
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["test"])

    assert report.succeeded
    assert (tmp_path / "dist").is_dir()
    assert not (tmp_path / "out").exists()
    (command,) = executor.commands_for("test")
    assert "-coverprofile=dist/coverage.txt" in command


def test_test_task_tolerates_existing_artifacts_directory(registry, executor, tmp_path):
    (tmp_path / "out").mkdir()
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    assert runner.run(["test"]).succeeded
    assert runner.run(["test"]).succeeded


def test_artifacts_directory_failure_fails_task_without_raising(registry, executor, tmp_path):
    (tmp_path / "out").write_text("not a directory", encoding="utf-8")
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["check"])

    result = report.get("test")
    assert result.status == "failed"
    assert result.messages[0].startswith("failed to create out directory")
    assert executor.commands_for("test") == []
    assert report.get("check").status == "skipped"
    assert report.get("lint").status == "passed"


def test_meta_task_with_empty_bucket_is_noop(executor, tmp_path):
    registry = TaskRegistry()
    define_tasks(
        registry,
        exclude_tasks("format-go", "format-markdown", "format-yaml"),
        project_root=tmp_path,
    )
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["format", "generate"])

    assert report.succeeded
    assert [task.name for task in report.tasks] == ["format", "generate"]
    assert executor.calls == []


def test_dry_run_executes_nothing(registry, executor, tmp_path):
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["check"], dry_run=True)

    assert report.dry_run
    assert report.succeeded
    assert {task.status for task in report.tasks} == {"planned"}
    assert report.get("test").messages == list(registry.get("test").commands)
    assert executor.calls == []
    assert not (tmp_path / "out").exists()


def test_unknown_task_is_rejected_before_running(registry, executor, tmp_path):
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    with pytest.raises(RegistryError):
        runner.run(["lint", "deploy"])
    assert executor.calls == []


def test_shared_dependency_runs_once(executor, tmp_path):
    registry = TaskRegistry()
    calls = []
    base = registry.define(Task(name="base", action=lambda context: calls.append("base")))
    registry.define(Task(name="left", deps=(base,)))
    registry.define(Task(name="right", deps=(base,)))
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["left", "right"])

    assert calls == ["base"]
    assert [task.name for task in report.tasks] == ["base", "left", "right"]


def test_parallel_tasks_run_concurrently(executor, tmp_path):
    registry = TaskRegistry()
    barrier = threading.Barrier(2, timeout=5)

    def wait_for_sibling(context):
        barrier.wait()

    registry.define(Task(name="a", action=wait_for_sibling, parallel=True))
    registry.define(Task(name="b", action=wait_for_sibling, parallel=True))
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["a", "b"])

    assert report.succeeded


def test_action_errors_are_recorded_as_failures(executor, tmp_path):
    registry = TaskRegistry()

    def explode(context):
        raise ValueError("boom")

    def give_up(context):
        context.fail_now("nothing to do")

    registry.define(Task(name="explode", action=explode))
    registry.define(Task(name="give-up", action=give_up))
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    report = runner.run(["explode", "give-up"])

    assert report.failed_tasks == ["explode", "give-up"]
    assert report.get("explode").messages == ["unexpected error: boom"]
    assert report.get("give-up").messages == ["nothing to do"]


def test_report_as_dict(registry, executor, tmp_path):
    runner = TaskRunner(registry, executor=executor, workdir=tmp_path)

    payload = runner.run(["lint-go"]).as_dict()

    assert payload["requested"] == ["lint-go"]
    assert payload["succeeded"] is True
    assert payload["tasks"][0]["name"] == "lint-go"
    assert payload["tasks"][0]["status"] == "passed"


def test_runner_defaults_to_project_root(registry, executor, tmp_path):
    runner = TaskRunner(registry, executor=executor)

    assert runner.run(["test"]).succeeded
    assert (tmp_path / "out").is_dir()


def test_runner_warns_when_workdir_differs_from_project_root(registry, executor, tmp_path, caplog):
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()

    with caplog.at_level(logging.WARNING, logger="buildtasks.runner"):
        runner = TaskRunner(registry, executor=executor, workdir=elsewhere)

    assert runner.run(["test"]).succeeded
    assert (elsewhere / "out").is_dir()
    assert "tasks were defined for" in caplog.text

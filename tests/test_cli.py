"""Tests for the nextaction CLI."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from nextaction.adapters.json_store import JsonTaskStore
from nextaction.cli import main
from nextaction.config import Config
from nextaction.core.tasks import Task, TaskStatus


@pytest.fixture
def config(tmp_path):
    return Config(tasks_file=str(tmp_path / "tasks.json"))


@pytest.fixture
def store(config):
    return JsonTaskStore(config.tasks_file)


@pytest.fixture
def run(config):
    runner = CliRunner()

    def _run(*args):
        with patch("nextaction.cli.load_config", return_value=config):
            return runner.invoke(main, list(args))

    return _run


class TestParseCommands:
    def test_parse_json(self, run):
        result = run("parse", "--json", "Pay bills @home monthly")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["title"] == "Pay bills"
        assert data["contexts"] == ["@home"]
        assert data["recurrence"] == "monthly"
        assert data["dueDate"] is None

    def test_parse_text(self, run):
        result = run("parse", "Quick", "email", "check", "15min")

        assert result.exit_code == 0
        assert "Title:      Quick email check" in result.output
        assert "15 min" in result.output

    def test_add_dry_run_does_not_save(self, run, store):
        result = run("add", "--dry-run", "Call John @work")

        assert result.exit_code == 0
        assert json.loads(result.output)["title"] == "Call John"
        assert store.load() == []

    def test_examples(self, run):
        result = run("examples")
        assert "Call John @work tomorrow high energy" in result.output


class TestTaskCommands:
    def test_add_and_list(self, run, store):
        result = run("add", "Call", "John", "@work", "urgent")

        assert result.exit_code == 0
        assert "Added task_" in result.output
        tasks = store.load()
        assert tasks[0].title == "Call John"
        assert tasks[0].starred is True

        listed = run("list")
        assert listed.exit_code == 0
        assert "Call John" in listed.output

    def test_add_with_default_project(self, run, store, config):
        config.default_project = "project_home"
        run("add", "Fix gate")

        task = store.load()[0]
        assert task.project_id == "project_home"
        assert task.status == TaskStatus.NEXT

    def test_list_empty(self, run):
        result = run("list")
        assert result.exit_code == 0
        assert "Nothing to do." in result.output

    def test_list_filters(self, run, store):
        store.save(
            [
                Task(id="a", title="Home chore", contexts=["@home"]),
                Task(id="b", title="Work thing", contexts=["@work"], status=TaskStatus.NEXT),
            ]
        )

        by_context = run("list", "--context", "home")
        assert "Home chore" in by_context.output
        assert "Work thing" not in by_context.output

        by_status = run("list", "--status", "next", "--json")
        assert [t["id"] for t in json.loads(by_status.output)] == ["b"]

    def test_done_and_reopen(self, run, store):
        store.save([Task(id="a", title="Water plants", recurrence="weekly")])

        result = run("done", "a")
        assert result.exit_code == 0
        assert "Water plants" in result.output
        assert "Next occurrence" in result.output
        assert len(store.load()) == 2

        result = run("reopen", "a")
        assert result.exit_code == 0
        assert "Reopened Water plants" in result.output

    def test_done_unknown_task(self, run):
        result = run("done", "missing")
        assert result.exit_code == 1
        assert "No task with id missing" in result.output

    def test_show(self, run, store):
        task = Task(id="a", title="Pack", waiting_for_description="Suitcase")
        task.add_subtask("Passport")
        store.save([task])

        result = run("show", "a")

        assert result.exit_code == 0
        assert "Waiting for: Suitcase" in result.output
        assert "[ ] Passport" in result.output


class TestWaitCommands:
    def test_wait_done_releases(self, run, store):
        store.save([Task(id="a", title="Get quote"), Task(id="b", title="Order parts")])

        result = run("wait", "b", "--on", "a")
        assert result.exit_code == 0
        assert "Order parts is waiting" in result.output

        result = run("done", "a")
        assert "Ready: Order parts" in result.output

    def test_wait_cycle_fails(self, run, store):
        store.save([Task(id="a", title="A", waiting_for_task_ids=["b"]), Task(id="b", title="B")])

        result = run("wait", "b", "--on", "a")

        assert result.exit_code == 1
        assert "circular dependency" in result.output

    def test_unwait(self, run, store):
        store.save(
            [
                Task(id="a", title="A"),
                Task(id="b", title="B", status=TaskStatus.WAITING, waiting_for_task_ids=["a"]),
            ]
        )
        result = run("unwait", "b", "--on", "a")
        assert result.exit_code == 0

    def test_startup_migrates_blocked(self, run, store):
        store.save([Task(id="a", title="Legacy", status=TaskStatus.BLOCKED)])

        result = run("list")

        assert "Migrated 1 blocked task(s) to waiting." in result.output
        assert store.load()[0].status == TaskStatus.WAITING

    def test_corrupt_store(self, run, config):
        with open(config.tasks_file, "w") as f:
            f.write("{oops")

        result = run("list")

        assert result.exit_code == 1
        assert "Corrupt task store" in result.output


class TestTemplateCommands:
    def test_save_list_use(self, run, store):
        store.save([Task(id="a", title="Weekly review")])

        result = run("template", "save", "a", "--category", "work")
        assert result.exit_code == 0
        template_id = store.load_templates()[0].id

        listed = run("template", "list")
        assert f"{template_id}  [work] Weekly review" in listed.output

        used = run("template", "use", template_id)
        assert used.exit_code == 0
        assert len(store.load()) == 2

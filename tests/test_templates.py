"""Tests for task templates."""

from nextaction.core.tasks import Subtask, Task, TaskStatus
from nextaction.core.templates import Template


class TestTemplate:
    def test_defaults(self):
        template = Template(title="Weekly review")
        assert template.id.startswith("template_")
        assert template.category == "general"

    def test_unknown_category_falls_back(self):
        assert Template(title="T", category="misc").category == "general"

    def test_create_task(self):
        template = Template(
            title="Trip packing",
            energy="low",
            time=30,
            contexts=["home"],
            subtasks=[Subtask("Passport"), Subtask("Charger")],
        )
        task = template.create_task()

        assert task.title == "Trip packing"
        assert task.status == TaskStatus.INBOX
        assert task.energy == "low"
        assert task.time == 30
        assert task.contexts == ["@home"]
        assert [s.title for s in task.subtasks] == ["Passport", "Charger"]

    def test_create_task_does_not_share_lists(self):
        template = Template(title="T", contexts=["@home"], subtasks=[Subtask("Step")])
        task = template.create_task()
        task.contexts.append("@work")
        task.subtasks[0].completed = True

        assert template.contexts == ["@home"]
        assert template.subtasks[0].completed is False

    def test_create_task_overrides(self):
        task = Template(title="T").create_task(status=TaskStatus.NEXT, project_id="p1")
        assert task.status == TaskStatus.NEXT
        assert task.project_id == "p1"

    def test_from_task_resets_subtasks(self):
        task = Task(title="Onboarding", contexts=["@work"], notes="See wiki")
        task.add_subtask("Laptop")
        task.toggle_subtask(0)

        template = Template.from_task(task, category="work")

        assert template.title == "Onboarding"
        assert template.category == "work"
        assert template.notes == "See wiki"
        assert template.subtasks == [Subtask("Laptop", False)]
        assert task.subtasks[0].completed is True

    def test_round_trip(self):
        template = Template(title="Standup", contexts=["@work"], subtasks=[Subtask("Notes")])
        assert Template.from_dict(template.to_dict()) == template

    def test_from_dict_defaults(self):
        template = Template.from_dict({"title": "Bare"})
        assert template.id.startswith("template_")
        assert template.subtasks == []

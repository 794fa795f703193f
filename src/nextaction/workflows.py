"""Shared workflow layer between the CLI and the task store.

Each function loads the collection, runs the pure core over it, and saves
the result back through the repository.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from .adapters.json_store import JsonTaskStore
from .config import Config
from .core.dependencies import (
    MIGRATION_BLOCKED_TO_WAITING,
    add_dependency,
    migrate_blocked_tasks,
    reconcile_waiting,
    remove_dependency,
)
from .core.parser import parse
from .core.tasks import Task, TaskStatus, find_task
from .core.templates import Template
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)


class TaskNotFoundError(LookupError):
    """Raised when a task id is not in the store."""

    pass


@dataclass
class CompletionResult:
    """What happened when a task was completed."""

    task: Task
    successor: Task | None = None
    promoted: list[Task] = field(default_factory=list)


@dataclass
class StartupReport:
    """Changes made by the startup consistency pass."""

    migrated: list[Task] = field(default_factory=list)
    promoted: list[Task] = field(default_factory=list)


def get_store(config: Config) -> JsonTaskStore:
    """Resolve the task store from config."""
    return JsonTaskStore(config.tasks_file)


def _require(tasks: list[Task], task_id: str) -> Task:
    task = find_task(tasks, task_id)
    if task is None:
        raise TaskNotFoundError(f"No task with id {task_id}")
    return task


def capture_task(
    text: str,
    repo: TaskRepository,
    project_id: str | None = None,
    as_of: date | None = None,
) -> Task:
    """Parse quick-add text into a new task and store it."""
    parsed = parse(text, as_of)
    # Tasks filed under a project skip the inbox
    status = TaskStatus.NEXT if project_id else TaskStatus.INBOX
    task = Task.from_parsed(parsed, project_id=project_id or None, status=status)

    tasks = repo.load()
    tasks.append(task)
    repo.save(tasks)
    logger.info(f"Captured task {task.id}: {task.title!r}")
    return task


def complete_task(task_id: str, repo: TaskRepository, as_of: date | None = None) -> CompletionResult:
    """
    Complete a task, spawn its next recurrence and release waiting tasks.

    Completing an already completed task changes nothing.
    """
    tasks = repo.load()
    task = _require(tasks, task_id)
    if task.completed:
        return CompletionResult(task=task)

    task.mark_complete()

    successor = task.create_next_instance(as_of)
    if successor:
        tasks.append(successor)
        logger.info(f"Scheduled next {task.recurrence} occurrence {successor.id} for {successor.due_date}")

    promoted = reconcile_waiting(tasks)
    repo.save(tasks)
    return CompletionResult(task=task, successor=successor, promoted=promoted)


def reopen_task(task_id: str, repo: TaskRepository) -> Task:
    """Mark a completed task as not done."""
    tasks = repo.load()
    task = _require(tasks, task_id)
    task.mark_incomplete()
    repo.save(tasks)
    return task


def wait_on(task_id: str, prerequisite_id: str, repo: TaskRepository, note: str = "") -> Task:
    """Make one task wait on another. Raises CircularDependencyError on a loop."""
    tasks = repo.load()
    task = _require(tasks, task_id)
    prerequisite = _require(tasks, prerequisite_id)
    add_dependency(task, prerequisite, tasks)
    if note:
        task.waiting_for_description = note
    repo.save(tasks)
    return task


def stop_waiting(task_id: str, prerequisite_id: str, repo: TaskRepository) -> Task:
    """Drop a prerequisite, then let the waiting pass promote the task if it can."""
    tasks = repo.load()
    task = _require(tasks, task_id)
    remove_dependency(task, prerequisite_id)
    reconcile_waiting(tasks)
    repo.save(tasks)
    return task


def reconcile(repo: TaskRepository) -> list[Task]:
    """Run the waiting pass over the stored collection."""
    tasks = repo.load()
    promoted = reconcile_waiting(tasks)
    if promoted:
        repo.save(tasks)
    return promoted


def run_startup(repo: TaskRepository) -> StartupReport:
    """
    Startup consistency pass.

    Runs the blocked -> waiting migration once per store, then the waiting
    pass.
    """
    tasks = repo.load()
    report = StartupReport()
    needs_migration = not repo.has_migration(MIGRATION_BLOCKED_TO_WAITING)

    if needs_migration:
        report.migrated = migrate_blocked_tasks(tasks)

    report.promoted = reconcile_waiting(tasks)

    if report.migrated or report.promoted:
        repo.save(tasks)
    if needs_migration:
        repo.mark_migration(MIGRATION_BLOCKED_TO_WAITING)
    return report


def save_as_template(task_id: str, repo: TaskRepository, category: str = "general") -> Template:
    """Store an existing task's shape as a template."""
    task = _require(repo.load(), task_id)
    template = Template.from_task(task, category)
    templates = repo.load_templates()
    templates.append(template)
    repo.save_templates(templates)
    return template


def create_from_template(template_id: str, repo: TaskRepository) -> Task:
    """Instantiate a stored template as a new inbox task."""
    template = next((t for t in repo.load_templates() if t.id == template_id), None)
    if template is None:
        raise TaskNotFoundError(f"No template with id {template_id}")

    task = template.create_task()
    tasks = repo.load()
    tasks.append(task)
    repo.save(tasks)
    return task

"""nextaction CLI - GTD task manager."""

import json
import logging
import sys
from datetime import date

import click

from .adapters.json_store import JsonTaskStore, StoreError
from .config import load_config
from .core.dependencies import CircularDependencyError
from .core.parser import EXAMPLES, parse
from .core.scoring import priority_label, priority_score, sort_by_score
from .core.tasks import (
    Task,
    TaskStatus,
    filter_by_context,
    filter_by_status,
    filter_due_within,
    find_task,
)
from .core.templates import TEMPLATE_CATEGORIES
from .workflows import (
    TaskNotFoundError,
    capture_task,
    complete_task,
    create_from_template,
    get_store,
    reconcile,
    reopen_task,
    run_startup,
    save_as_template,
    stop_waiting,
    wait_on,
)

STATUS_CHOICES = [s.value for s in TaskStatus if s != TaskStatus.BLOCKED]


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="nextaction")
def main(debug: bool):
    """nextaction - Getting Things Done from the command line."""
    config = load_config()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else getattr(logging, config.log_level),
    )


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _open_store() -> JsonTaskStore:
    """Open the configured store and run the startup consistency pass."""
    store = get_store(load_config())
    try:
        report = run_startup(store)
    except StoreError as e:
        _fail(e)
    if report.migrated:
        click.echo(f"Migrated {len(report.migrated)} blocked task(s) to waiting.")
    if report.promoted:
        click.echo(f"{len(report.promoted)} waiting task(s) are ready.")
    return store


def _format_task(task: Task, all_tasks: list[Task], as_of: date) -> str:
    """One-line task summary."""
    parts = [f"{task.id}  [{task.status.value:9}] {task.title}"]
    days = task.days_until_due(as_of)
    if days is not None and not task.completed:
        if days < 0:
            parts.append(f"(OVERDUE by {-days}d)")
        elif days == 0:
            parts.append("(due TODAY)")
        else:
            parts.append(f"(due {task.due_date})")
    if task.contexts:
        parts.append(" ".join(task.contexts))
    if task.recurrence:
        parts.append(f"~{task.recurrence}")
    pending = task.get_pending_dependencies(all_tasks)
    if pending:
        parts.append("waiting on: " + ", ".join(t.title for t in pending))
    return " ".join(parts)


@main.command()
@click.argument("text", nargs=-1, required=True)
@click.option("--project", default=None, help="Project id to file the task under")
@click.option("--dry-run", is_flag=True, help="Show the parsed task without saving it")
def add(text: tuple[str, ...], project: str | None, dry_run: bool):
    """Capture a task from free text, e.g. 'Call John @work tomorrow'."""
    line = " ".join(text)
    if dry_run:
        click.echo(json.dumps(parse(line).to_dict(), indent=2))
        return

    config = load_config()
    store = _open_store()
    try:
        task = capture_task(line, store, project_id=project or config.default_project or None)
    except StoreError as e:
        _fail(e)
    click.echo(f"Added {task.id}: {task.title}")


@main.command("parse")
@click.argument("text", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def parse_cmd(text: tuple[str, ...], as_json: bool):
    """Show how quick-add text would be parsed."""
    parsed = parse(" ".join(text))
    if as_json:
        click.echo(json.dumps(parsed.to_dict(), indent=2))
        return

    click.echo(f"Title:      {parsed.title}")
    click.echo(f"Contexts:   {' '.join(parsed.contexts) or '-'}")
    click.echo(f"Energy:     {parsed.energy or '-'}")
    click.echo(f"Time:       {f'{parsed.time} min' if parsed.time else '-'}")
    click.echo(f"Recurrence: {parsed.recurrence or '-'}")
    click.echo(f"Due:        {parsed.due_date or '-'}")
    click.echo(f"Priority:   {'yes' if parsed.priority else 'no'}")


@main.command("list")
@click.option("--status", type=click.Choice(STATUS_CHOICES), default=None, help="Only this status")
@click.option("--context", default=None, help="Only tasks with this context")
@click.option("--all", "show_all", is_flag=True, help="Include completed and deferred tasks")
@click.option("--due-soon", is_flag=True, help="Only tasks due within DUE_SOON_DAYS")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(status: str | None, context: str | None, show_all: bool, due_soon: bool, as_json: bool):
    """List tasks, highest priority score first."""
    config = load_config()
    store = _open_store()
    try:
        all_tasks = store.load()
    except StoreError as e:
        _fail(e)

    today = date.today()
    tasks = all_tasks
    if status:
        tasks = filter_by_status(tasks, TaskStatus(status))
    elif not show_all:
        tasks = [t for t in tasks if not t.completed and t.is_available(today)]
    if context:
        tasks = filter_by_context(tasks, context)
    if due_soon:
        tasks = filter_due_within(tasks, config.due_soon_days, today)

    tasks = sort_by_score(tasks, all_tasks, as_of=today)

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        return

    if not tasks:
        click.echo("Nothing to do.")
        return

    for task in tasks:
        score = priority_score(task, all_tasks, as_of=today)
        click.echo(f"{score:3} {priority_label(score):8} {_format_task(task, all_tasks, today)}")


@main.command()
@click.argument("task_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(task_id: str, as_json: bool):
    """Show one task."""
    store = _open_store()
    tasks = store.load()
    task = find_task(tasks, task_id)
    if task is None:
        _fail(TaskNotFoundError(f"No task with id {task_id}"))

    if as_json:
        click.echo(json.dumps(task.to_dict(), indent=2))
        return

    click.echo(_format_task(task, tasks, date.today()))
    if task.waiting_for_description:
        click.echo(f"  Waiting for: {task.waiting_for_description}")
    for subtask in task.subtasks:
        click.echo(f"  [{'x' if subtask.completed else ' '}] {subtask.title}")


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Complete a task."""
    store = _open_store()
    try:
        result = complete_task(task_id, store)
    except (TaskNotFoundError, StoreError) as e:
        _fail(e)

    click.echo(f"✓ {result.task.title}")
    if result.successor:
        click.echo(f"  Next occurrence {result.successor.id} due {result.successor.due_date}")
    for task in result.promoted:
        click.echo(f"  Ready: {task.title}")


@main.command()
@click.argument("task_id")
def reopen(task_id: str):
    """Mark a completed task as not done."""
    store = _open_store()
    try:
        task = reopen_task(task_id, store)
    except (TaskNotFoundError, StoreError) as e:
        _fail(e)
    click.echo(f"Reopened {task.title}")


@main.command()
@click.argument("task_id")
@click.option("--on", "prerequisite_id", required=True, help="Task id to wait on")
@click.option("--note", default="", help="What you are waiting for")
def wait(task_id: str, prerequisite_id: str, note: str):
    """Make a task wait until another one is done."""
    store = _open_store()
    try:
        task = wait_on(task_id, prerequisite_id, store, note=note)
    except (TaskNotFoundError, CircularDependencyError, StoreError) as e:
        _fail(e)
    click.echo(f"{task.title} is {task.status.value}")


@main.command()
@click.argument("task_id")
@click.option("--on", "prerequisite_id", required=True, help="Task id to stop waiting on")
def unwait(task_id: str, prerequisite_id: str):
    """Remove a waiting-for dependency."""
    store = _open_store()
    try:
        task = stop_waiting(task_id, prerequisite_id, store)
    except (TaskNotFoundError, StoreError) as e:
        _fail(e)
    click.echo(f"{task.title} is {task.status.value}")


@main.command("reconcile")
def reconcile_cmd():
    """Move waiting tasks with finished prerequisites to next."""
    store = _open_store()
    try:
        promoted = reconcile(store)
    except StoreError as e:
        _fail(e)
    if not promoted:
        click.echo("No waiting tasks became ready.")
    for task in promoted:
        click.echo(f"Ready: {task.title}")


@main.command()
def examples():
    """Show quick-add examples."""
    for example in EXAMPLES:
        click.echo(f"  {example}")


@main.group()
def template():
    """Manage task templates."""
    pass


@template.command("save")
@click.argument("task_id")
@click.option("--category", type=click.Choice(TEMPLATE_CATEGORIES), default="general")
def template_save(task_id: str, category: str):
    """Save a task as a template."""
    store = _open_store()
    try:
        saved = save_as_template(task_id, store, category)
    except (TaskNotFoundError, StoreError) as e:
        _fail(e)
    click.echo(f"Saved template {saved.id}: {saved.title}")


@template.command("list")
def template_list():
    """List templates."""
    store = _open_store()
    templates = store.load_templates()
    if not templates:
        click.echo("No templates.")
        return
    for t in templates:
        click.echo(f"{t.id}  [{t.category}] {t.title}")


@template.command("use")
@click.argument("template_id")
def template_use(template_id: str):
    """Create a task from a template."""
    store = _open_store()
    try:
        task = create_from_template(template_id, store)
    except (TaskNotFoundError, StoreError) as e:
        _fail(e)
    click.echo(f"Added {task.id}: {task.title}")


if __name__ == "__main__":
    main()

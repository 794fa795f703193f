"""Waiting-for dependencies and the waiting status reconciliation - no I/O."""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime

from .tasks import Task, TaskStatus, find_task, utcnow

logger = logging.getLogger(__name__)

MIGRATION_BLOCKED_TO_WAITING = "blocked_to_waiting"
BLOCKED_PLACEHOLDER = "Blocked (migrated)"

# Statuses a task is pulled out of when it gains an unmet prerequisite.
_AUTO_WAIT_STATUSES = (TaskStatus.INBOX, TaskStatus.NEXT, TaskStatus.SOMEDAY)


class CircularDependencyError(ValueError):
    """Raised when a new prerequisite would close a dependency loop."""

    pass


@dataclass
class DependencyStats:
    """Counts for a dependency overview."""

    with_dependencies: int
    blocked: int
    ready: int


def reconcile_waiting(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    """
    Promote waiting tasks whose prerequisites are all completed.

    Every candidate is evaluated against the snapshot before any task is
    changed. Promoted tasks move to next with their dependency ids cleared.
    Running it again without other changes is a no-op.

    Returns the promoted tasks.
    """
    ready = [
        t
        for t in tasks
        if t.status == TaskStatus.WAITING
        and t.waiting_for_task_ids
        and t.are_dependencies_met(tasks)
    ]

    now = now or utcnow()
    for task in ready:
        task.status = TaskStatus.NEXT
        task.waiting_for_task_ids = []
        task.touch(now)

    if ready:
        logger.info(f"Promoted {len(ready)} waiting task(s) to next")
    return ready


def migrate_blocked_tasks(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    """
    Move tasks from the retired blocked status into waiting.

    Callers guard this with the store's migration flag so it runs once.
    """
    now = now or utcnow()
    migrated = []
    for task in tasks:
        if task.status != TaskStatus.BLOCKED:
            continue
        task.status = TaskStatus.WAITING
        if not task.waiting_for_description:
            task.waiting_for_description = BLOCKED_PLACEHOLDER
        task.touch(now)
        migrated.append(task)

    if migrated:
        logger.info(f"Migrated {len(migrated)} blocked task(s) to waiting")
    return migrated


def would_create_cycle(prerequisite_id: str, dependent_id: str, tasks: list[Task]) -> bool:
    """
    Check whether making dependent wait on prerequisite closes a loop.

    Walks breadth-first from the prerequisite through its own prerequisites;
    reaching the dependent means a cycle.
    """
    if prerequisite_id == dependent_id:
        return True

    by_id = {t.id: t for t in tasks}
    queue = deque([prerequisite_id])
    visited = set()

    while queue:
        current_id = queue.popleft()
        if current_id == dependent_id:
            return True
        if current_id in visited:
            continue
        visited.add(current_id)
        current = by_id.get(current_id)
        if current:
            queue.extend(current.waiting_for_task_ids)

    return False


def add_dependency(task: Task, prerequisite: Task, tasks: list[Task]) -> None:
    """
    Make task wait on prerequisite.

    An open task with an unmet prerequisite is moved to waiting.
    Raises CircularDependencyError instead of creating a loop.
    """
    if would_create_cycle(prerequisite.id, task.id, tasks):
        raise CircularDependencyError(
            f"'{task.title}' cannot wait on '{prerequisite.title}': circular dependency"
        )

    if prerequisite.id not in task.waiting_for_task_ids:
        task.waiting_for_task_ids.append(prerequisite.id)

    if task.status in _AUTO_WAIT_STATUSES and not task.are_dependencies_met(tasks):
        task.status = TaskStatus.WAITING
    task.touch()


def remove_dependency(task: Task, prerequisite_id: str) -> bool:
    """Drop one prerequisite id. Returns False if it was not there."""
    if prerequisite_id not in task.waiting_for_task_ids:
        return False
    task.waiting_for_task_ids = [i for i in task.waiting_for_task_ids if i != prerequisite_id]
    task.touch()
    return True


def dependents_of(task_id: str, tasks: list[Task]) -> list[Task]:
    """Tasks waiting on the given task."""
    return [t for t in tasks if task_id in t.waiting_for_task_ids]


def prerequisites_of(task: Task, tasks: list[Task]) -> list[Task]:
    """Resolved prerequisite tasks, completed or not."""
    resolved = (find_task(tasks, dep_id) for dep_id in task.waiting_for_task_ids)
    return [t for t in resolved if t is not None]


def dependency_stats(tasks: list[Task]) -> DependencyStats:
    with_deps = [t for t in tasks if t.waiting_for_task_ids and not t.completed]
    blocked = sum(1 for t in with_deps if not t.are_dependencies_met(tasks))
    return DependencyStats(
        with_dependencies=len(with_deps),
        blocked=blocked,
        ready=len(with_deps) - blocked,
    )

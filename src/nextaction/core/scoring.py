"""Priority score: a weighted sum over task attributes, 0-100."""

from datetime import date, datetime

from .tasks import Task, TaskStatus, utcnow

BASE_SCORE = 50

LABELS = (
    (80, "Urgent"),
    (60, "High"),
    (40, "Medium"),
    (20, "Low"),
)


def _due_points(days: int) -> int:
    if days < 0:
        return 25
    if days == 0:
        return 20
    if days == 1:
        return 15
    if days <= 3:
        return 10
    if days <= 7:
        return 5
    return 0


def priority_score(
    task: Task,
    all_tasks: list[Task],
    active_project_ids: set[str] | frozenset[str] = frozenset(),
    as_of: date | None = None,
    now: datetime | None = None,
) -> int:
    """
    Score a task from 0 to 100. Completed tasks score 0.

    Pure function - no I/O.
    """
    if task.completed:
        return 0

    as_of = as_of or date.today()
    now = now or utcnow()
    score = BASE_SCORE

    days = task.days_until_due(as_of)
    if days is not None:
        score += _due_points(days)

    if task.starred:
        score += 15

    if task.status == TaskStatus.NEXT:
        score += 10
    elif task.status == TaskStatus.INBOX:
        score += 5

    if task.waiting_for_task_ids:
        score += 10 if task.are_dependencies_met(all_tasks) else -10

    if task.energy and task.time:
        if task.energy == "high" and task.time <= 15:
            score += 8
        elif task.energy == "low" and task.time > 60:
            score -= 5

    if task.time:
        if task.time <= 5:
            score += 5
        elif task.time <= 15:
            score += 3

    if task.project_id and task.project_id in active_project_ids:
        score += 5

    if not task.is_available(as_of):
        score -= 20

    age_days = (now - task.created_at).days
    if age_days > 30:
        score += 7
    elif age_days > 14:
        score += 5
    elif age_days > 7:
        score += 3

    return max(0, min(100, score))


def priority_label(score: int) -> str:
    for threshold, label in LABELS:
        if score >= threshold:
            return label
    return "Very Low"


def sort_by_score(
    tasks: list[Task],
    all_tasks: list[Task] | None = None,
    as_of: date | None = None,
) -> list[Task]:
    """Highest score first; ties keep their original order."""
    universe = all_tasks if all_tasks is not None else tasks
    as_of = as_of or date.today()
    return sorted(tasks, key=lambda t: -priority_score(t, universe, as_of=as_of))

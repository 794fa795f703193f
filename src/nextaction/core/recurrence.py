"""Recurring task successors - pure date arithmetic, no I/O."""

from datetime import date, timedelta

from .tasks import Task, TaskStatus


def is_recurring(task: Task) -> bool:
    return bool(task.recurrence)


def should_recurrence_end(task: Task, as_of: date | None = None) -> bool:
    """True once the recurrence end date is strictly in the past."""
    if not task.recurrence_end_date:
        return False
    as_of = as_of or date.today()
    return task.recurrence_end_date < as_of


def add_months(base: date, months: int) -> date:
    """
    Shift a date by whole calendar months.

    Days past the end of the target month roll over into the next month,
    so Jan 31 + 1 month is Mar 2 (leap year) or Mar 3.
    """
    month_index = base.month - 1 + months
    year = base.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1) + timedelta(days=base.day - 1)


def next_occurrence_date(task: Task, as_of: date | None = None) -> date | None:
    """
    Next due date one interval after the current one.

    Counts from the due date, or from today when the task has none.
    Returns None for a non-recurring task.
    """
    base = task.due_date or as_of or date.today()

    match task.recurrence:
        case "daily":
            return base + timedelta(days=1)
        case "weekly":
            return base + timedelta(days=7)
        case "monthly":
            return add_months(base, 1)
        case "yearly":
            return add_months(base, 12)
        case _:
            return None


def create_next_instance(task: Task, as_of: date | None = None) -> Task | None:
    """
    Build the successor of a recurring task.

    The new task is not added to any collection. All instances point at the
    family root through recurrence_parent_id, never at each other.
    """
    if not is_recurring(task) or should_recurrence_end(task, as_of):
        return None

    status = TaskStatus.INBOX if task.status == TaskStatus.COMPLETED else task.status
    return Task(
        title=task.title,
        description=task.description,
        type=task.type,
        status=status,
        energy=task.energy,
        time=task.time,
        project_id=task.project_id,
        contexts=list(task.contexts),
        due_date=next_occurrence_date(task, as_of),
        recurrence=task.recurrence,
        recurrence_end_date=task.recurrence_end_date,
        recurrence_parent_id=task.recurrence_parent_id or task.id,
    )

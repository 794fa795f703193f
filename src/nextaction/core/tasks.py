"""Pure task domain logic - no I/O dependencies."""

import random
import string
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from .parser import ParsedTask

TASK_TYPES = ("task", "project", "reference")
ENERGY_LEVELS = ("", "low", "medium", "high")
RECURRENCE_TYPES = ("", "daily", "weekly", "monthly", "yearly")


class TaskStatus(Enum):
    """GTD list a task lives on."""

    INBOX = "inbox"
    NEXT = "next"
    WAITING = "waiting"
    SOMEDAY = "someday"
    COMPLETED = "completed"
    BLOCKED = "blocked"  # retired, only found in old stores

    @classmethod
    def parse(cls, raw: str | None) -> "TaskStatus":
        if not raw:
            return cls.INBOX
        try:
            return cls(raw)
        except ValueError:
            return cls.INBOX


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_id(prefix: str = "task") -> str:
    """Opaque id: prefix, epoch millis and a random base36 suffix."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def normalize_context(raw: str) -> str:
    """'Home' and '@home' both become '@home'."""
    name = raw.strip().lower().lstrip("@")
    return f"@{name}" if name else ""


def normalize_contexts(raw: list[str]) -> list[str]:
    contexts: list[str] = []
    for item in raw:
        ctx = normalize_context(item)
        if ctx and ctx not in contexts:
            contexts.append(ctx)
    return contexts


def parse_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.split("T")[0])
    except ValueError:
        return None


def parse_timestamp(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class Subtask:
    """A checklist item inside a task."""

    title: str
    completed: bool = False

    def to_dict(self) -> dict:
        return {"title": self.title, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: dict) -> "Subtask":
        return cls(title=data.get("title", ""), completed=bool(data.get("completed", False)))


@dataclass
class Task:
    """A GTD task with its temporal and dependency predicates."""

    title: str = ""
    id: str = field(default_factory=generate_id)
    description: str = ""
    type: str = "task"
    status: TaskStatus = TaskStatus.INBOX
    energy: str = ""
    time: int = 0
    time_spent: int = 0
    project_id: str | None = None
    contexts: list[str] = field(default_factory=list)
    completed: bool = False
    completed_at: datetime | None = None
    due_date: date | None = None
    defer_date: date | None = None
    waiting_for_task_ids: list[str] = field(default_factory=list)
    waiting_for_description: str = ""
    recurrence: str = ""
    recurrence_end_date: date | None = None
    recurrence_parent_id: str | None = None
    position: int = 0
    starred: bool = False
    notes: str = ""
    subtasks: list[Subtask] = field(default_factory=list)
    url: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.contexts = normalize_contexts(self.contexts)
        # completed flag and completed status always agree
        if self.completed or self.status == TaskStatus.COMPLETED:
            self.completed = True
            self.status = TaskStatus.COMPLETED
        if self.type not in TASK_TYPES:
            self.type = "task"
        if self.energy not in ENERGY_LEVELS:
            self.energy = ""
        if self.recurrence not in RECURRENCE_TYPES:
            self.recurrence = ""
        self.time = max(0, int(self.time or 0))
        if self.recurrence_parent_id == self.id:
            raise ValueError(f"Task {self.id} cannot be its own recurrence parent")

    # ---- mutation ----

    def touch(self, now: datetime | None = None) -> None:
        self.updated_at = now or utcnow()

    def mark_complete(self, now: datetime | None = None) -> None:
        now = now or utcnow()
        if not self.completed:
            self.completed_at = now
        self.completed = True
        self.status = TaskStatus.COMPLETED
        self.touch(now)

    def mark_incomplete(self, now: datetime | None = None) -> None:
        self.completed = False
        self.completed_at = None
        if self.status == TaskStatus.COMPLETED:
            self.status = TaskStatus.INBOX
        self.touch(now)

    def toggle_star(self) -> bool:
        self.starred = not self.starred
        self.touch()
        return self.starred

    def add_subtask(self, title: str) -> Subtask:
        subtask = Subtask(title=title.strip())
        self.subtasks.append(subtask)
        self.touch()
        return subtask

    def toggle_subtask(self, index: int) -> bool:
        """Flip one subtask. Raises IndexError for a bad index."""
        subtask = self.subtasks[index]
        subtask.completed = not subtask.completed
        self.touch()
        return subtask.completed

    def subtask_progress(self) -> tuple[int, int]:
        """(completed, total) subtask counts."""
        done = sum(1 for s in self.subtasks if s.completed)
        return done, len(self.subtasks)

    # ---- temporal predicates ----

    def is_available(self, as_of: date | None = None) -> bool:
        """Not deferred, or the defer date has arrived."""
        if not self.defer_date:
            return True
        as_of = as_of or date.today()
        return self.defer_date <= as_of

    def is_overdue(self, as_of: date | None = None) -> bool:
        if not self.due_date or self.completed:
            return False
        as_of = as_of or date.today()
        return self.due_date < as_of

    def is_due_today(self, as_of: date | None = None) -> bool:
        return self.is_due_within(1, as_of)

    def is_due_within(self, days: int, as_of: date | None = None) -> bool:
        """Due in [today, today + days)."""
        if not self.due_date or self.completed:
            return False
        as_of = as_of or date.today()
        return 0 <= (self.due_date - as_of).days < days

    def days_until_due(self, as_of: date | None = None) -> int | None:
        """Days until due date (negative if overdue)."""
        if not self.due_date:
            return None
        as_of = as_of or date.today()
        return (self.due_date - as_of).days

    # ---- dependency predicates ----

    def are_dependencies_met(self, all_tasks: list["Task"]) -> bool:
        """
        True when every prerequisite is completed.

        An id that resolves to no task counts as unmet, so a deleted
        prerequisite keeps this task blocked until the id is removed.
        """
        if not self.waiting_for_task_ids:
            return True
        by_id = {t.id: t for t in all_tasks}
        return all(
            dep_id in by_id and by_id[dep_id].completed
            for dep_id in self.waiting_for_task_ids
        )

    def get_pending_dependencies(self, all_tasks: list["Task"]) -> list["Task"]:
        """Resolved, not yet completed prerequisites in dependency order."""
        by_id = {t.id: t for t in all_tasks}
        return [
            by_id[dep_id]
            for dep_id in self.waiting_for_task_ids
            if dep_id in by_id and not by_id[dep_id].completed
        ]

    # ---- recurrence ----

    def is_recurring(self) -> bool:
        return bool(self.recurrence)

    def should_recurrence_end(self, as_of: date | None = None) -> bool:
        from .recurrence import should_recurrence_end

        return should_recurrence_end(self, as_of)

    def get_next_occurrence_date(self, as_of: date | None = None) -> date | None:
        from .recurrence import next_occurrence_date

        return next_occurrence_date(self, as_of)

    def create_next_instance(self, as_of: date | None = None) -> "Task | None":
        from .recurrence import create_next_instance

        return create_next_instance(self, as_of)

    # ---- serialization ----

    def to_dict(self) -> dict:
        """Serialize to the camelCase record used by storage."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "status": self.status.value,
            "energy": self.energy,
            "time": self.time,
            "timeSpent": self.time_spent,
            "projectId": self.project_id,
            "contexts": list(self.contexts),
            "completed": self.completed,
            "completedAt": _iso(self.completed_at),
            "dueDate": _iso(self.due_date),
            "deferDate": _iso(self.defer_date),
            "waitingForTaskIds": list(self.waiting_for_task_ids),
            "waitingForDescription": self.waiting_for_description,
            "recurrence": self.recurrence,
            "recurrenceEndDate": _iso(self.recurrence_end_date),
            "recurrenceParentId": self.recurrence_parent_id,
            "position": self.position,
            "starred": self.starred,
            "notes": self.notes,
            "subtasks": [s.to_dict() for s in self.subtasks],
            "url": self.url,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a stored record, defaulting missing fields."""
        now = utcnow()
        return cls(
            id=data.get("id") or generate_id(),
            title=data.get("title", "") or "",
            description=data.get("description", "") or "",
            type=data.get("type") or "task",
            status=TaskStatus.parse(data.get("status")),
            energy=data.get("energy", "") or "",
            time=data.get("time", 0) or 0,
            time_spent=data.get("timeSpent", 0) or 0,
            project_id=data.get("projectId") or None,
            # "tags" is the legacy name for contexts
            contexts=list(data.get("contexts") or data.get("tags") or []),
            completed=bool(data.get("completed", False)),
            completed_at=parse_timestamp(data.get("completedAt")),
            due_date=parse_date(data.get("dueDate")),
            defer_date=parse_date(data.get("deferDate")),
            waiting_for_task_ids=list(data.get("waitingForTaskIds") or []),
            waiting_for_description=data.get("waitingForDescription", "") or "",
            recurrence=data.get("recurrence", "") or "",
            recurrence_end_date=parse_date(data.get("recurrenceEndDate")),
            recurrence_parent_id=data.get("recurrenceParentId") or None,
            position=data.get("position", 0) or 0,
            starred=bool(data.get("starred", False)),
            notes=data.get("notes", "") or "",
            subtasks=[Subtask.from_dict(s) for s in data.get("subtasks") or []],
            url=data.get("url", "") or "",
            created_at=parse_timestamp(data.get("createdAt")) or now,
            updated_at=parse_timestamp(data.get("updatedAt")) or now,
        )

    @classmethod
    def from_parsed(cls, parsed: ParsedTask, **overrides) -> "Task":
        """Create Task from quick-add parser output."""
        fields = {
            "title": parsed.title,
            "contexts": list(parsed.contexts),
            "energy": parsed.energy,
            "time": parsed.time,
            "recurrence": parsed.recurrence,
            "due_date": parsed.due_date,
            "starred": parsed.priority,
        }
        fields.update(overrides)
        return cls(**fields)


def find_task(tasks: list[Task], task_id: str) -> Task | None:
    return next((t for t in tasks if t.id == task_id), None)


def filter_by_status(tasks: list[Task], status: TaskStatus) -> list[Task]:
    return [t for t in tasks if t.status == status]


def filter_by_context(tasks: list[Task], context: str) -> list[Task]:
    """Filter to tasks tagged with a context ('home' or '@home')."""
    ctx = normalize_context(context)
    return [t for t in tasks if ctx in t.contexts]


def filter_overdue(tasks: list[Task], as_of: date | None = None) -> list[Task]:
    """Filter to overdue tasks only."""
    as_of = as_of or date.today()
    return [t for t in tasks if t.is_overdue(as_of)]


def filter_due_within(tasks: list[Task], days: int, as_of: date | None = None) -> list[Task]:
    as_of = as_of or date.today()
    return [t for t in tasks if t.is_due_within(days, as_of)]


def filter_available(tasks: list[Task], as_of: date | None = None) -> list[Task]:
    """Open tasks that are not hidden behind a defer date."""
    as_of = as_of or date.today()
    return [t for t in tasks if not t.completed and t.is_available(as_of)]


def collect_contexts(tasks: list[Task]) -> list[str]:
    """All contexts in use, sorted."""
    return sorted({ctx for t in tasks for ctx in t.contexts})

"""Reusable task templates."""

from dataclasses import dataclass, field
from datetime import datetime

from .tasks import (
    ENERGY_LEVELS,
    Subtask,
    Task,
    TaskStatus,
    generate_id,
    normalize_contexts,
    parse_timestamp,
    utcnow,
)

TEMPLATE_CATEGORIES = ("general", "work", "personal", "meeting", "checklist")


@dataclass
class Template:
    """A blueprint for tasks that get created over and over."""

    title: str = ""
    id: str = field(default_factory=lambda: generate_id("template"))
    description: str = ""
    energy: str = ""
    time: int = 0
    contexts: list[str] = field(default_factory=list)
    notes: str = ""
    subtasks: list[Subtask] = field(default_factory=list)
    category: str = "general"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.contexts = normalize_contexts(self.contexts)
        if self.energy not in ENERGY_LEVELS:
            self.energy = ""
        if self.category not in TEMPLATE_CATEGORIES:
            self.category = "general"

    def create_task(self, **overrides) -> Task:
        """New inbox task; contexts and subtasks are copied, not shared."""
        fields = {
            "title": self.title,
            "description": self.description,
            "energy": self.energy,
            "time": self.time,
            "contexts": list(self.contexts),
            "notes": self.notes,
            "subtasks": [Subtask(s.title, s.completed) for s in self.subtasks],
            "status": TaskStatus.INBOX,
        }
        fields.update(overrides)
        return Task(**fields)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "energy": self.energy,
            "time": self.time,
            "contexts": list(self.contexts),
            "notes": self.notes,
            "subtasks": [s.to_dict() for s in self.subtasks],
            "category": self.category,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Template":
        now = utcnow()
        return cls(
            id=data.get("id") or generate_id("template"),
            title=data.get("title", "") or "",
            description=data.get("description", "") or "",
            energy=data.get("energy", "") or "",
            time=data.get("time", 0) or 0,
            contexts=list(data.get("contexts") or []),
            notes=data.get("notes", "") or "",
            subtasks=[Subtask.from_dict(s) for s in data.get("subtasks") or []],
            category=data.get("category") or "general",
            created_at=parse_timestamp(data.get("createdAt")) or now,
            updated_at=parse_timestamp(data.get("updatedAt")) or now,
        )

    @classmethod
    def from_task(cls, task: Task, category: str = "general") -> "Template":
        """Capture an existing task's shape as a template."""
        return cls(
            title=task.title,
            description=task.description,
            energy=task.energy,
            time=task.time,
            contexts=list(task.contexts),
            notes=task.notes,
            subtasks=[Subtask(s.title, False) for s in task.subtasks],
            category=category,
        )

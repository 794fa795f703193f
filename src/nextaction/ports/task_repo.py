"""Task repository interface."""

from typing import Protocol

from nextaction.core.tasks import Task
from nextaction.core.templates import Template


class TaskRepository(Protocol):
    """Interface for loading and saving the task collection in any backend."""

    def load(self) -> list[Task]:
        """Load all tasks."""
        ...

    def save(self, tasks: list[Task]) -> None:
        """Replace the stored task collection."""
        ...

    def load_templates(self) -> list[Template]:
        """Load all task templates."""
        ...

    def save_templates(self, templates: list[Template]) -> None:
        """Replace the stored templates."""
        ...

    def has_migration(self, name: str) -> bool:
        """Check whether a one-time migration already ran on this store."""
        ...

    def mark_migration(self, name: str) -> None:
        """Record that a one-time migration ran."""
        ...

"""JSON file task storage adapter."""

import json
import logging
from pathlib import Path

from nextaction.core.tasks import Task
from nextaction.core.templates import Template

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class StoreError(Exception):
    """Raised when the store file cannot be read."""

    pass


class JsonTaskStore:
    """
    JSON file task storage.

    Implements TaskRepository protocol. The whole collection lives in one
    document: {"version", "tasks", "templates", "migrations"}.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict:
        """Read the raw document. A missing file is an empty store."""
        if not self.path.exists():
            return {"version": STORE_VERSION, "tasks": [], "templates": [], "migrations": {}}
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt task store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Corrupt task store {self.path}: expected an object")
        return data

    def _write(self, data: dict) -> None:
        """Write via a sibling temp file so a failed write keeps the old store."""
        data["version"] = STORE_VERSION
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False))
        tmp.replace(self.path)
        logger.debug(f"Wrote task store {self.path}")

    def load(self) -> list[Task]:
        """Load all tasks."""
        tasks = [Task.from_dict(item) for item in self._read().get("tasks", [])]
        logger.debug(f"Loaded {len(tasks)} task(s) from {self.path}")
        return tasks

    def save(self, tasks: list[Task]) -> None:
        """Replace the stored task collection."""
        data = self._read()
        data["tasks"] = [t.to_dict() for t in tasks]
        self._write(data)

    def load_templates(self) -> list[Template]:
        """Load all task templates."""
        return [Template.from_dict(item) for item in self._read().get("templates", [])]

    def save_templates(self, templates: list[Template]) -> None:
        """Replace the stored templates."""
        data = self._read()
        data["templates"] = [t.to_dict() for t in templates]
        self._write(data)

    def has_migration(self, name: str) -> bool:
        """Check whether a one-time migration already ran on this store."""
        return bool(self._read().get("migrations", {}).get(name))

    def mark_migration(self, name: str) -> None:
        """Record that a one-time migration ran."""
        data = self._read()
        data.setdefault("migrations", {})[name] = True
        self._write(data)

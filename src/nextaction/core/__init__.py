"""Functional core - pure business logic with no I/O."""

from .parser import ParsedTask, parse
from .tasks import Subtask, Task, TaskStatus, filter_available, filter_by_context, filter_overdue
from .recurrence import create_next_instance, next_occurrence_date
from .dependencies import (
    CircularDependencyError,
    add_dependency,
    migrate_blocked_tasks,
    reconcile_waiting,
    would_create_cycle,
)
from .templates import Template
from .scoring import priority_label, priority_score

__all__ = [
    # Parser
    "ParsedTask",
    "parse",
    # Tasks
    "Subtask",
    "Task",
    "TaskStatus",
    "filter_available",
    "filter_by_context",
    "filter_overdue",
    # Recurrence
    "create_next_instance",
    "next_occurrence_date",
    # Dependencies
    "CircularDependencyError",
    "add_dependency",
    "migrate_blocked_tasks",
    "reconcile_waiting",
    "would_create_cycle",
    # Templates
    "Template",
    # Scoring
    "priority_label",
    "priority_score",
]

"""Domain models for Focus Tasks."""

from .task import Task, TaskPatch, normalize_title

__all__ = [
    "Task",
    "TaskPatch",
    "normalize_title",
]

"""Focus Tasks - a small task tracker with a REST API and a terminal client."""

__version__ = "0.1.0"
__author__ = "Focus Tasks Team"

from .domain import Task, TaskPatch

__all__ = ["Task", "TaskPatch", "__version__"]

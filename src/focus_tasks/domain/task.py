"""Task data model for the Focus Tasks application."""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ..exceptions import ValidationError


TITLE_REQUIRED = "Title is required"
TITLE_EMPTY = "Title cannot be empty"


def normalize_title(title: Any, message: str = TITLE_REQUIRED) -> str:
    """Return ``title`` if it is a non-blank string.

    Raises:
        ValidationError: If the title is missing, not a string or blank.
    """
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(message, field_name="title")
    return title


@dataclass(frozen=True)
class Task:
    """A single task record.

    ``id`` is assigned by the store on creation and never changes.
    """

    id: str
    title: str
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire JSON shape."""
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Build a task from its wire JSON shape.

        Accepts ``_id`` as an alias for ``id``, which is how document stores
        commonly name their primary key.
        """
        task_id = data.get("id", data.get("_id"))
        if task_id is None:
            raise ValueError("Task payload has no id")
        return cls(
            id=str(task_id),
            title=data.get("title", ""),
            completed=bool(data.get("completed", False)),
        )

    def merge(self, data: Dict[str, Any]) -> "Task":
        """Return a copy with the fields present in ``data`` applied.

        Fields missing from ``data`` are left untouched and the id never
        changes.
        """
        changes = {}
        if "title" in data and data["title"] is not None:
            changes["title"] = data["title"]
        if "completed" in data and data["completed"] is not None:
            changes["completed"] = bool(data["completed"])
        return replace(self, **changes) if changes else self


@dataclass
class TaskPatch:
    """Partial update for a task: ``title`` and/or ``completed``."""

    title: Optional[str] = None
    completed: Optional[bool] = None

    def __post_init__(self):
        if self.title is not None:
            normalize_title(self.title, TITLE_EMPTY)

    def is_empty(self) -> bool:
        return self.title is None and self.completed is None

    def to_dict(self) -> Dict[str, Any]:
        """Return only the fields that are set."""
        data: Dict[str, Any] = {}
        if self.title is not None:
            data["title"] = self.title
        if self.completed is not None:
            data["completed"] = self.completed
        return data

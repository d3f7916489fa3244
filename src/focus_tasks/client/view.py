"""Terminal rendering for the task list.

Views are pure: they render whatever ``ViewState`` they are given and forward
row actions to callbacks. They keep no state of their own.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Tuple

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..domain.task import Task
from .controller import ViewState


LOADING_MESSAGE = "Warming up your task server... This may take a few seconds on free hosting."
EMPTY_MESSAGE = "Add a few things so Future You can relax."
CELEBRATION = "🎉 Everything is checked off. Go do something for YOU."

ROW_ACTIONS = ("toggle", "edit", "save", "cancel", "delete")


def greeting(hour: int) -> str:
    if hour < 12:
        return "Good morning"
    if hour < 18:
        return "Good afternoon"
    return "Good evening"


def encouragement(remaining: int, total: int) -> str:
    """Header message for the number of open tasks."""
    if total == 0:
        return EMPTY_MESSAGE
    if remaining == 0:
        return "Everything is done. Soft life activated. ✨"
    if remaining <= 3:
        return "Just a few more, you got this. 💪"
    if remaining <= 7:
        return "One task at a time. 👑"
    return "Booked, busy & blessed. Let's prioritize. 📋"


@dataclass(frozen=True)
class TaskListCallbacks:
    """Row affordances. Each receives the task id and may return a coroutine."""

    on_toggle: Callable[[str], Any]
    on_edit: Callable[[str], Any]
    on_save: Callable[[str], Any]
    on_cancel: Callable[[str], Any]
    on_delete: Callable[[str], Any]


class TaskListView:
    """Renders tasks as a table; rows are addressed by 1-based number."""

    def __init__(
        self,
        tasks: Tuple[Task, ...],
        editing_task_id: Optional[str] = None,
        editing_title: str = "",
        callbacks: Optional[TaskListCallbacks] = None,
    ):
        self.tasks = tasks
        self.editing_task_id = editing_task_id
        self.editing_title = editing_title
        self.callbacks = callbacks

    @classmethod
    def from_state(
        cls, state: ViewState, callbacks: Optional[TaskListCallbacks] = None
    ) -> "TaskListView":
        return cls(state.tasks, state.editing_task_id, state.editing_title, callbacks)

    def is_editing(self, task: Task) -> bool:
        return task.id == self.editing_task_id

    def render(self) -> RenderableType:
        table = Table(show_header=True, header_style="bold", box=None, expand=True)
        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("", width=3)
        table.add_column("Task", ratio=1)
        table.add_column("Actions", style="dim", no_wrap=True)

        for row, task in enumerate(self.tasks, start=1):
            check = "[green]✔[/green]" if task.completed else "○"
            if self.is_editing(task):
                if self.editing_title:
                    title = Text(self.editing_title, style="bold yellow underline")
                else:
                    title = Text("Edit task...", style="dim italic")
                actions = "save · cancel"
            else:
                title = Text(task.title, style="dim strike" if task.completed else "")
                actions = "edit · delete"
            table.add_row(str(row), check, title, actions)

        return table

    def task_at(self, row: int) -> Task:
        """Return the task shown on ``row`` (1-based)."""
        if row < 1 or row > len(self.tasks):
            raise ValueError(f"No task on row {row}")
        return self.tasks[row - 1]

    def dispatch(self, action: str, row: int) -> Any:
        """Invoke the callback for ``action`` on the task shown at ``row``.

        Save and cancel apply only to the row being edited; edit and delete
        only to the others. Returns whatever the callback returns.
        """
        if self.callbacks is None:
            raise ValueError("This view has no callbacks")
        if action not in ROW_ACTIONS:
            raise ValueError(f"Unknown action: {action}")

        task = self.task_at(row)
        editing = self.is_editing(task)
        if action in ("save", "cancel") and not editing:
            raise ValueError(f"Row {row} is not being edited")
        if action in ("edit", "delete") and editing:
            raise ValueError(f"Row {row} is being edited; save or cancel first")

        callback = getattr(self.callbacks, f"on_{action}")
        return callback(task.id)


class AppView:
    """Whole-screen rendering: header, progress, status line, list."""

    def __init__(self, name: Optional[str] = None):
        self.name = name

    def header(self, state: ViewState, now: Optional[datetime] = None) -> RenderableType:
        now = now or datetime.now()
        hello = greeting(now.hour)
        if self.name:
            hello = f"{hello}, {self.name}"

        content = Text()
        content.append(f"{hello}\n", style="dim")
        content.append("Today's Focus\n", style="bold cyan")
        content.append(encouragement(state.remaining_count, state.total_count))
        content.append("\n\n")
        content.append("Progress ", style="yellow")
        content.append(f"{state.percent}%", style="bold green")
        content.append(f"  {state.completed_count}/{state.total_count} done", style="white")

        return Panel(content, border_style="cyan", padding=(1, 2))

    def render(self, state: ViewState, now: Optional[datetime] = None) -> RenderableType:
        parts = [self.header(state, now)]

        if state.loading:
            parts.append(Text(LOADING_MESSAGE, style="dim"))
        elif state.error:
            parts.append(Text(state.error, style="bold red"))

        if not state.loading:
            parts.append(TaskListView.from_state(state).render())
            if state.total_count and state.remaining_count == 0:
                parts.append(Text(CELEBRATION, style="bold magenta"))

        return Group(*parts)

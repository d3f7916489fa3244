"""
Client-side controller for the task list.

The controller owns the authoritative in-memory task collection and the
transient UI state (input text, edit draft, loading and error flags). It is
the only writer of that state: every change happens in one of the action
handlers below, and views only ever see an immutable ``ViewState`` snapshot.

Collection updates are applied when a request completes, using the server's
response. Nothing is applied optimistically, so a failed request leaves the
collection exactly as it was.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..domain.task import Task
from ..exceptions import ApiError
from .api_client import TaskApiClient


logger = logging.getLogger(__name__)

LOAD_ERROR = (
    "Having trouble reaching the server. If this is a demo link, the free "
    "hosting may need 20–30 seconds to wake up."
)
ADD_ERROR = "Could not add the task. Please try again."
UPDATE_ERROR = "Could not update the task. Please try again."
DELETE_ERROR = "Could not delete the task. Please try again."


def completion_stats(tasks: Tuple[Task, ...]) -> Tuple[int, int, int]:
    """Return ``(completed, remaining, percent)`` for a task sequence.

    ``percent`` is ``round(completed / total * 100)`` and 0 for an empty
    sequence.
    """
    total = len(tasks)
    completed = sum(1 for task in tasks if task.completed)
    percent = round(completed / total * 100) if total else 0
    return completed, total - completed, percent


@dataclass(frozen=True)
class ViewState:
    """Immutable snapshot of controller state handed to views."""

    tasks: Tuple[Task, ...] = ()
    input_text: str = ""
    editing_task_id: Optional[str] = None
    editing_title: str = ""
    loading: bool = True
    error: Optional[str] = None

    @property
    def total_count(self) -> int:
        return len(self.tasks)

    @property
    def completed_count(self) -> int:
        return completion_stats(self.tasks)[0]

    @property
    def remaining_count(self) -> int:
        return completion_stats(self.tasks)[1]

    @property
    def percent(self) -> int:
        return completion_stats(self.tasks)[2]

    def task_ids(self) -> List[str]:
        return [task.id for task in self.tasks]

    def find(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


Listener = Callable[[ViewState], None]


class AppController:
    """Keeps the in-memory task list in sync with the API."""

    def __init__(self, api: TaskApiClient, on_change: Optional[Listener] = None):
        self.api = api
        self._state = ViewState()
        self._listeners: List[Listener] = []
        if on_change is not None:
            self._listeners.append(on_change)

    # ------------------------------------------------------------------
    # State plumbing
    # ------------------------------------------------------------------

    def snapshot(self) -> ViewState:
        return self._state

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _set(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in self._listeners:
            listener(self._state)

    def _fail(self, message: str, error: ApiError) -> None:
        logger.warning("%s (%s)", message, error)
        self._set(error=message)

    def _merge(self, task_id: str, data: Dict[str, Any]) -> None:
        """Merge returned fields into the task with ``task_id``, if still present."""
        tasks = tuple(
            task.merge(data) if task.id == task_id else task
            for task in self._state.tasks
        )
        self._set(tasks=tasks)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> Tuple[Task, ...]:
        return self._state.tasks

    @property
    def completed_count(self) -> int:
        return self._state.completed_count

    @property
    def remaining_count(self) -> int:
        return self._state.remaining_count

    @property
    def percent(self) -> int:
        return self._state.percent

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Fetch the full list. On failure keep the current list and show an error."""
        self._set(loading=True, error=None)
        try:
            tasks = await self.api.list_tasks()
        except ApiError as e:
            self._set(loading=False)
            self._fail(LOAD_ERROR, e)
            return False

        self._set(tasks=tuple(tasks), loading=False)
        return True

    def set_input_text(self, text: str) -> None:
        self._set(input_text=text)

    async def add_task(self, text: Optional[str] = None) -> bool:
        """Create a task from the input text (or ``text``).

        Blank input is ignored without a request. The input is cleared only
        when the server accepted the task.
        """
        if text is not None:
            self._set(input_text=text)
        title = self._state.input_text.strip()
        if not title:
            return False

        self._set(error=None)
        try:
            task = await self.api.create_task(title)
        except ApiError as e:
            self._fail(ADD_ERROR, e)
            return False

        self._set(tasks=self._state.tasks + (task,), input_text="")
        return True

    async def toggle_task(self, task_id: str) -> bool:
        """Flip ``completed`` on the server, then merge the response."""
        task = self._state.find(task_id)
        if task is None:
            logger.warning("Toggle of unknown task %s", task_id)
            return False

        self._set(error=None)
        try:
            data = await self.api.update_task(task_id, completed=not task.completed)
        except ApiError as e:
            self._fail(UPDATE_ERROR, e)
            return False

        self._merge(task_id, data)
        return True

    def start_editing(self, task_id: str) -> None:
        """Enter edit mode for a task, prefilling the draft with its title."""
        task = self._state.find(task_id)
        if task is None:
            logger.warning("Edit of unknown task %s", task_id)
            return
        self._set(editing_task_id=task_id, editing_title=task.title)

    def set_editing_title(self, title: str) -> None:
        self._set(editing_title=title)

    async def save_edit(self) -> bool:
        """Send the draft title for the task being edited.

        Edit mode and the draft survive a failed save.
        """
        task_id = self._state.editing_task_id
        if task_id is None:
            return False

        self._set(error=None)
        try:
            data = await self.api.update_task(task_id, title=self._state.editing_title)
        except ApiError as e:
            self._fail(UPDATE_ERROR, e)
            return False

        self._merge(task_id, data)
        if self._state.editing_task_id == task_id:
            self._set(editing_task_id=None, editing_title="")
        return True

    def cancel_edit(self) -> None:
        self._set(editing_task_id=None, editing_title="")

    async def delete_task(self, task_id: str) -> bool:
        self._set(error=None)
        try:
            await self.api.delete_task(task_id)
        except ApiError as e:
            self._fail(DELETE_ERROR, e)
            return False

        changes: Dict[str, Any] = {
            "tasks": tuple(task for task in self._state.tasks if task.id != task_id)
        }
        if self._state.editing_task_id == task_id:
            changes.update(editing_task_id=None, editing_title="")
        self._set(**changes)
        return True

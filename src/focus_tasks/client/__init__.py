"""Terminal client: API transport, controller and views."""

from .api_client import TaskApiClient
from .controller import AppController, ViewState, completion_stats
from .view import AppView, TaskListCallbacks, TaskListView

__all__ = [
    "TaskApiClient",
    "AppController",
    "ViewState",
    "completion_stats",
    "AppView",
    "TaskListCallbacks",
    "TaskListView",
]

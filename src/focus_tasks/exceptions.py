"""Error types shared by the task API, the store and the client."""

from typing import Optional


class FocusTasksError(Exception):
    """Base class for all Focus Tasks errors."""


class ValidationError(FocusTasksError):
    """Raised when a required field is missing or empty.

    Reported to HTTP callers as a 400 and never retried.
    """

    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message)


class TaskNotFoundError(FocusTasksError):
    """Raised when an operation references a task id that does not exist."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class StoreError(FocusTasksError):
    """Raised when the underlying persistence layer fails."""


class ApiError(FocusTasksError):
    """Raised by the HTTP client when a request fails.

    ``status_code`` is ``None`` when the request never produced a response
    (connection refused, timeout, ...).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500

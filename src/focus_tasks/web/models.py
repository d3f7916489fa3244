"""
Pydantic models for API validation
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..domain.task import Task, TaskPatch


# ============================================================================
# Request Models
# ============================================================================

class TaskCreateRequest(BaseModel):
    """Task creation body.

    ``title`` is optional here so a missing title reaches the route and is
    reported as "Title is required" rather than a schema error.
    """
    title: Optional[str] = None


class TaskUpdateRequest(BaseModel):
    """Partial task update - unknown fields are ignored"""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    completed: Optional[bool] = None

    def to_patch(self) -> TaskPatch:
        return TaskPatch(title=self.title, completed=self.completed)


# ============================================================================
# Response Models
# ============================================================================

class TaskResponse(BaseModel):
    """Task as sent over the wire"""
    id: str
    title: str
    completed: bool

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(**task.to_dict())


class MessageResponse(BaseModel):
    """Confirmation message"""
    message: str


class ErrorResponse(BaseModel):
    """Error body for 4xx and 5xx responses"""
    error: str


class HealthResponse(BaseModel):
    """Health check body"""
    status: str = "healthy"
    service: str = "focus-tasks"
    version: str
    database_status: str
    total_tasks: int

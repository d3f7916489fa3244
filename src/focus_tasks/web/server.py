"""
FastAPI server for Focus Tasks.

Exposes list/create/update/delete over ``/api/tasks`` and translates store
errors into HTTP responses. Error bodies are always ``{"error": <message>}``.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from .. import __version__
from ..config import ConfigModel, get_config
from ..domain.task import TITLE_REQUIRED
from ..exceptions import StoreError, TaskNotFoundError, ValidationError
from ..storage import TaskStore, get_task_store
from .models import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
)


logger = logging.getLogger(__name__)

API_PREFIX = "/api/tasks"
TASK_DELETED = "Task deleted"
TASK_NOT_FOUND = "Task not found"
INTERNAL_ERROR = "Internal server error"


def get_store() -> TaskStore:
    """Dependency returning the task store."""
    return get_task_store()


# ============================================================================
# Task Routes
# ============================================================================

router = APIRouter(prefix=API_PREFIX, tags=["tasks"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("", response_model=List[TaskResponse], responses=ERROR_RESPONSES)
async def list_tasks(store: TaskStore = Depends(get_store)):
    """Get all tasks in creation order."""
    return [TaskResponse.from_task(task) for task in store.list_tasks()]


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_task(
    task_data: Optional[TaskCreateRequest] = None,
    store: TaskStore = Depends(get_store),
):
    """Create a new task; it always starts not completed."""
    title = task_data.title if task_data else None
    if title is None or not title.strip():
        raise ValidationError(TITLE_REQUIRED, field_name="title")

    return TaskResponse.from_task(store.create_task(title))


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
async def update_task(
    task_id: str,
    task_data: TaskUpdateRequest,
    store: TaskStore = Depends(get_store),
):
    """Apply a partial update (title and/or completed)."""
    updated = store.update_task(task_id, task_data.to_patch())
    if updated is None:
        raise TaskNotFoundError(task_id)
    return TaskResponse.from_task(updated)


@router.delete("/{task_id}", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def delete_task(task_id: str, store: TaskStore = Depends(get_store)):
    """Delete a task. Deleting an unknown id is not an error."""
    if not store.delete_task(task_id):
        logger.debug("Delete of unknown task %s", task_id)
    return MessageResponse(message=TASK_DELETED)


# ============================================================================
# Error Handlers
# ============================================================================

async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed bodies as client errors in the usual error shape."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        detail = f"{location}: {message}" if location else message
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": detail})


async def not_found_handler(request: Request, exc: TaskNotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": TASK_NOT_FOUND})


async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR},
    )


# ============================================================================
# Application
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown; the store is opened on first request."""
    logger.info("Starting Focus Tasks API v%s", __version__)
    yield
    logger.info("Shutting down Focus Tasks API")


def create_app(config: Optional[ConfigModel] = None) -> FastAPI:
    """Build the FastAPI application."""
    config = config or get_config()

    application = FastAPI(
        title="Focus Tasks API",
        description="Task tracking REST API",
        version=__version__,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    application.include_router(router)

    application.add_exception_handler(ValidationError, validation_error_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)
    application.add_exception_handler(TaskNotFoundError, not_found_handler)
    application.add_exception_handler(StoreError, store_error_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)

    @application.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check; reports an unhealthy store with a 200."""
        try:
            total = get_task_store().count_tasks()
        except StoreError as e:
            return HealthResponse(
                status="unhealthy",
                version=__version__,
                database_status=f"error: {e}",
                total_tasks=0,
            )
        return HealthResponse(version=__version__, database_status="healthy", total_tasks=total)

    return application


app = create_app()


def start_server(host: str = "127.0.0.1", port: int = 5000, debug: bool = False):
    """Start the API server."""
    uvicorn.run(
        "focus_tasks.web.server:app",
        host=host,
        port=port,
        reload=debug,
        log_level="debug" if debug else "info",
    )

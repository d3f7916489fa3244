"""
Task store

Persists task records as rows of a single SQLite table. Each task is keyed by
an opaque string id assigned on creation, and a full listing returns tasks in
creation order.
"""

import logging
import secrets
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .domain.task import Task, TaskPatch, normalize_title
from .exceptions import StoreError


logger = logging.getLogger(__name__)

ID_BYTES = 12
MAX_ID_ATTEMPTS = 5


def generate_task_id() -> str:
    """Return a fresh 24-character hex id."""
    return secrets.token_hex(ID_BYTES)


class TaskStore(ABC):
    """Basic create/read/update/delete access to task records."""

    @abstractmethod
    def list_tasks(self) -> List[Task]:
        """Return all tasks in creation order."""

    @abstractmethod
    def get_task(self, task_id: str) -> Optional[Task]:
        """Return the task with ``task_id`` or ``None``."""

    @abstractmethod
    def create_task(self, title: str) -> Task:
        """Persist a new, not completed task and return it with its id."""

    @abstractmethod
    def update_task(self, task_id: str, patch: TaskPatch) -> Optional[Task]:
        """Apply ``patch`` and return the updated task, ``None`` if absent."""

    @abstractmethod
    def delete_task(self, task_id: str) -> bool:
        """Remove the task; return whether a record existed."""

    def count_tasks(self) -> int:
        return len(self.list_tasks())


class SQLiteTaskStore(TaskStore):
    """Task store backed by a SQLite database file."""

    def __init__(self, db_path: Union[str, Path]):
        """Initialize the store

        Args:
            db_path: Database file; its parent directory is created if needed
        """
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create task database directory for %s: %s", self.db_path, e)
            raise StoreError(f"Cannot create task database directory: {e}") from e
        self._initialize_db()

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and rolls back on error.

        ``sqlite3.Error`` raised inside the block is re-raised as
        ``StoreError``.
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            logger.error("Cannot open task database %s: %s", self.db_path, e)
            raise StoreError(f"Cannot open task database: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Task database error: %s", e)
            raise StoreError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _initialize_db(self):
        with self.get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT UNIQUE NOT NULL,
                    title TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
        logger.debug("Initialized task database at %s", self.db_path)

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(id=row["id"], title=row["title"], completed=bool(row["completed"]))

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    # ========================================================================
    # Task Operations
    # ========================================================================

    def list_tasks(self) -> List[Task]:
        with self.get_connection() as conn:
            rows = conn.execute(
                "SELECT id, title, completed FROM tasks ORDER BY seq"
            ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def count_tasks(self) -> int:
        with self.get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM tasks").fetchone()[0]

    def get_task(self, task_id: str) -> Optional[Task]:
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT id, title, completed FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()
        return self._row_to_task(row) if row else None

    def create_task(self, title: str) -> Task:
        """Create a task

        Raises:
            ValidationError: If title is missing or blank
            StoreError: If the database fails or no unique id could be found
        """
        title = normalize_title(title)
        now = self._now()

        with self.get_connection() as conn:
            for _ in range(MAX_ID_ATTEMPTS):
                task_id = generate_task_id()
                try:
                    conn.execute(
                        """
                        INSERT INTO tasks (id, title, completed, created_at, updated_at)
                        VALUES (?, ?, 0, ?, ?)
                        """,
                        (task_id, title, now, now),
                    )
                except sqlite3.IntegrityError:
                    logger.warning("Task id collision on %s, retrying", task_id)
                    continue
                break
            else:
                raise StoreError("Could not allocate a unique task id")

        logger.info("Created task %s", task_id)
        return Task(id=task_id, title=title, completed=False)

    def update_task(self, task_id: str, patch: TaskPatch) -> Optional[Task]:
        """Apply a partial update

        Returns:
            The full updated task, or None if no task has this id
        """
        assignments = []
        params: list = []
        if patch.title is not None:
            assignments.append("title = ?")
            params.append(patch.title)
        if patch.completed is not None:
            assignments.append("completed = ?")
            params.append(1 if patch.completed else 0)

        with self.get_connection() as conn:
            if assignments:
                assignments.append("updated_at = ?")
                params.extend([self._now(), task_id])
                conn.execute(
                    f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?",
                    params,
                )
            row = conn.execute(
                "SELECT id, title, completed FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()

        if row is None:
            return None
        if assignments:
            logger.info("Updated task %s: %s", task_id, patch.to_dict())
        return self._row_to_task(row)

    def delete_task(self, task_id: str) -> bool:
        with self.get_connection() as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Deleted task %s", task_id)
        return deleted


_task_store: Optional[TaskStore] = None


def get_task_store() -> TaskStore:
    """Get the process-wide task store, creating it from config on first use."""
    global _task_store
    if _task_store is None:
        from .config import get_config

        config = get_config()
        _task_store = SQLiteTaskStore(config.database_path)
    return _task_store


def reset_task_store() -> None:
    """Forget the process-wide task store."""
    global _task_store
    _task_store = None

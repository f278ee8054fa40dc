import logging
import os
import sqlite3
import subprocess
import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Optional, Protocol

from models import Task

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_PATH = "tasks.db"
# Set to pin the database file; otherwise TASKS_DATABASE_PATH is read on every call
DATABASE_PATH: Optional[str] = None


def database_path() -> str:
    """Absolute path of the database file, relative paths anchored to the process cwd."""
    path = DATABASE_PATH or os.getenv("TASKS_DATABASE_PATH", DEFAULT_DATABASE_PATH)
    return os.path.abspath(path)


class TaskStore(Protocol):
    """Point lookups keyed by identity. No iteration is exposed."""

    def get(self, identity: str) -> Optional[Task]:
        ...

    def set(self, identity: str, task: Task) -> None:
        ...

    def delete(self, identity: str) -> None:
        ...


@contextmanager
def get_db(path: Optional[str] = None):
    """Context manager for database connections."""
    conn = sqlite3.connect(path or database_path())
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()

def init_db():
    """Initialize database by running Alembic migrations against database_path()."""
    path = database_path()
    logger.info("Migrating database %s", path)

    # Run alembic from the backend directory; the target file is passed explicitly
    backend_dir = os.path.dirname(os.path.abspath(__file__))
    subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=backend_dir,
        env={**os.environ, "TASKS_DATABASE_PATH": path},
        check=True
    )

def now_iso() -> str:
    return datetime.now().isoformat()

def _row_to_task(row) -> Task:
    """Convert a database row to a Task model."""
    return Task(
        owner=row["owner"],
        title=row["title"],
        completed=bool(row["completed"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqliteTaskStore:
    """
    SQLite-backed task store.
    Opens a new connection per operation, so the path is resolved on every call
    when none is given explicitly.
    """

    def __init__(self, path: Optional[str] = None):
        self._path = path

    def get(self, identity: str) -> Optional[Task]:
        with get_db(self._path) as conn:
            row = conn.execute("SELECT * FROM tasks WHERE owner = ?", (identity,)).fetchone()
            if row:
                return _row_to_task(row)
        return None

    def set(self, identity: str, task: Task) -> None:
        # created_at of an existing row is kept; everything else is replaced
        with get_db(self._path) as conn:
            conn.execute(
                """INSERT INTO tasks (owner, title, completed, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(owner) DO UPDATE SET
                       title = excluded.title,
                       completed = excluded.completed,
                       updated_at = excluded.updated_at""",
                (identity, task.title, int(task.completed), task.created_at, task.updated_at)
            )
            conn.commit()
        logger.debug("Stored task for %s", identity)

    def delete(self, identity: str) -> None:
        with get_db(self._path) as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE owner = ?", (identity,))
            conn.commit()
        if cursor.rowcount:
            logger.debug("Removed task for %s", identity)


class InMemoryTaskStore:
    """Dict-backed store with the same semantics as SqliteTaskStore."""

    def __init__(self):
        self._tasks: dict[str, Task] = {}

    def get(self, identity: str) -> Optional[Task]:
        task = self._tasks.get(identity)
        # Hand out copies so callers never hold a live reference to stored state
        return task.model_copy() if task else None

    def set(self, identity: str, task: Task) -> None:
        existing = self._tasks.get(identity)
        created_at = existing.created_at if existing else task.created_at
        self._tasks[identity] = task.model_copy(update={"owner": identity, "created_at": created_at})

    def delete(self, identity: str) -> None:
        self._tasks.pop(identity, None)

"""
Task operations for a single task per identity.

Mutations act on the caller's own record; the caller identity is passed in by
whoever authenticated the request. Queries take any target identity and never
write. Every operation returns a Result; business failures are never raised.
"""
import logging

from database import TaskStore, now_iso
from models import ErrorCode, Result, Task, TaskInfo
from validation import validate_title

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "Task created successfully"
UPDATED_MESSAGE = "Task updated successfully"
DELETED_MESSAGE = "Task deleted successfully"


def _rejected(caller: str, operation: str, error: ErrorCode) -> Result:
    logger.info("%s rejected for %s: %s", operation, caller, error.name)
    return Result.failure(error)


# Mutating operations

def create_task(store: TaskStore, caller: str, title: str) -> Result:
    """
    Create the caller's task with completed=False.
    Fails with ALREADY_EXISTS before the title is looked at.
    """
    if store.get(caller) is not None:
        return _rejected(caller, "create", ErrorCode.ALREADY_EXISTS)

    error = validate_title(title)
    if error is not None:
        return _rejected(caller, "create", error)

    timestamp = now_iso()
    store.set(caller, Task(
        owner=caller,
        title=title,
        completed=False,
        created_at=timestamp,
        updated_at=timestamp,
    ))
    logger.info("Created task for %s", caller)
    return Result.success(CREATED_MESSAGE)


def update_task(store: TaskStore, caller: str, title: str, completed: bool) -> Result:
    """Replace both title and completed on the caller's existing task."""
    existing = store.get(caller)
    if existing is None:
        return _rejected(caller, "update", ErrorCode.NOT_FOUND)

    error = validate_title(title)
    if error is not None:
        return _rejected(caller, "update", error)

    store.set(caller, existing.model_copy(update={
        "title": title,
        "completed": completed,
        "updated_at": now_iso(),
    }))
    logger.info("Updated task for %s (completed=%s)", caller, completed)
    return Result.success(UPDATED_MESSAGE)


def delete_task(store: TaskStore, caller: str) -> Result:
    if store.get(caller) is None:
        return _rejected(caller, "delete", ErrorCode.NOT_FOUND)

    store.delete(caller)
    logger.info("Deleted task for %s", caller)
    return Result.success(DELETED_MESSAGE)


# Query operations

def _query(store: TaskStore, identity: str, project) -> Result:
    task = store.get(identity)
    if task is None:
        return Result.failure(ErrorCode.NOT_FOUND)
    return Result.success(project(task))


def get_task_status(store: TaskStore, identity: str) -> Result:
    return _query(store, identity, lambda task: task.completed)


def is_task_completed(store: TaskStore, identity: str) -> Result:
    return get_task_status(store, identity)


def get_task_title(store: TaskStore, identity: str) -> Result:
    return _query(store, identity, lambda task: task.title)


def get_task_info(store: TaskStore, identity: str) -> Result:
    return _query(store, identity, lambda task: TaskInfo(title=task.title, completed=task.completed))


def is_task_active(store: TaskStore, identity: str) -> Result:
    return _query(store, identity, lambda task: not task.completed)


def is_task_pending(store: TaskStore, identity: str) -> Result:
    return is_task_active(store, identity)


def does_task_exist(store: TaskStore, identity: str) -> Result:
    """Absence is a valid answer here, not an error."""
    return Result.success(store.get(identity) is not None)


def get_task_count(store: TaskStore, identity: str) -> Result:
    return Result.success(1 if store.get(identity) is not None else 0)


def get_task_title_length(store: TaskStore, identity: str) -> Result:
    return _query(store, identity, lambda task: len(task.title))


def get_task_completion_percentage(store: TaskStore, identity: str) -> Result:
    return _query(store, identity, lambda task: 100 if task.completed else 0)

from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictBool

TITLE_MAX_LENGTH = 100


class ErrorCode(IntEnum):
    INVALID_TITLE = 400
    NOT_FOUND = 404
    ALREADY_EXISTS = 409


class Task(BaseModel):
    owner: str
    title: str
    completed: bool = False
    created_at: str  # ISO format datetime string
    updated_at: str  # ISO format datetime string

class TaskInfo(BaseModel):
    title: str
    completed: bool

class TaskCreate(BaseModel):
    title: str = Field(max_length=TITLE_MAX_LENGTH)

class TaskUpdate(BaseModel):
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    completed: StrictBool  # "true"/1 are rejected, not coerced


class Result(BaseModel):
    """Outcome of a task operation: either a value or an error code, never both."""
    value: Any = None
    error: Optional[ErrorCode] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorCode) -> "Result":
        return cls(error=error)

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from enum import Enum
import logging
import os
from dotenv import find_dotenv, load_dotenv

# .env from the working directory, loaded before anything reads the environment
load_dotenv(find_dotenv(usecwd=True))

import database
import operations
from database import SqliteTaskStore, TaskStore
from models import ErrorCode, Result, TaskCreate, TaskInfo, TaskUpdate

logger = logging.getLogger(__name__)

IDENTITY_HEADER = os.getenv("TASKS_IDENTITY_HEADER", "X-Caller-Identity")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("TASKS_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

ERROR_DETAILS = {
    ErrorCode.NOT_FOUND: "Task not found",
    ErrorCode.ALREADY_EXISTS: "Task already exists",
    ErrorCode.INVALID_TITLE: "Invalid title",
}

@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Startup
    database.init_db()
    yield
    # Shutdown (nothing to do)

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store() -> TaskStore:
    """Store for the current request. Overridden in tests."""
    return SqliteTaskStore()


def get_caller_identity(request: Request) -> str:
    """The authenticated principal, as forwarded by the host in a request header."""
    identity = request.headers.get(IDENTITY_HEADER, "")
    if not identity:
        logger.warning("Rejected %s %s: no %s header", request.method, request.url.path, IDENTITY_HEADER)
        raise HTTPException(status_code=401, detail=f"Missing {IDENTITY_HEADER} header")
    if "/" in identity:
        # Would never be addressable as /tasks/{identity}
        logger.warning("Rejected identity %r: contains '/'", identity)
        raise HTTPException(status_code=400, detail="Identity must not contain '/'")
    return identity


def unwrap(result: Result):
    """Return the result value, or raise the HTTP error matching its code."""
    if not result.ok:
        raise HTTPException(status_code=int(result.error), detail=ERROR_DETAILS[result.error])
    return result.value


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/task")
def create_task(
    task_data: TaskCreate,
    caller: str = Depends(get_caller_identity),
    store: TaskStore = Depends(get_store),
) -> dict:
    return {"message": unwrap(operations.create_task(store, caller, task_data.title))}


@app.put("/task")
def update_task(
    task_data: TaskUpdate,
    caller: str = Depends(get_caller_identity),
    store: TaskStore = Depends(get_store),
) -> dict:
    result = operations.update_task(store, caller, task_data.title, task_data.completed)
    return {"message": unwrap(result)}


@app.delete("/task")
def delete_task(
    caller: str = Depends(get_caller_identity),
    store: TaskStore = Depends(get_store),
) -> dict:
    return {"message": unwrap(operations.delete_task(store, caller))}


@app.get("/tasks/{identity}")
def get_task_info(identity: str, store: TaskStore = Depends(get_store)) -> TaskInfo:
    return unwrap(operations.get_task_info(store, identity))


class Query(str, Enum):
    """Read-only queries exposed as GET /tasks/{identity}/{query}."""
    STATUS = "status"
    COMPLETED = "completed"
    TITLE = "title"
    ACTIVE = "active"
    PENDING = "pending"
    EXISTS = "exists"
    COUNT = "count"
    TITLE_LENGTH = "title-length"
    COMPLETION_PERCENTAGE = "completion-percentage"


QUERIES = {
    Query.STATUS: operations.get_task_status,
    Query.COMPLETED: operations.is_task_completed,
    Query.TITLE: operations.get_task_title,
    Query.ACTIVE: operations.is_task_active,
    Query.PENDING: operations.is_task_pending,
    Query.EXISTS: operations.does_task_exist,
    Query.COUNT: operations.get_task_count,
    Query.TITLE_LENGTH: operations.get_task_title_length,
    Query.COMPLETION_PERCENTAGE: operations.get_task_completion_percentage,
}

@app.get("/tasks/{identity}/{query}")
def run_query(identity: str, query: Query, store: TaskStore = Depends(get_store)) -> dict:
    return {"value": unwrap(QUERIES[query](store, identity))}


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        app,
        host=os.getenv("TASKS_HOST", "0.0.0.0"),
        port=int(os.getenv("TASKS_PORT", "8000"))
    )

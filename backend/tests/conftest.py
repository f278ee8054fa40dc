"""
Shared pytest fixtures for backend tests.
Uses a temp-file SQLite database or the in-memory store for isolation.
"""
import pytest
import sqlite3
import sys
import os

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import database
from database import InMemoryTaskStore, SqliteTaskStore


@pytest.fixture
def test_db(monkeypatch, tmp_path):
    """
    Create an isolated test database for each test.
    Uses a temp file (not :memory:) because database.py opens new connections per operation.
    """
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr(database, "DATABASE_PATH", db_path)
    monkeypatch.setattr(database, "init_db", lambda: None)

    # Create tables directly (skip alembic for tests)
    conn = sqlite3.connect(db_path)
    conn.executescript("""
        CREATE TABLE tasks (
            owner TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            completed INTEGER DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
    """)
    conn.commit()
    conn.close()

    yield db_path


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    """Each store implementation, so semantics are checked against both."""
    if request.param == "memory":
        return InMemoryTaskStore()
    request.getfixturevalue("test_db")
    return SqliteTaskStore()


@pytest.fixture
def app_client(test_db, monkeypatch):
    """
    Create a test client for the FastAPI app.
    Mocks init_db to skip alembic migrations; the default store reads the test database.
    """
    from fastapi.testclient import TestClient
    import main

    # Skip alembic in tests - tables already created by test_db fixture
    monkeypatch.setattr(database, "init_db", lambda: None)

    with TestClient(main.app) as client:
        yield client


@pytest.fixture
def alice(app_client):
    """Headers authenticating requests as identity 'alice'."""
    import main
    return {main.IDENTITY_HEADER: "alice"}


@pytest.fixture
def bob(app_client):
    import main
    return {main.IDENTITY_HEADER: "bob"}

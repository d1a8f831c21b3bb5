"""
Notebox — Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (throwaway database, store, API client).
How:   Every test gets its own SQLite file under tmp_path, driven through aiosqlite,
       so tests exercise real SQL without a database server.

Fixture Hierarchy (all function-scoped):
    test_settings ─┬─ database ── note_store
                   └─ test_app ── test_client
"""

import os

# Override settings for testing BEFORE any app imports
# The module-level app in notebox.main is built from these at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notebox.config import Settings
from notebox.database import Database
from notebox.main import create_app
from notebox.services.note_store import NoteStore


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a fresh SQLite file for this test."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notebox.db'}",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """A Database with the schema created; disposed after the test."""
    db = Database(test_settings)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def note_store(database):
    return NoteStore(database)


@pytest.fixture
def test_app(test_settings):
    return create_app(test_settings)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    ASGITransport does not run the lifespan, so the schema is created here
    the same way startup would create it.
    """
    await test_app.state.database.create_schema()
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await test_app.state.database.dispose()

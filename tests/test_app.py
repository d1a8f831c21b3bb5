"""
Notebox — Application Lifecycle & Health Tests
================================================

What:  Tests for startup/shutdown, the health route and business code table.
Why:   A database that cannot be initialised must abort startup; everything
       else about the app depends on that guarantee.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from notebox.config import Settings
from notebox.exceptions import ErrorKind, RequestFailed, StorageError, ValidationError
from notebox.main import create_app


class TestLifespan:
    """Startup creates the schema; failure to do so is fatal."""

    @pytest.mark.asyncio
    async def test_startup_creates_schema(self, test_app):
        async with test_app.router.lifespan_context(test_app):
            store = test_app.state.note_store
            note = await store.create(title="after startup", text="")
            assert note.id == 1

    @pytest.mark.asyncio
    async def test_startup_fails_when_database_unreachable(self, tmp_path):
        app = create_app(
            Settings(
                database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'notebox.db'}",
                log_level="WARNING",
            )
        )

        with pytest.raises(OperationalError):
            async with app.router.lifespan_context(app):
                pass


class TestHealth:
    """GET /health"""

    @pytest.mark.asyncio
    async def test_health_reports_connected_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_health_reports_unreachable_database(self, tmp_path):
        app = create_app(
            Settings(
                database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'notebox.db'}",
                log_level="WARNING",
            )
        )
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")
        await app.state.database.dispose()

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"


class TestErrorKinds:
    """Business codes and exception defaults."""

    def test_codes(self):
        assert ErrorKind.SUCCESS.code == 0
        assert ErrorKind.SUCCESS.message == "成功"
        assert ErrorKind.UNRECOGNIZED.code == -1
        assert ErrorKind.TITLE_IS_NIL.code == 1000
        assert ErrorKind.RECORD_IS_NIL.code == 1001
        assert ErrorKind.DB_IS_NIL.code == 1002
        assert ErrorKind.CREATE_TABLE.code == 2000
        assert ErrorKind.CREATE_DB.code == 2001
        assert ErrorKind.SEARCH.code == 3000
        assert ErrorKind.DELETE.code == 4000
        assert ErrorKind.UPDATE.code == 5000

    def test_codes_are_unique(self):
        codes = [kind.code for kind in ErrorKind]
        assert len(codes) == len(set(codes))

    def test_exception_defaults(self):
        validation = ValidationError(field="title")
        assert (validation.kind, validation.status_code) == (ErrorKind.TITLE_IS_NIL, 422)
        assert validation.context == {"field": "title"}

        storage = StorageError("find_all")
        assert (storage.kind, storage.status_code) == (ErrorKind.UNRECOGNIZED, 500)
        assert storage.context["operation"] == "find_all"

        failed = RequestFailed(ErrorKind.SEARCH, status_code=422)
        assert failed.message == ErrorKind.SEARCH.message
        assert failed.status_code == 422

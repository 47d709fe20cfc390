"""
Notes API - Application Wiring Tests
====================================

What:  Health endpoint, request ids, error format and lifespan.
"""

import logging

import pytest

from notes_api import __version__
from notes_api.main import setup_logging
from notes_api.middleware.logging import level_for_status


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_reports_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"] == __version__
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_health_database_down(self, app, test_client):
        async def failing_ping():
            raise ConnectionError("database unreachable")

        app.state.database.ping = failing_ping

        body = (await test_client.get("/health")).json()

        assert body["status"] == "unhealthy"
        assert body["database"] == "disconnected"


class TestRequestId:
    @pytest.mark.asyncio
    async def test_generated_request_id(self, test_client):
        response = await test_client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_request_id_is_kept(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_oversized_client_request_id_is_replaced(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "x" * 200})
        assert response.headers["X-Request-ID"] != "x" * 200

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get("/api/v1/notes", headers={"X-Request-ID": "err-42"})

        assert response.status_code == 401
        assert response.json() == {
            "error": "unauthorized",
            "message": "Unauthorized access",
            "request_id": "err-42",
        }


class TestLogging:
    @pytest.mark.parametrize(
        "status, level",
        [(200, logging.INFO), (302, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
    )
    def test_level_for_status(self, status, level):
        assert level_for_status(status) == level

    @pytest.mark.asyncio
    async def test_access_log_line(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="notes_api.access"):
            await test_client.get("/api/v1/notes")

        record = next(r for r in caplog.records if r.name == "notes_api.access")
        assert record.levelno == logging.WARNING
        assert record.status == 401
        assert record.path == "/api/v1/notes"

    @pytest.mark.asyncio
    async def test_health_not_logged(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="notes_api.access"):
            await test_client.get("/health")
        assert not [r for r in caplog.records if r.name == "notes_api.access"]

    def test_setup_logging_quiets_third_party(self):
        setup_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        setup_logging("WARNING")


class TestLifespan:
    @pytest.mark.asyncio
    async def test_lifespan_creates_upload_dir(self, app):
        upload_path = app.state.file_service.upload_path
        assert not upload_path.exists()

        async with app.router.lifespan_context(app):
            assert upload_path.is_dir()

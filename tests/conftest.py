"""
Notes API - Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Unit tests use mock_db_session (AsyncMock, no database); endpoint tests
       use test_client, an httpx AsyncClient talking to an app built by
       create_app() over a throwaway SQLite database and storage directory.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:   Mock async session for service tests
    ├── temp_storage:      Temporary storage root
    ├── sample_image_bytes: Fake PNG content for upload tests
    ├── test_settings:     Settings pointing at temp_storage and a SQLite file
    ├── mail_service:      AsyncMock standing in for MailService
    ├── app:               FastAPI app with tables created
    └── test_client:       AsyncClient bound to `app`
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notes_api.config import Settings
from notes_api.main import create_app
from notes_api.services.mail_service import MailService

TEST_EMAIL = "a@x.com"
TEST_PASSWORD = "secret1"


@pytest.fixture
def mock_db_session():
    """
    Mock async database session.

    add() assigns the defaults the database would (id, timestamps) so ORM
    objects can be serialized without a real flush.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
    """
    def add(obj):
        now = datetime.now(timezone.utc)
        if getattr(obj, "id", None) is None:
            obj.id = uuid4()
        for attr in ("created_at", "updated_at"):
            if hasattr(obj, attr) and getattr(obj, attr) is None:
                setattr(obj, attr, now)

    session = AsyncMock()
    session.bind = MagicMock()
    session.bind.dialect.name = "sqlite"
    session.execute = AsyncMock(return_value=MagicMock())
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock(side_effect=add)
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """PNG signature plus padding: enough for extension/content-type/size checks."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def test_settings(tmp_path, temp_storage):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        storage_root=temp_storage,
        jwt_access_secret="test-access-secret",
        jwt_refresh_secret="test-refresh-secret",
        mail_username="",
        log_level="WARNING",
    )


@pytest.fixture
def mail_service():
    return AsyncMock(spec=MailService)


@pytest_asyncio.fixture
async def app(test_settings, mail_service):
    application = create_app(test_settings, mail_service=mail_service)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Async HTTP client for endpoint tests. Cookies set by the API are kept in
    the client's jar, so a login carries over to later requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_client(app):
    """
    Factory for additional clients with their own cookie jar, e.g. a second
    user or a request carrying a hand-picked Cookie header.
    """
    def factory(**kwargs):
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", **kwargs)

    return factory


@pytest.fixture
def register_and_login():
    """
    Register a user and log in with the given client; returns the new user id.

    Usage:
        user_id = await register_and_login(test_client)
    """
    async def login(client, email=TEST_EMAIL, password=TEST_PASSWORD):
        credentials = {"email": email, "password": password}
        response = await client.post("/api/v1/auth/register", json=credentials)
        assert response.status_code == 201, response.text
        logged_in = await client.post("/api/v1/auth/login", json=credentials)
        assert logged_in.status_code == 200, logged_in.text
        return response.json()["id"]

    return login

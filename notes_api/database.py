"""
Notes API - Database Session Management
=======================================

What:  Async SQLAlchemy engine, session factory and the per-request session
       dependency.
How:   Database wraps one engine and its sessionmaker. create_app() builds a
       Database from Settings and stores it on app.state.database; the
       get_db_session dependency opens one session per request from it and
       rolls back on error.

Transactions:
    Services commit their own writes before returning.
    Why: code after `yield` in a dependency runs once the response is already
    on its way, so a commit there could fail after the client was told the
    write succeeded. Committing inside the service lets a failed commit
    become a 500 and lets the service clean up files it stored.

Connection Pooling:
    PostgreSQL (asyncpg) uses a QueuePool sized from settings. SQLite
    (aiosqlite, used by the tests) keeps SQLAlchemy's default pool since
    QueuePool sizing does not apply to it.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notes_api.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations and
    Database.create_all() uses in tests.
    """
    pass


class Database:
    """Owns the async engine and hands out sessions."""

    def __init__(self, settings: Settings):
        engine_kwargs = {"echo": settings.log_level == "DEBUG"}
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        self.engine: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)

        # expire_on_commit=False: ORM objects stay readable after the
        # dependency commits, while the response is being serialized.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create every table known to Base.metadata (tests and local dev)."""
        import notes_api.models  # noqa: F401  registers the models on Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        """Run SELECT 1; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    1. Opens a session from the application's Database
    2. Yields it to the route handler (services commit their own writes)
    3. Rolls back on any exception (then re-raises)
    4. Always closes the session; anything left uncommitted is discarded

    Example usage in a route:
        @router.get("/notes")
        async def list_notes(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

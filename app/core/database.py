"""Async SQLAlchemy database setup.

The engine is created by the application lifespan and kept on ``app.state``;
request handlers receive a session through the ``get_db`` dependency.
"""

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

# Lower-cased fragments that PostgreSQL, MySQL and SQLite put in their
# duplicate-key error messages.
_UNIQUE_MARKERS = ("unique", "duplicate")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def normalize_database_url(url: str) -> str:
    """Point plain PostgreSQL URLs at asyncpg and drop libpq-only params."""
    # Hosted Postgres gives postgresql:// URLs, but asyncpg needs postgresql+asyncpg://
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    url = url.replace("sslmode=require", "ssl=require")
    url = url.replace("&channel_binding=require", "").replace("?channel_binding=require", "?")
    return url.rstrip("?")


def create_engine_from_url(url: str, debug: bool = False) -> AsyncEngine:
    db_url = normalize_database_url(url)
    if db_url.startswith("sqlite"):
        # One connection per session; a pooled aiosqlite connection is bound to
        # the event loop that opened it.
        return create_async_engine(db_url, echo=debug, poolclass=NullPool)
    return create_async_engine(db_url, echo=debug, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_schema(engine: AsyncEngine) -> None:
    """Create the alumni table if it does not exist yet."""
    # Import models so they register with Base.metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_connection(engine: AsyncEngine) -> None:
    """Run a trivial query; raises if the database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def get_db(request: Request):
    """Dependency that provides an async database session."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def is_unique_violation(exc: IntegrityError, column: str) -> bool:
    """Return True if ``exc`` is a duplicate-key error on ``column``.

    Matches on the driver message, e.g.

    - PostgreSQL: ``duplicate key value violates unique constraint "uq_alumni_email"``
    - MySQL: ``Duplicate entry 'a@b.com' for key 'uq_alumni_email'``
    - SQLite: ``UNIQUE constraint failed: alumni.email``
    """
    message = str(exc.orig if exc.orig is not None else exc).lower()
    if not any(marker in message for marker in _UNIQUE_MARKERS):
        return False
    return column.lower() in message

"""
Database engine and sessions for hitome.

Everything lives in one SQLite file reached through aiosqlite. The inbox tables
cascade on delete, so SQLite's foreign key enforcement is switched on for every
connection the engine opens.
"""

from pathlib import Path
from typing import AsyncGenerator
import logging

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from ..config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Build an async engine for ``url``.

    In-memory SQLite gets a single shared connection so every session sees
    the same tables.
    """
    options = {"echo": echo, "future": True}
    if _is_memory_sqlite(url):
        options["poolclass"] = StaticPool

    new_engine = create_async_engine(url, **options)
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


def ensure_sqlite_directory(url: str) -> None:
    """Create the directory holding a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or _is_memory_sqlite(url):
        return
    Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)
async_session_factory = make_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session for route dependencies.

    Commits when the handler returns normally; any exception rolls back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the data directory and any missing tables."""
    ensure_sqlite_directory(settings.DATABASE_URL)

    from ..models import (  # noqa: F401
        User, Store, StoreUser, Session, Thread, Message, DangerWord,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Database ready: {make_url(settings.DATABASE_URL).render_as_string(hide_password=True)}")


async def close_db() -> None:
    await engine.dispose()
    logger.info("Database engine disposed")

"""Async SQLAlchemy engine and session factory.

The URL comes from settings (SQLite through aiosqlite unless configured
otherwise). SQLite connections get foreign-key enforcement switched on so
deleting a user cascades to their history, glossary and settings rows.
"""

from __future__ import annotations

from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create an async engine for ``url`` (settings by default)."""
    url = url or settings.db.url
    kwargs.setdefault("echo", settings.db.echo)
    engine = create_async_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


engine: AsyncEngine = build_engine()

AsyncSessionMaker = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


async def create_tables(target: AsyncEngine | None = None, *, reset: bool = False) -> list[str]:
    """Create missing tables, dropping everything first when ``reset``.

    Returns:
        Names of the tables in the schema
    """
    from .models import Base

    async with (target or engine).begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    return list(Base.metadata.tables.keys())


async def get_session() -> AsyncIterator[AsyncSession]:
    """Request-scoped session dependency."""
    async with AsyncSessionMaker() as session:
        yield session

"""Database configuration and session management.

Provides async SQLAlchemy engine and session factory.
"""

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from storefront.infrastructure.config import settings


def create_engine(database_url: str, echo: bool = False, **engine_kwargs: Any) -> AsyncEngine:
    """Create an async engine for a database URL.

    Args:
        database_url: SQLAlchemy URL with an async driver.
        echo: Whether to log SQL statements.
        **engine_kwargs: Extra arguments for create_async_engine (e.g. poolclass).

    Returns:
        AsyncEngine instance.
    """
    async_engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True, **engine_kwargs)
    if async_engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(async_engine)
    return async_engine


def _enable_sqlite_savepoints(async_engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINT works on SQLite."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Create async engine
engine = create_engine(settings.database_url, echo=settings.debug)

# Session factory
async_session_factory = create_session_factory(engine)

# Base class for models
Base = declarative_base()


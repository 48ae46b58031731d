"""
SQLAlchemy declarative base and async engine/session factory.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from registry.config import settings


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Current UTC time, naive, to match the timezone-less DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def enable_sqlite_savepoints(engine: AsyncEngine) -> AsyncEngine:
    """
    SQLite's driver defers BEGIN on its own, which breaks SAVEPOINT scoping.
    Hand transaction control to SQLAlchemy instead. No-op for other backends.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


engine = enable_sqlite_savepoints(create_async_engine(
    settings.async_database_url,
    echo=False,
    pool_pre_ping=True,
))

AsyncSessionFactory: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

"""
Engine and session factory.

The engine is built once per process and the session factory is handed to
the services explicitly (FastAPI dependency `get_sessions`), so tests can
swap in a factory bound to their own database.

SQLite notes:
  The stdlib driver issues its own deferred BEGIN, which would let two
  writers both read "no conflict" before either takes the write lock.
  We switch that off and emit BEGIN IMMEDIATE ourselves, so every
  transaction owns the single database writer from its first statement.
"""

from functools import lru_cache
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gallery.core.config import get_settings


def _configure_sqlite(engine: AsyncEngine, busy_timeout_ms: int) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    settings = get_settings()
    url = url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            echo=echo,
            connect_args={"timeout": settings.SQLITE_BUSY_TIMEOUT_MS / 1000},
        )
        _configure_sqlite(engine, settings.SQLITE_BUSY_TIMEOUT_MS)
        return engine

    return create_async_engine(
        url,
        echo=echo,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
        # Advisory locks + a fresh snapshot per statement; see gallery.services.advisory_lock
        isolation_level="READ COMMITTED",
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@lru_cache()
def get_engine() -> AsyncEngine:
    settings = get_settings()
    return build_engine(echo=settings.DEBUG)


@lru_cache()
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return build_sessionmaker(get_engine())


async def get_sessions() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency: the session factory the services write through."""
    return get_sessionmaker()

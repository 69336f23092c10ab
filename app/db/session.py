"""SQLAlchemy async engine, session factory and FastAPI dependency."""

import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Connection execution option: open the transaction holding the write lock
WRITE_LOCK_OPTION = "sqlite_begin_immediate"


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    Give SQLite connections foreign keys and working SAVEPOINTs.

    The stdlib sqlite3 driver manages transactions itself and breaks nested
    transactions; hand BEGIN over to SQLAlchemy instead. Transactions opened
    through begin_write() use BEGIN IMMEDIATE so concurrent writers wait on
    the busy timeout instead of failing with "database is locked".
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(WRITE_LOCK_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


async def begin_write(session: AsyncSession) -> None:
    """
    Start the session's next transaction as a writer.

    Commits whatever transaction is open first. Other databases ignore
    the option.
    """
    if session.in_transaction():
        await session.commit()
    await session.connection(execution_options={WRITE_LOCK_OPTION: True})


engine = create_async_engine(
    settings.database_url,
    echo=False,
    future=True,
)
configure_sqlite(engine)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    Commits when the request handler returns, rolls back if it raised.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create tables for all registered models."""
    # Import models so they register on Base.metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()

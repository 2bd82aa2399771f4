"""
Async engine, session factory and transaction helpers.

PostgreSQL (asyncpg) is the production target; SQLite (aiosqlite) backs local
runs and the test suite.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from contentops.config import get_settings

SessionFactory = Callable[[], AsyncSession]

# Connection execution option read by the SQLite begin hook; other backends ignore it
SQLITE_BEGIN_OPTION = "sqlite_begin"
WRITE_LOCK_OPTIONS = {SQLITE_BEGIN_OPTION: "IMMEDIATE"}

SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA foreign_keys=ON",
    "PRAGMA busy_timeout=5000",
)


def _install_sqlite_hooks(async_engine: AsyncEngine) -> None:
    sync_engine = async_engine.sync_engine

    @event.listens_for(sync_engine, "connect")
    def _on_connect(dbapi_conn, _record):
        cursor = dbapi_conn.cursor()
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(pragma)
        cursor.close()
        # pysqlite's implicit transactions break SAVEPOINT; SQLAlchemy issues BEGIN instead
        dbapi_conn.isolation_level = None

    @event.listens_for(sync_engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for url.

    SQLite gets one connection per session (NullPool) so concurrent dashboard
    sections never share a connection.
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(
            url,
            echo=echo,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )
        _install_sqlite_hooks(sqlite_engine)
        return sqlite_engine
    return create_async_engine(url, echo=echo, pool_pre_ping=True, pool_size=5, max_overflow=10)


_settings = get_settings()
engine = build_engine(_settings.database_url, echo=_settings.debug)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def unit_of_work(
    session_factory: SessionFactory = async_session_maker,
    write_lock: bool = False,
) -> AsyncGenerator[AsyncSession, None]:
    """
    One transaction: committed when the block exits cleanly, rolled back otherwise.

    With write_lock the transaction takes the database write lock up front
    (BEGIN IMMEDIATE on SQLite), so read-then-write units of work queue behind
    each other instead of failing when they both try to write.

        async with unit_of_work(write_lock=True) as session:
            await AssignmentStore(session).replace_assignments(...)
    """
    async with session_factory() as session:
        try:
            if write_lock:
                await acquire_write_lock(session)
            yield session
        except BaseException:
            await session.rollback()
            raise
        else:
            await session.commit()


async def acquire_write_lock(session: AsyncSession) -> None:
    """Start the session's transaction holding the write lock; no-op once a transaction is open."""
    if not session.in_transaction():
        await session.connection(execution_options=WRITE_LOCK_OPTIONS)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped unit of work."""
    async with unit_of_work() as session:
        yield session


def get_session_factory() -> SessionFactory:
    return async_session_maker


async def init_db() -> None:
    """Create any missing tables (migrations own schema changes)."""
    from contentops.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()

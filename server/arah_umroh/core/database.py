"""Database configuration and async session management."""

import asyncio
import weakref
from typing import AsyncGenerator

from sqlalchemy import event, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, declarative_base
from sqlalchemy.pool import StaticPool

from .config import settings

_is_sqlite = "sqlite" in settings.database_url

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
    # StaticPool keeps a single in-memory SQLite database alive across sessions
    poolclass=StaticPool if _is_sqlite else None,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Create declarative base for models
Base = declarative_base()


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function that yields database sessions.

    Yields:
        AsyncSession: Database session
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# Alias for FastAPI dependency injection
get_db = get_async_session


def is_postgresql(session: AsyncSession) -> bool:
    """Return True when the session is bound to PostgreSQL."""
    bind = session.bind
    return bind is not None and bind.dialect.name == "postgresql"


# In-process stand-ins for advisory locks on databases without them, keyed by lock name
_local_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

HELD_LOCKS_KEY = "advisory_locks"


async def acquire_advisory_lock(session: AsyncSession, key: str) -> None:
    """
    Serialize writers on ``key`` for the rest of the current transaction.

    PostgreSQL releases the lock at transaction end. SQLite has no advisory
    or row locks, so writers in this process queue on an ``asyncio.Lock``
    instead, released when the session's transaction commits or rolls back.
    The lock is re-entrant within one session, like its PostgreSQL counterpart.
    """
    if is_postgresql(session):
        await session.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
            {"key": key}
        )
        return

    held = session.sync_session.info.setdefault(HELD_LOCKS_KEY, {})
    if key in held:
        return

    # Start the transaction first so its end is guaranteed to release the lock
    await session.connection()

    lock = _local_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _local_locks[key] = lock
    await lock.acquire()
    held[key] = lock


@event.listens_for(Session, "after_transaction_end")
def _release_local_locks(session: Session, transaction) -> None:
    if transaction.parent is not None:
        return
    for lock in session.info.pop(HELD_LOCKS_KEY, {}).values():
        lock.release()


async def lock_row(session: AsyncSession, model, row_id):
    """
    Lock one row for the rest of the transaction and return it freshly loaded.

    Takes the advisory lock ``<table>:<id>`` and then reads the row with
    ``FOR UPDATE``, so a status checked afterwards cannot change underneath.
    Returns None when the row does not exist.
    """
    await acquire_advisory_lock(session, f"{model.__tablename__}:{row_id}")
    stmt = (
        select(model)
        .where(model.id == row_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def init_db() -> None:
    """Initialize the database by creating all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()

import asyncio
from contextlib import asynccontextmanager
from enum import Enum, auto
from pathlib import Path
from typing import AsyncGenerator

from loguru import logger
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine,
    async_scoped_session,
)
from sqlalchemy.pool import NullPool, StaticPool


class DatabaseType(Enum):
    """Types of supported databases."""

    MEMORY = auto()
    FILESYSTEM = auto()

    @classmethod
    def get_db_url(cls, db_path: Path, db_type: "DatabaseType") -> str:
        """aiosqlite URL for the drive's database file, or an in-memory one."""
        if db_type == cls.MEMORY:
            logger.info("Using in-memory object store, nothing will persist")
            return "sqlite+aiosqlite://"

        return f"sqlite+aiosqlite:///{db_path}"


def create_engine(db_path: Path, db_type: DatabaseType = DatabaseType.FILESYSTEM) -> AsyncEngine:
    """
    Create an async engine that holds no connection between operations.

    File databases use NullPool so every session opens its own connection.
    An in-memory database only exists as long as its connection does, so it
    is pinned to a single connection instead.
    """
    db_url = DatabaseType.get_db_url(db_path, db_type)
    logger.debug(f"Creating engine for db_url: {db_url}")
    poolclass = StaticPool if db_type == DatabaseType.MEMORY else NullPool
    return create_async_engine(
        db_url,
        connect_args={"check_same_thread": False},
        poolclass=poolclass,
    )


def get_scoped_session_factory(
    session_maker: async_sessionmaker[AsyncSession],
) -> async_scoped_session:
    """Scope sessions to the asyncio task, so concurrent writes never share one."""
    return async_scoped_session(session_maker, scopefunc=asyncio.current_task)


@asynccontextmanager
async def scoped_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    One session per store operation, bound to the calling task.

    Each store call runs in its own block and commits on a clean exit or
    rolls back on error. The connection is released before the call
    returns, so nothing is held between store calls.
    """
    factory = get_scoped_session_factory(session_maker)
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
        await factory.remove()


async def init_db(engine: AsyncEngine, metadata: MetaData) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


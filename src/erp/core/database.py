"""
Database Configuration

Async SQLAlchemy engine and session management.

The engine is owned by a Database instance created in the application
lifespan and stored on app.state; request handlers get sessions through
the get_db dependency.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class Database:
    """
    Owns the async engine and session factory for one process.

    Args:
        url: SQLAlchemy async database URL
        echo: Log all SQL statements
        pooled: Use a connection pool (production). Development uses NullPool.
    """

    def __init__(self, url: str, *, echo: bool = False, pooled: bool = True):
        if pooled:
            self.engine: AsyncEngine = create_async_engine(
                url,
                echo=echo,
                pool_size=10,
                max_overflow=20,
                pool_recycle=1800,
                pool_pre_ping=True,
            )
        else:
            self.engine = create_async_engine(url, echo=echo, poolclass=NullPool)

        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def ping(self) -> None:
        """Verify the database is reachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a database session.

    Rolls back if the request handler raises.
    """
    database: Database = request.app.state.database
    async with database.session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

"""
Global database session and engine management.

This module manages the global AsyncEngine and async_sessionmaker instances
that are used throughout the application for database access.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from edustack.core.logging_config import get_logger
from edustack.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Uncommitted work is rolled back when the request fails.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db(create_tables: bool = False) -> None:
    """
    Initialize the database.

    Alembic migrations own the schema in deployed environments, so tables
    are only created here when ``create_tables`` is set (local development).
    """
    if create_tables:
        await create_all(engine)
        logger.info("Database tables created from ORM metadata")

"""Async PostgreSQL engine, sessions and schema management for Clashboard.

Battles and goals live in the ``core`` schema; ``create_tables`` creates it
before the tables so a fresh database needs no migration step.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import Settings, get_global_settings
from .models import Base

SCHEMA = "core"


class DatabaseManager:
    """Owns the async engine, the session factory and the ``core`` schema."""

    def __init__(self, settings: Optional[Settings] = None):
        """
        Build the engine from settings.

        Creating the engine does not connect; the first session or DDL call
        does.

        :param settings: Settings to read the connection from (global by default)
        """
        settings = settings or get_global_settings()
        self.database_url = settings.database_url
        self._password = settings.postgres_password

        self.engine: AsyncEngine = create_async_engine(
            self.database_url,
            echo=settings.debug,
            pool_pre_ping=True,
        )
        self.async_session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def redacted_url(self) -> str:
        """Connection URL safe to log."""
        if not self._password:
            return self.database_url
        return self.database_url.replace(self._password, "***")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that rolls back when the block raises."""
        async with self.async_session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> List[str]:
        """
        Create the ``core`` schema and every registered table.

        Existing tables are left untouched.

        :returns: Names of the tables known to the metadata
        """
        async with self.engine.begin() as conn:
            await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}"))
            await conn.run_sync(Base.metadata.create_all)
        return list(Base.metadata.tables.keys())

    async def drop_tables(self) -> None:
        """Drop every registered table. The schema itself stays."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def close(self) -> None:
        """Dispose of pooled connections."""
        await self.engine.dispose()


db_manager = DatabaseManager()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with db_manager.get_session() as session:
        yield session

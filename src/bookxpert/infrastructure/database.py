"""Database connection pool and management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg
from asyncpg import Connection, Pool

from bookxpert.config import settings

logger = logging.getLogger(__name__)


class DatabasePool:
    """Manages database connection pool for the application.

    One pool is built per process (API lifespan or CLI command) and handed
    to every table that needs it; nothing reaches for a global.
    """

    def __init__(self, database_url: str | None = None):
        self._database_url = database_url
        self._pool: Pool | None = None

    @property
    def database_url(self) -> str:
        return self._database_url or settings.database_url

    async def initialize(self) -> None:
        """Initialize the connection pool.

        Called once at application startup.
        """
        logger.info(
            f"Initializing database pool with {settings.db_pool_min_size}-{settings.db_pool_max_size} connections"
        )

        self._pool = await asyncpg.create_pool(
            self.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=30.0,
        )

        async with self._pool.acquire() as conn:
            version = await conn.fetchval("SELECT version()")
            logger.info(f"Connected to PostgreSQL: {version}")

    async def close(self) -> None:
        """Close all connections in the pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    @property
    def pool(self) -> Pool:
        """Get the connection pool."""
        if not self._pool:
            raise RuntimeError(
                "Database pool not initialized. Call initialize() first."
            )
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Connection]:
        """Acquire a connection from the pool.

        Usage:
            async with db_pool.acquire() as conn:
                await conn.fetch("SELECT * FROM catalogue_items")
        """
        async with self.pool.acquire() as conn:
            yield conn

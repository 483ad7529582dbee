"""
asyncpg pool wrapper for the timeline store.

A Database is constructed explicitly by the caller (the CLI, a test) and
handed to the repositories; nothing in the pipeline reaches for a shared
process-wide connection.
"""

import logging
from types import TracebackType
from typing import Any

import asyncpg

from release_timeline.config.settings import get_settings

logger = logging.getLogger(__name__)


class DatabaseUnavailable(Exception):
    """Raised when the store cannot be reached at start-up."""

    pass


class Database:
    """
    Connection pool for the releases, reviews and scraper_sources tables.

    Usage:
        async with Database() as db:
            repo = TimelineRepository(db)
            releases = await repo.find_releases()
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
    ):
        settings = get_settings()

        self._database_url = database_url or str(settings.database_url)
        self._min_size = min_size or settings.db_pool_min_size
        self._max_size = max_size or settings.db_pool_max_size

        self._pool: asyncpg.Pool | None = None

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """
        Open the pool.

        Raises:
            DatabaseUnavailable: When the server refuses or cannot be reached
        """
        try:
            self._pool = await asyncpg.create_pool(
                self._database_url,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=60,
            )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error(f"Failed to connect to database: {e}")
            raise DatabaseUnavailable(str(e)) from e

        logger.info(f"Database connected (pool: {self._min_size}-{self._max_size})")

    async def close(self) -> None:
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def pool(self) -> asyncpg.Pool:
        """Connection pool, raising if connect() has not been awaited."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    async def execute(self, query: str, *args: Any) -> str:
        async with self.pool.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        async with self.pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        async with self.pool.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        async with self.pool.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def health_check(self) -> bool:
        """
        Check the store answers a trivial query.

        Returns:
            True if SELECT 1 succeeds
        """
        try:
            return await self.fetchval("SELECT 1") == 1
        except (OSError, asyncpg.PostgresError, RuntimeError) as e:
            logger.warning(f"Database health check failed: {e}")
            return False

"""Tests for the Database pool wrapper."""

from unittest.mock import AsyncMock, patch

import pytest

from release_timeline.storage.database import Database, DatabaseUnavailable


class TestDatabase:
    @pytest.mark.asyncio
    async def test_connect_failure_raises_unavailable(self) -> None:
        db = Database("postgresql://localhost:1/nowhere", min_size=1, max_size=1)

        with patch(
            "release_timeline.storage.database.asyncpg.create_pool",
            AsyncMock(side_effect=ConnectionRefusedError("connection refused")),
        ):
            with pytest.raises(DatabaseUnavailable, match="connection refused"):
                await db.connect()

        assert not db.is_connected

    @pytest.mark.asyncio
    async def test_connect_and_close(self) -> None:
        pool = AsyncMock()
        db = Database("postgresql://localhost/test", min_size=1, max_size=2)

        with patch(
            "release_timeline.storage.database.asyncpg.create_pool",
            AsyncMock(return_value=pool),
        ) as create_pool:
            async with db:
                assert db.is_connected
                assert db.pool is pool

        create_pool.assert_awaited_once()
        assert create_pool.call_args.kwargs["max_size"] == 2
        pool.close.assert_awaited_once()
        assert not db.is_connected

    def test_pool_before_connect(self) -> None:
        db = Database("postgresql://localhost/test")

        with pytest.raises(RuntimeError):
            _ = db.pool

    @pytest.mark.asyncio
    async def test_health_check_without_pool(self) -> None:
        db = Database("postgresql://localhost/test")

        assert await db.health_check() is False

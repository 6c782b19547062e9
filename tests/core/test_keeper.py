"""Tests for the ``Keeper`` facade."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from keeper.core.keeper import Keeper
from keeper.core.records import RecordEngine
from keeper.core.settings import KeeperSettings
from keeper.core.users import UserRepository


class TestKeeper:
    def test_wires_repositories(self, db):
        keeper = Keeper(db)

        assert keeper.db is db
        assert isinstance(keeper.users, UserRepository)
        assert isinstance(keeper.records, RecordEngine)

    @pytest.mark.asyncio
    async def test_open_with_injected_pool_leaves_it_open(self, pool, settings):
        async with Keeper.open(settings, pool=pool) as keeper:
            assert keeper.db.injected

        pool.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_open_closes_owned_pool(self, pool):
        settings = KeeperSettings(_env_file=None, dsn="postgresql://localhost/keeper")

        with patch(
            "keeper.core.database.asyncpg.create_pool",
            new_callable=AsyncMock,
            return_value=pool,
        ), patch("keeper.core.database.Database._migrate_on_startup", new_callable=AsyncMock):
            async with Keeper.open(settings) as keeper:
                assert keeper.db.is_connected

        pool.close.assert_awaited_once()

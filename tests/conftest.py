"""
Shared pytest fixtures for keeper tests.

The asyncpg pool is replaced by a ``MagicMock`` whose ``acquire()`` yields
one ``conn`` mock, so tests can assert on the exact SQL text and bound
values the engine sends.
"""

from __future__ import annotations

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from keeper.core.database import Database
from keeper.core.settings import KeeperSettings


@pytest.fixture(autouse=True)
def _clean_keeper_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer KEEPER_* variables out of unit tests."""
    for key in list(os.environ):
        if key.startswith("KEEPER_") and key != "KEEPER_TEST_DSN":
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def settings() -> KeeperSettings:
    return KeeperSettings(_env_file=None)


@pytest.fixture()
def conn() -> MagicMock:
    """A pooled connection with asyncpg-like coroutine methods."""
    c = MagicMock()
    c.execute = AsyncMock(return_value="UPDATE 1")
    c.fetch = AsyncMock(return_value=[])
    c.fetchval = AsyncMock(return_value=None)
    return c


@pytest.fixture()
def pool(conn: MagicMock) -> MagicMock:
    p = MagicMock()
    p.acquire.return_value.__aenter__ = AsyncMock(return_value=conn)
    p.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    p.close = AsyncMock()
    return p


@pytest.fixture()
def db(pool: MagicMock, settings: KeeperSettings) -> Database:
    return Database(pool, settings=settings)

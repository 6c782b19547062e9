"""Keeper facade - one object wiring the database, users and records.

Usage::

    async with Keeper.open() as keeper:          # settings from KEEPER_* env
        user_id = await keeper.users.get_user_id("alice")
        rows = await keeper.records.get_all_records("TextData", user_id)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from keeper.core.database import Database
from keeper.core.records import RecordEngine
from keeper.core.settings import KeeperSettings
from keeper.core.users import UserRepository


class Keeper:
    """Bundle of the repositories sharing one ``Database``."""

    def __init__(self, db: Database) -> None:
        self.db = db
        self.users = UserRepository(db)
        self.records = RecordEngine(db)

    @classmethod
    @asynccontextmanager
    async def open(
        cls,
        settings: KeeperSettings | None = None,
        *,
        pool: Any = None,
    ) -> AsyncIterator[Keeper]:
        """Connect, yield a ``Keeper`` and close the pool on exit.

        An injected *pool* stays open; its owner closes it.
        """
        db = await Database.connect(pool=pool, settings=settings)
        try:
            yield cls(db)
        finally:
            if not db.injected:
                await db.close()


__all__ = ["Keeper"]

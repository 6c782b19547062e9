"""Tests for ``keeper.core.users``."""

from __future__ import annotations

import asyncpg
import pytest

from keeper.core.errors import IntegrityError, NotFoundError
from keeper.core.users import UserRepository


@pytest.fixture()
def users(db) -> UserRepository:
    return UserRepository(db)


class TestUserExists:
    @pytest.mark.asyncio
    async def test_exists(self, users, conn):
        conn.fetchval.return_value = True

        assert await users.user_exists("alice") is True
        conn.fetchval.assert_awaited_once_with(
            "SELECT EXISTS (SELECT 1 FROM Users WHERE username = $1)", "alice"
        )

    @pytest.mark.asyncio
    async def test_absent(self, users, conn):
        conn.fetchval.return_value = False
        assert await users.user_exists("nobody") is False


class TestLookups:
    @pytest.mark.asyncio
    async def test_get_user_id(self, users, conn):
        conn.fetchval.return_value = 42

        assert await users.get_user_id("alice") == 42
        conn.fetchval.assert_awaited_once_with("SELECT id FROM Users WHERE username = $1", "alice")

    @pytest.mark.asyncio
    async def test_get_user_id_missing(self, users, conn):
        conn.fetchval.return_value = None

        with pytest.raises(NotFoundError, match="nobody") as exc_info:
            await users.get_user_id("nobody")

        assert exc_info.value.context.operation == "get_user_id"

    @pytest.mark.asyncio
    async def test_get_password_hash(self, users, conn):
        conn.fetchval.return_value = "h1"
        assert await users.get_password_hash("alice") == "h1"

    @pytest.mark.asyncio
    async def test_get_password_hash_missing(self, users, conn):
        conn.fetchval.return_value = None
        with pytest.raises(NotFoundError):
            await users.get_password_hash("nobody")


class TestAddUser:
    @pytest.mark.asyncio
    async def test_returns_new_id(self, users, conn):
        conn.fetchval.return_value = 7

        assert await users.add_user("alice", "h1") == 7
        conn.fetchval.assert_awaited_once_with(
            "INSERT INTO Users (username, password_hash) VALUES ($1, $2) RETURNING id",
            "alice",
            "h1",
        )

    @pytest.mark.asyncio
    async def test_duplicate_username(self, users, conn):
        conn.fetchval.side_effect = asyncpg.UniqueViolationError("duplicate key value")

        with pytest.raises(IntegrityError) as exc_info:
            await users.add_user("alice", "h2")

        assert exc_info.value.context.operation == "add_user"

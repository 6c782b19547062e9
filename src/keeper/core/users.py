"""User repository - lookups over the ``Users`` table.

Users are created by the registration flow (which also hashes the
password) and only read afterwards: the sync engine needs the numeric id to
scope every record operation.

Tags:
    keeper, repository, users
"""

from __future__ import annotations

from keeper.core.database import Database
from keeper.core.errors import NotFoundError
from keeper.core.logging import get_logger

logger = get_logger(__name__)


class UserRepository:
    """Read/insert access to ``Users``."""

    TABLE = "Users"

    def __init__(self, db: Database) -> None:
        self._db = db

    async def user_exists(self, username: str, *, timeout: float | None = None) -> bool:
        """True iff a user with *username* exists."""
        async with self._db.session("user_exists", timeout=timeout) as conn:
            return bool(
                await conn.fetchval(
                    f"SELECT EXISTS (SELECT 1 FROM {self.TABLE} WHERE username = $1)",
                    username,
                )
            )

    async def get_user_id(self, username: str, *, timeout: float | None = None) -> int:
        """Return the id of *username*; ``NotFoundError`` if there is none."""
        async with self._db.session("get_user_id", timeout=timeout) as conn:
            user_id = await conn.fetchval(
                f"SELECT id FROM {self.TABLE} WHERE username = $1", username
            )
        if user_id is None:
            raise NotFoundError(f"User not found: {username}").with_context(
                operation="get_user_id"
            )
        return user_id

    async def get_password_hash(self, username: str, *, timeout: float | None = None) -> str:
        """Return the stored password hash; ``NotFoundError`` if there is none."""
        async with self._db.session("get_password_hash", timeout=timeout) as conn:
            password_hash = await conn.fetchval(
                f"SELECT password_hash FROM {self.TABLE} WHERE username = $1", username
            )
        if password_hash is None:
            raise NotFoundError(f"User not found: {username}").with_context(
                operation="get_password_hash"
            )
        return password_hash

    async def add_user(
        self,
        username: str,
        password_hash: str,
        *,
        timeout: float | None = None,
    ) -> int:
        """Insert a user and return its id.

        A duplicate *username* raises ``IntegrityError`` and leaves the
        existing row untouched.
        """
        async with self._db.session("add_user", timeout=timeout) as conn:
            user_id = await conn.fetchval(
                f"INSERT INTO {self.TABLE} (username, password_hash) VALUES ($1, $2) RETURNING id",
                username,
                password_hash,
            )
        logger.info("users.added", user_id=user_id)
        return user_id


__all__ = ["UserRepository"]

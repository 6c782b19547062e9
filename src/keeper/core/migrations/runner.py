"""SQL migration runner.

Reads ``NNNNNN_name.up.sql`` files from a migrations directory, tracks
applied versions in the ``schema_migrations`` table, and applies pending ones
in version order. ``.down.sql`` files are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from keeper.core.errors import MigrationError
from keeper.core.logging import get_logger

logger = get_logger(__name__)

# Bundled schema directory - adjacent to this module's parent
_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schema"

_FILENAME_RE = re.compile(r"^(?P<version>\d+)_(?P<name>.+)\.up\.sql$")

# Arbitrary constant shared by every keeper process; serializes startup migrations.
_ADVISORY_LOCK_KEY = 0x6B656570


@dataclass(frozen=True)
class Migration:
    """One discovered ``.up.sql`` file."""

    version: int
    name: str
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass
class MigrationResult:
    """Result of a migration run."""

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0


class MigrationRunner:
    """Applies SQL migrations from a directory over an asyncpg connection.

    Parameters
    ----------
    conn
        An ``asyncpg.Connection`` (usually acquired from the pool).
    migrations_dir
        Directory containing versioned ``.up.sql`` files.
        Defaults to ``keeper/core/schema/``.

    Example::

        async with pool.acquire() as conn:
            runner = MigrationRunner(conn)
            result = await runner.apply_pending()
            print(f"Applied {len(result.applied)} migrations")
    """

    def __init__(self, conn: Any, migrations_dir: Path | str | None = None) -> None:
        self._conn = conn
        self._dir = Path(migrations_dir) if migrations_dir else _SCHEMA_DIR

    @property
    def migrations_dir(self) -> Path:
        return self._dir

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def discover(self) -> list[Migration]:
        """Return migrations found in the directory, sorted by version.

        Raises ``MigrationError`` if the directory does not exist or two
        files share a version number.
        """
        if not self._dir.is_dir():
            raise MigrationError(f"Migrations directory not found: {self._dir}")

        found: dict[int, Migration] = {}
        for path in self._dir.iterdir():
            match = _FILENAME_RE.match(path.name)
            if match is None:
                continue
            version = int(match.group("version"))
            if version in found:
                raise MigrationError(
                    f"Duplicate migration version {version}: "
                    f"{found[version].filename} and {path.name}"
                )
            found[version] = Migration(version=version, name=match.group("name"), path=path)
        return [found[v] for v in sorted(found)]

    async def get_applied(self) -> set[int]:
        """Return the set of already-applied versions.

        Read-only: a store without ``schema_migrations`` has none applied.
        """
        if await self._conn.fetchval("SELECT to_regclass('schema_migrations')") is None:
            return set()
        rows = await self._conn.fetch("SELECT version FROM schema_migrations ORDER BY version")
        return {row["version"] for row in rows}

    async def get_pending(self) -> list[Migration]:
        """Return migrations not yet applied, in version order."""
        applied = await self.get_applied()
        return [m for m in self.discover() if m.version not in applied]

    async def apply_pending(self) -> MigrationResult:
        """Apply all pending migrations in version order.

        Each file runs in its own transaction together with its
        bookkeeping row. Stops at the first failure.
        """
        result = MigrationResult()
        migrations = self.discover()

        await self._conn.execute("SELECT pg_advisory_lock($1)", _ADVISORY_LOCK_KEY)
        try:
            await self._ensure_migrations_table()
            applied = await self.get_applied()
            for migration in migrations:
                if migration.version in applied:
                    result.skipped.append(migration.filename)
                    continue

                try:
                    sql = migration.path.read_text(encoding="utf-8")
                    async with self._conn.transaction():
                        await self._conn.execute(sql)
                        await self._conn.execute(
                            "INSERT INTO schema_migrations (version, name) VALUES ($1, $2)",
                            migration.version,
                            migration.name,
                        )
                except Exception as exc:
                    result.errors[migration.filename] = str(exc)
                    logger.error("migration.failed", migration=migration.filename, error=str(exc))
                    break
                result.applied.append(migration.filename)
                logger.info("migration.applied", migration=migration.filename)
        finally:
            await self._conn.execute("SELECT pg_advisory_unlock($1)", _ADVISORY_LOCK_KEY)

        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _ensure_migrations_table(self) -> None:
        await self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version BIGINT PRIMARY KEY,
                name TEXT NOT NULL,
                applied_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

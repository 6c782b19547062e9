"""Generic record engine.

One implementation serves every allow-listed record table: typed inserts,
partial updates, soft deletes and incremental reads for a user's
synchronized items.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                         RecordEngine                               │
    │                                                                    │
    │   resolve_shape(table)    ← keeper.core.tables allow-list          │
    │   db.session(op, timeout) ← keeper.core.database                   │
    │                                                                    │
    │   add_record(...)         INSERT  ... VALUES ($1, $2, ...)         │
    │   update_record(...)      UPDATE  ... SET k = $1 ... WHERE ...     │
    │   delete_record(...)      UPDATE  ... SET deleted = TRUE ...       │
    │   get_all_records(...)    catalog lookup + SELECT ... WHERE ...    │
    └────────────────────────────────────────────────────────────────────┘

Identifiers in statement text come only from ``RecordShape``; values are
always bound positionally.

Usage:
    >>> engine = RecordEngine(db)
    >>> await engine.add_record("TextData", 1, "e1", {"data": "secret"})
    >>> await engine.get_all_records("TextData", 1)
    [{'id': 'e1', 'user_id': '1', 'data': 'secret', 'meta_info': None, ...}]

Tags:
    repository, records, sync, soft-delete, keeper
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from keeper.core.database import Database
from keeper.core.errors import InvalidArgumentError, SchemaMismatchError
from keeper.core.logging import get_logger
from keeper.core.tables import CONVENTION_COLUMNS, RecordKind, RecordShape, resolve_shape
from keeper.core.timestamps import ensure_utc, to_rfc3339

logger = get_logger(__name__)

Record = dict[str, str | None]

_COLUMNS_QUERY = (
    "SELECT column_name FROM information_schema.columns "
    "WHERE table_schema = current_schema() AND table_name = $1 "
    "ORDER BY ordinal_position"
)

# Stamped on the server clock, as the column default is; strictly increasing per row.
_BUMP_UPDATED_AT = "updated_at = GREATEST(clock_timestamp(), updated_at + INTERVAL '1 microsecond')"


def affected_rows(status: str) -> int:
    """Parse the row count out of a command tag such as ``UPDATE 3``."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


def encode_value(value: Any) -> str:
    """Render a column value as the string callers see."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return to_rfc3339(value)
    return str(value)


def _require_entry_id(entry_id: str) -> None:
    if not entry_id:
        raise InvalidArgumentError("entry_id must be specified", field="entry_id")


class RecordEngine:
    """Schema-driven CRUD over the record tables.

    Stateless apart from the ``Database`` it was given, so one instance can
    be shared by any number of concurrent tasks.

    Parameters:
        db: Connected ``Database``.
        null_as_empty: Return SQL NULL as ``""`` instead of ``None``.
            Defaults to ``db.settings.null_as_empty``.
    """

    def __init__(self, db: Database, *, null_as_empty: bool | None = None) -> None:
        self._db = db
        self._null_as_empty = (
            db.settings.null_as_empty if null_as_empty is None else null_as_empty
        )

    async def add_record(
        self,
        table: str | RecordKind,
        user_id: int,
        entry_id: str,
        fields: Mapping[str, str | None],
        *,
        timeout: float | None = None,
    ) -> None:
        """Insert a new record owned by *user_id*.

        Raises ``IntegrityError`` if *entry_id* already exists or *user_id*
        does not reference a user.
        """
        shape = resolve_shape(table)
        _require_entry_id(entry_id)
        shape.check_fields(fields)
        shape.check_required(fields)

        columns = ["user_id", "id", *fields.keys()]
        values: list[Any] = [user_id, entry_id, *fields.values()]
        placeholders = ", ".join(f"${i}" for i in range(1, len(values) + 1))
        sql = f"INSERT INTO {shape.table} ({', '.join(columns)}) VALUES ({placeholders})"

        async with self._db.session("add_record", timeout=timeout) as conn:
            await conn.execute(sql, *values)

        logger.info("records.added", table=shape.table, user_id=user_id, entry_id=entry_id)

    async def update_record(
        self,
        table: str | RecordKind,
        user_id: int,
        entry_id: str,
        fields: Mapping[str, str | None],
        *,
        timeout: float | None = None,
    ) -> int:
        """Overwrite the given fields of one record and bump ``updated_at``.

        Returns the number of rows changed; 0 means no record matched
        ``(user_id, entry_id)``.
        """
        shape = resolve_shape(table)
        _require_entry_id(entry_id)
        if not fields:
            raise InvalidArgumentError("no fields to update", field="fields").with_context(
                table=shape.table, entry_id=entry_id
            )
        shape.check_fields(fields)

        assignments = [f"{key} = ${i}" for i, key in enumerate(fields.keys(), start=1)]
        values: list[Any] = list(fields.values())
        n = len(values)
        assignments.append(_BUMP_UPDATED_AT)
        values += [user_id, entry_id]

        sql = (
            f"UPDATE {shape.table} SET {', '.join(assignments)} "
            f"WHERE user_id = ${n + 1} AND id = ${n + 2}"
        )

        async with self._db.session("update_record", timeout=timeout) as conn:
            status = await conn.execute(sql, *values)

        count = affected_rows(status)
        logger.info(
            "records.updated",
            table=shape.table,
            user_id=user_id,
            entry_id=entry_id,
            affected=count,
        )
        return count

    async def delete_record(
        self,
        table: str | RecordKind,
        user_id: int,
        entry_id: str,
        *,
        timeout: float | None = None,
    ) -> int:
        """Soft-delete one record: set ``deleted`` and bump ``updated_at``.

        The row is kept. Returns the number of rows flagged (0 if nothing
        matched, which is not an error).
        """
        if not user_id or not table:
            raise InvalidArgumentError("user_id and table must be specified")
        _require_entry_id(entry_id)
        shape = resolve_shape(table)

        sql = (
            f"UPDATE {shape.table} SET deleted = TRUE, {_BUMP_UPDATED_AT} "
            "WHERE user_id = $1 AND id = $2"
        )

        async with self._db.session("delete_record", timeout=timeout) as conn:
            status = await conn.execute(sql, user_id, entry_id)

        count = affected_rows(status)
        logger.info(
            "records.deleted",
            table=shape.table,
            user_id=user_id,
            entry_id=entry_id,
            affected=count,
        )
        return count

    async def get_all_records(
        self,
        table: str | RecordKind,
        user_id: int,
        since: datetime | None = None,
        include_deleted: bool = False,
        *,
        timeout: float | None = None,
    ) -> list[Record]:
        """Read every record of *user_id* in *table*.

        Columns are discovered from the live catalog, so columns added by a
        later migration are returned without code changes.

        Args:
            since: Only return records with ``updated_at`` strictly after it.
            include_deleted: Also return soft-deleted records.
        """
        shape = resolve_shape(table)

        async with self._db.session("get_all_records", timeout=timeout) as conn:
            columns = await self._introspect(conn, shape)

            conditions = ["user_id = $1"]
            params: list[Any] = [user_id]
            if not include_deleted:
                conditions.append("deleted = FALSE")
            if since is not None:
                params.append(ensure_utc(since))
                conditions.append(f"updated_at > ${len(params)}")

            sql = (
                f"SELECT {', '.join(columns)} FROM {shape.table} "
                f"WHERE {' AND '.join(conditions)} ORDER BY updated_at, id"
            )
            rows = await conn.fetch(sql, *params)

        records = [self._decode(row, columns) for row in rows]
        logger.debug(
            "records.read",
            table=shape.table,
            user_id=user_id,
            count=len(records),
            since=to_rfc3339(since) if since is not None else None,
        )
        return records

    # -- Internal helpers --------------------------------------------------

    async def _introspect(self, conn: Any, shape: RecordShape) -> list[str]:
        rows = await conn.fetch(_COLUMNS_QUERY, shape.catalog_name)
        columns = [row["column_name"] for row in rows]
        missing = sorted(CONVENTION_COLUMNS.difference(columns))
        if missing:
            raise SchemaMismatchError(shape.table, missing).with_context(
                operation="get_all_records", table=shape.table
            )
        return columns

    def _decode(self, row: Any, columns: list[str]) -> Record:
        record: Record = {}
        for column in columns:
            value = row[column]
            if value is None:
                record[column] = "" if self._null_as_empty else None
            else:
                record[column] = encode_value(value)
        return record


__all__ = [
    "Record",
    "RecordEngine",
    "affected_rows",
    "encode_value",
]

"""
Record table allow-list.

The record engine interpolates table and column names into statement text,
so those identifiers must come from code, never from a request. This module
is the single place they are declared: a closed ``RecordKind`` enum and one
``RecordShape`` per kind.

Every record table follows the same convention::

    id          TEXT PRIMARY KEY      -- caller supplied
    user_id     INTEGER NOT NULL      -- FK to users(id)
    <fields>    TEXT                  -- shape-specific
    updated_at  TIMESTAMPTZ NOT NULL  -- server assigned
    deleted     BOOLEAN NOT NULL      -- soft delete flag

Examples:
    >>> shape = resolve_shape("TextData")
    >>> shape.fields
    ('data', 'meta_info')
    >>> shape.check_fields({"data": "secret"})

Tags:
    allow-list, schema, record-shapes, keeper
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from keeper.core.errors import InvalidArgumentError

# Columns every record table carries and the engine manages itself.
KEY_COLUMNS: tuple[str, ...] = ("id", "user_id")
SYSTEM_COLUMNS: tuple[str, ...] = ("updated_at", "deleted")
CONVENTION_COLUMNS: frozenset[str] = frozenset(KEY_COLUMNS + SYSTEM_COLUMNS)


class RecordKind(str, Enum):
    """Kinds of synchronized items a user can store."""

    CREDENTIALS = "Credentials"
    CARD = "CardData"
    TEXT = "TextData"
    BINARY = "BinaryData"


@dataclass(frozen=True, slots=True)
class RecordShape:
    """Table name plus the domain columns callers may write."""

    kind: RecordKind
    fields: tuple[str, ...]
    required: tuple[str, ...] = ()

    @property
    def table(self) -> str:
        """Table identifier as it appears in statement text."""
        return self.kind.value

    @property
    def catalog_name(self) -> str:
        """Table name as stored in the catalog (unquoted identifiers fold to lower case)."""
        return self.kind.value.lower()

    @property
    def columns(self) -> tuple[str, ...]:
        """Full column convention, in declaration order."""
        return KEY_COLUMNS + self.fields + SYSTEM_COLUMNS

    def check_fields(self, fields: Mapping[str, str | None]) -> None:
        """Reject keys outside this shape and values that are not strings."""
        for key, value in fields.items():
            if key not in self.fields:
                raise InvalidArgumentError(
                    f"Column {key!r} is not writable on {self.table}",
                    field=key,
                ).with_context(table=self.table)
            if value is not None and not isinstance(value, str):
                raise InvalidArgumentError(
                    f"Value for {key!r} must be a string, got {type(value).__name__}",
                    field=key,
                ).with_context(table=self.table)

    def check_required(self, fields: Mapping[str, str | None]) -> None:
        """Reject inserts that leave a NOT NULL domain column empty."""
        missing = [name for name in self.required if fields.get(name) is None]
        if missing:
            raise InvalidArgumentError(
                f"Missing required columns for {self.table}: {', '.join(missing)}",
                field=missing[0],
            ).with_context(table=self.table)


SHAPES: dict[RecordKind, RecordShape] = {
    RecordKind.CREDENTIALS: RecordShape(
        RecordKind.CREDENTIALS,
        fields=("login", "password", "meta_info"),
        required=("login", "password"),
    ),
    RecordKind.CARD: RecordShape(
        RecordKind.CARD,
        fields=("number", "holder", "expiry", "cvv", "meta_info"),
        required=("number",),
    ),
    RecordKind.TEXT: RecordShape(
        RecordKind.TEXT,
        fields=("data", "meta_info"),
        required=("data",),
    ),
    RecordKind.BINARY: RecordShape(
        RecordKind.BINARY,
        fields=("data", "meta_info"),
        required=("data",),
    ),
}

_BY_NAME: dict[str, RecordShape] = {shape.catalog_name: shape for shape in SHAPES.values()}


def resolve_shape(table: str | RecordKind) -> RecordShape:
    """Look up the shape for *table*.

    Accepts a ``RecordKind`` or a table name in any letter case. Raises
    ``InvalidArgumentError`` for anything outside the allow-list.
    """
    if isinstance(table, RecordKind):
        return SHAPES[table]
    if not table:
        raise InvalidArgumentError("table must be specified", field="table")
    shape = _BY_NAME.get(table.lower())
    if shape is None:
        raise InvalidArgumentError(f"Unknown record table: {table!r}", field="table", value=table)
    return shape


__all__ = [
    "CONVENTION_COLUMNS",
    "RecordKind",
    "RecordShape",
    "SHAPES",
    "resolve_shape",
]

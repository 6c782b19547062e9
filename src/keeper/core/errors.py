"""
Structured error types for keeper.

Every failure that crosses the persistence boundary is raised as a
``KeeperError`` subclass. Callers (the sync service layer) decide what to
retry from ``retryable``; they never have to inspect driver exceptions.

Manifesto:
    - **Typed taxonomy:** One class per failure kind the caller can act on
    - **Explicit retry semantics:** Connection and deadline errors are
      retryable, everything else is not
    - **Operation context:** Store errors carry the failing operation name
    - **Error chaining:** The original driver exception is kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                         KeeperError                              │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  TransientError           ValidationError      ConfigError       │
        │  (retryable=True)         (VALIDATION)         (CONFIG)          │
        │       │                        │                                 │
        │  DatabaseConnectionError  InvalidArgumentError                   │
        │  OperationTimeoutError                                           │
        │                                                                  │
        │  DatabaseError            NotFoundError                          │
        │  (DATABASE)               (NOT_FOUND)                            │
        │       │                                                          │
        │  QueryError ── SchemaMismatchError                               │
        │  IntegrityError                                                  │
        │  MigrationError                                                  │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = DatabaseConnectionError("pool exhausted")
    >>> error.retryable
    True

    >>> err = QueryError("add_record failed").with_context(operation="add_record")
    >>> err.context.operation
    'add_record'

Guardrails:
    ❌ DON'T: Let asyncpg exceptions escape to callers
    ✅ DO: Translate them with ``keeper.core.database.translate_error``

    ❌ DON'T: Retry inside this layer
    ✅ DO: Leave retry policy to the caller, guided by ``retryable``

Tags:
    error-handling, exception-hierarchy, retry-logic, keeper
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    # Infrastructure errors (usually transient)
    NETWORK = "NETWORK"           # Connection refused, deadline exceeded
    DATABASE = "DATABASE"         # Statement execution, integrity

    # Caller errors
    VALIDATION = "VALIDATION"     # Identifier checks before I/O
    NOT_FOUND = "NOT_FOUND"       # Lookup yielded no row

    # Configuration errors (never retryable)
    CONFIG = "CONFIG"             # Missing DSN, invalid settings

    # Internal errors
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        operation: Engine operation that failed (``add_record``, ``ping``...)
        table: Table the operation targeted, if any
        user_id: Owning user, if any
        entry_id: Record id, if any
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    table: str | None = None
    user_id: int | None = None
    entry_id: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "table", "user_id", "entry_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class KeeperError(Exception):
    """
    Base exception for all keeper errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that a
    bare ``raise QueryError("...")`` already carries the right semantics.

    Examples:
        >>> error = KeeperError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> KeeperError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("insert failed").with_context(
                operation="add_record",
                table="textdata",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS (Retryable by the caller)
# =============================================================================


class TransientError(KeeperError):
    """
    Temporary error that may succeed on retry.

    keeper never retries on its own; the caller should back off and try
    again.
    """

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class DatabaseConnectionError(TransientError):
    """Could not reach the store or the pool is not usable."""

    default_category = ErrorCategory.NETWORK


class OperationTimeoutError(TransientError):
    """The operation's deadline expired before the statement completed."""

    default_category = ErrorCategory.NETWORK


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(KeeperError):
    """
    Caller-supplied input failed a check.

    Never retryable - the input must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class InvalidArgumentError(ValidationError):
    """An identifier or field failed required checks before any I/O."""

    pass


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(KeeperError):
    """
    Configuration error.

    Fatal at startup - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class NotFoundError(KeeperError):
    """
    A lookup yielded no row.

    Only raised by single-row lookups. Mutations that match zero rows
    report an affected count of 0 instead.
    """

    default_category = ErrorCategory.NOT_FOUND
    default_retryable = False


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(KeeperError):
    """Store-reported error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class QueryError(DatabaseError):
    """Statement execution failed."""

    pass


class SchemaMismatchError(QueryError):
    """A table does not follow the record column convention."""

    def __init__(self, table: str, missing: list[str], message: str | None = None):
        self.table = table
        self.missing = missing
        super().__init__(
            message or f"Table {table} is missing required columns: {', '.join(missing)}"
        )


class IntegrityError(DatabaseError):
    """Uniqueness or foreign-key violation reported by the store."""

    pass


class MigrationError(DatabaseError):
    """A schema migration could not be discovered or applied."""

    pass


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, KeeperError):
        return error.retryable
    return isinstance(error, (ConnectionError, OSError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "KeeperError",
    # Transient
    "TransientError",
    "DatabaseConnectionError",
    "OperationTimeoutError",
    # Validation
    "ValidationError",
    "InvalidArgumentError",
    # Config
    "ConfigError",
    # Lookup
    "NotFoundError",
    # Database
    "DatabaseError",
    "QueryError",
    "SchemaMismatchError",
    "IntegrityError",
    "MigrationError",
    # Utilities
    "is_retryable",
]

"""
keeper.core - async PostgreSQL persistence for synchronized user records.

Modules
-------
database     Database: pool ownership, ping/close, scoped sessions
records      RecordEngine: add/update/soft-delete/incremental read
users        UserRepository: user lookups and registration insert
tables       RecordKind/RecordShape allow-list of record tables
migrations   MigrationRunner for the bundled ``schema/`` directory
settings     KeeperSettings (KEEPER_* environment)
errors       KeeperError hierarchy
logging      structlog configuration
timestamps   UTC / RFC 3339 helpers
keeper       Keeper facade
"""

from keeper.core.database import Database
from keeper.core.errors import (
    ConfigError,
    DatabaseConnectionError,
    IntegrityError,
    InvalidArgumentError,
    KeeperError,
    MigrationError,
    NotFoundError,
    OperationTimeoutError,
    QueryError,
    SchemaMismatchError,
)
from keeper.core.keeper import Keeper
from keeper.core.records import Record, RecordEngine
from keeper.core.settings import KeeperSettings, MigrationPolicy
from keeper.core.tables import RecordKind, RecordShape, resolve_shape
from keeper.core.users import UserRepository

__all__ = [
    "Database",
    "Keeper",
    "KeeperSettings",
    "MigrationPolicy",
    "Record",
    "RecordEngine",
    "RecordKind",
    "RecordShape",
    "UserRepository",
    "resolve_shape",
    # errors
    "ConfigError",
    "DatabaseConnectionError",
    "IntegrityError",
    "InvalidArgumentError",
    "KeeperError",
    "MigrationError",
    "NotFoundError",
    "OperationTimeoutError",
    "QueryError",
    "SchemaMismatchError",
]

"""Schema migration runner for keeper.

Applies versioned ``.up.sql`` files from ``core/schema/`` (or a configured
directory) exactly once, tracking them in ``schema_migrations``.

Modules
-------
runner    MigrationRunner class with discover() / get_pending() / apply_pending()

Tags:
    keeper, migrations, schema, database, DDL
"""

from keeper.core.migrations.runner import Migration, MigrationResult, MigrationRunner

__all__ = ["Migration", "MigrationResult", "MigrationRunner"]

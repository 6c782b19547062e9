"""
Keeper - persistence layer for a multi-user data-synchronization service.

- keeper.core: lifecycle manager, record engine, user lookups, migrations
- keeper.cli: ``keeper`` console script
"""

__version__ = "0.1.0"

"""Tests for ``keeper.core.settings``."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from keeper.core.settings import KeeperSettings, MigrationPolicy, normalize_database_url


class TestKeeperSettings:
    def test_defaults(self, settings):
        assert settings.dsn == ""
        assert settings.migrations_dir is None
        assert settings.migration_policy is MigrationPolicy.BEST_EFFORT
        assert (settings.pool_min_size, settings.pool_max_size) == (1, 10)
        assert settings.ping_timeout == 1.0
        assert settings.null_as_empty is False
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("KEEPER_DSN", "postgresql://localhost/keeper")
        monkeypatch.setenv("KEEPER_MIGRATION_POLICY", "fail_fast")
        monkeypatch.setenv("KEEPER_MIGRATIONS_DIR", "/srv/keeper/migrations")
        monkeypatch.setenv("KEEPER_NULL_AS_EMPTY", "true")
        monkeypatch.setenv("KEEPER_LOG_LEVEL", "debug")

        settings = KeeperSettings(_env_file=None)

        assert settings.dsn == "postgresql://localhost/keeper"
        assert settings.migration_policy is MigrationPolicy.FAIL_FAST
        assert settings.migrations_dir == Path("/srv/keeper/migrations")
        assert settings.null_as_empty is True
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError, match="log_level"):
            KeeperSettings(_env_file=None, log_level="LOUD")

    def test_invalid_policy(self):
        with pytest.raises(ValidationError):
            KeeperSettings(_env_file=None, migration_policy="sometimes")

    def test_pool_bounds(self):
        with pytest.raises(ValidationError, match="pool_min_size"):
            KeeperSettings(_env_file=None, pool_min_size=5, pool_max_size=2)

    def test_timeouts_must_be_positive(self):
        with pytest.raises(ValidationError):
            KeeperSettings(_env_file=None, ping_timeout=0)


class TestNormalizeDatabaseUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("postgresql+asyncpg://u:p@h/db", "postgresql://u:p@h/db"),
            ("postgres+psycopg://h/db", "postgres://h/db"),
            ("postgresql://h/db?sslmode=require", "postgresql://h/db"),
            ("postgresql://h/db?sslmode=require&application_name=k", "postgresql://h/db?application_name=k"),
            ("postgresql://h/db?application_name=k&sslmode=disable", "postgresql://h/db?application_name=k"),
            ("  postgresql://h/db  ", "postgresql://h/db"),
        ],
    )
    def test_normalize(self, url, expected):
        assert normalize_database_url(url) == expected

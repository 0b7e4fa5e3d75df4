"""Tests for pooled database connections."""

from unittest.mock import MagicMock, patch

import pytest
from psycopg.conninfo import conninfo_to_dict

from problembank.db.connection import (
    DatabaseConfig,
    close_connection_pool,
    get_connection,
    get_connection_pool,
)


@pytest.fixture
def pool_class():
    with patch("problembank.db.connection.ConnectionPool") as pool_class:
        pool_class.side_effect = lambda *args, **kwargs: MagicMock()
        yield pool_class
        close_connection_pool()


class TestDatabaseConfig:
    def test_defaults(self):
        db = DatabaseConfig({})

        params = conninfo_to_dict(db.conninfo)
        assert params["host"] == "localhost"
        assert params["port"] == "5432"
        assert params["dbname"] == "problembank"
        assert params["user"] == "problembank_user"
        assert "password" not in params

    def test_explicit_password_wins_over_environment(self, monkeypatch):
        monkeypatch.setenv("PB_TEST_PASSWORD", "from-env")

        db = DatabaseConfig({"password": "explicit", "password_env": "PB_TEST_PASSWORD"})

        assert db.password == "explicit"

    def test_password_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("PB_TEST_PASSWORD", "from-env")

        db = DatabaseConfig({"password": None, "password_env": "PB_TEST_PASSWORD"})

        assert db.password == "from-env"

    def test_unset_environment_variable_means_no_password(self, monkeypatch):
        monkeypatch.delenv("PB_TEST_PASSWORD", raising=False)

        db = DatabaseConfig({"password_env": "PB_TEST_PASSWORD"})

        assert db.password == ""

    def test_special_characters_survive_in_conninfo(self):
        db = DatabaseConfig({"password": "p@ss:w/rd 'quoted'", "database": "bank"})

        params = conninfo_to_dict(db.conninfo)
        assert params["password"] == "p@ss:w/rd 'quoted'"
        assert params["dbname"] == "bank"

    def test_describe_hides_password(self):
        db = DatabaseConfig({"password": "secret", "host": "db.internal"})

        assert "secret" not in db.describe()
        assert db.describe() == "problembank_user@db.internal:5432/problembank"

    def test_pool_max_never_below_min(self):
        db = DatabaseConfig({"pool_min_size": 4, "pool_max_size": 2})

        assert db.pool_min_size == 4
        assert db.pool_max_size == 4


class TestConnectionPool:
    def test_pool_reused_for_same_settings(self, pool_class):
        first = get_connection_pool({"host": "a"})
        second = get_connection_pool({"host": "a"})

        assert first is second
        assert pool_class.call_count == 1

    def test_pool_sized_from_config(self, pool_class):
        get_connection_pool({"pool_min_size": 2, "pool_max_size": 5})

        kwargs = pool_class.call_args.kwargs
        assert kwargs["min_size"] == 2
        assert kwargs["max_size"] == 5

    def test_changed_settings_reopen_pool(self, pool_class):
        first = get_connection_pool({"host": "a"})
        second = get_connection_pool({"host": "b"})

        assert first is not second
        first.close.assert_called_once()
        assert pool_class.call_count == 2

    def test_close_is_idempotent(self, pool_class):
        pool = get_connection_pool({})

        close_connection_pool()
        close_connection_pool()

        pool.close.assert_called_once()

    def test_get_connection_borrows_from_pool(self, pool_class):
        with get_connection({}) as conn:
            pool = get_connection_pool({})
            assert conn is pool.connection.return_value.__enter__.return_value

        pool.connection.return_value.__exit__.assert_called_once()

"""Integration tests for database configuration."""

from pathlib import Path

import pytest

from sqlbridge import Connection, DatabaseConfig
from sqlbridge.exceptions import ImproperConfigurationError

pytestmark = pytest.mark.xdist_group("sqlite")


def test_default_config() -> None:
    config = DatabaseConfig()
    assert config.database == ":memory:"
    assert config.connection_config["timeout"] == 0.0
    assert config.connection_config["check_same_thread"] is False


def test_provide_connection_closes(database_path: Path) -> None:
    config = DatabaseConfig(database=str(database_path), connection_config={"cached_statements": 16})
    with config.provide_connection() as connection:
        assert isinstance(connection, Connection)
        connection.exec("create table t(x)")
    assert connection.closed
    assert database_path.exists()


def test_provide_connection_closes_on_error() -> None:
    config = DatabaseConfig()
    with pytest.raises(RuntimeError), config.provide_connection() as connection:
        raise RuntimeError("boom")
    assert connection.closed


def test_create_connection_is_caller_owned() -> None:
    connection = DatabaseConfig().create_connection()
    try:
        assert connection.prepare("select 1 as x").one() == {"x": 1}
    finally:
        connection.close()


@pytest.mark.parametrize(
    ("database", "connection_config"),
    [(None, None), (":memory:", {"timeout": -1}), (":memory:", {"isolation_level": "DEFERRED"})],
)
def test_invalid_config(database: object, connection_config: "dict | None") -> None:
    with pytest.raises(ImproperConfigurationError):
        DatabaseConfig(database=database, connection_config=connection_config)  # type: ignore[arg-type]


def test_open_accepts_params() -> None:
    from sqlbridge import open as open_database

    with open_database(":memory:", timeout=1.5, trace_sql=True) as connection:
        assert connection.prepare("select 1 as x").all() == [{"x": 1}]
    with pytest.raises(ImproperConfigurationError):
        open_database(":memory:", nonsense=True)  # type: ignore[call-arg]

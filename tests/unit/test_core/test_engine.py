"""Unit tests for engine initialization and native handle creation."""

import logging
import sqlite3
from pathlib import Path

import pytest

from sqlbridge.core import engine
from sqlbridge.core.engine import (
    DEFAULT_CONNECTION_PARAMS,
    MIN_SQLITE_VERSION,
    initialize,
    is_initialized,
    open_native,
    resolve_connection_params,
)
from sqlbridge.exceptions import ArgumentTypeError, ArgumentValueError, CannotOpenError, ImproperConfigurationError


def test_initialize_is_idempotent() -> None:
    """Test repeated initialization returns the same info."""
    first = initialize()
    assert is_initialized()
    assert initialize() is first
    assert first.sqlite_version == sqlite3.sqlite_version
    assert first.sqlite_version_info >= MIN_SQLITE_VERSION


def test_initialize_rejects_old_engine(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(engine, "_engine_info", None)
    monkeypatch.setattr(engine.sqlite3, "sqlite_version_info", (3, 7, 0))
    monkeypatch.setattr(engine.sqlite3, "sqlite_version", "3.7.0")
    with pytest.raises(ImproperConfigurationError, match="too old"):
        initialize()
    assert not is_initialized()


def test_resolve_defaults() -> None:
    assert resolve_connection_params() == DEFAULT_CONNECTION_PARAMS
    assert resolve_connection_params({"timeout": 2})["timeout"] == 2.0


@pytest.mark.parametrize(
    "params",
    [
        {"bogus": 1},
        {"timeout": -1},
        {"timeout": "5"},
        {"timeout": True},
        {"cached_statements": 1.5},
        {"check_same_thread": 1},
        {"trace_sql": "yes"},
    ],
)
def test_resolve_rejects_bad_params(params: dict) -> None:
    with pytest.raises(ImproperConfigurationError):
        resolve_connection_params(params)


def test_open_native_memory() -> None:
    native = open_native(":memory:")
    try:
        assert native.isolation_level is None
        assert native.execute("select 1").fetchone() == (1,)
    finally:
        native.close()


@pytest.mark.parametrize("uri", [None, 1, b":memory:", Path("x.db")])
def test_open_native_rejects_non_string(uri: object) -> None:
    with pytest.raises(ArgumentTypeError, match="Expected string"):
        open_native(uri)


def test_open_native_rejects_nul() -> None:
    with pytest.raises(ArgumentValueError, match="NUL"):
        open_native("bad\x00name.db")


def test_open_native_missing_directory(tmp_path: Path) -> None:
    """Test an unusable path fails CannotOpen carrying the path."""
    path = str(tmp_path / "missing" / "test.db")
    with pytest.raises(CannotOpenError) as exc_info:
        open_native(path)
    assert exc_info.value.path == path


def test_trace_sql_logs_statements(caplog: pytest.LogCaptureFixture) -> None:
    native = open_native(":memory:", {"trace_sql": True})
    try:
        with caplog.at_level(logging.DEBUG, logger="sqlbridge.trace"):
            native.execute("select 42").fetchall()
    finally:
        native.close()
    assert any("select 42" in record.getMessage() for record in caplog.records)

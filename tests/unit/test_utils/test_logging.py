"""Unit tests for sqlbridge logging helpers."""

import logging

import pytest

from sqlbridge import open as open_database
from sqlbridge.utils.logging import get_logger, log_with_context


def test_get_logger_namespacing() -> None:
    assert get_logger().name == "sqlbridge"
    assert get_logger("sqlbridge").name == "sqlbridge"
    assert get_logger("connection").name == "sqlbridge.connection"
    assert get_logger("sqlbridge.statement").name == "sqlbridge.statement"


def test_root_logger_has_null_handler() -> None:
    assert any(isinstance(handler, logging.NullHandler) for handler in get_logger().handlers)


def test_log_with_context_renders_fields(caplog: pytest.LogCaptureFixture) -> None:
    """Test context fields are rendered into the message and attached to the record."""
    logger = get_logger("test")
    with caplog.at_level(logging.DEBUG, logger="sqlbridge.test"):
        log_with_context(logger, logging.DEBUG, "Statement prepared", sql="select :a", parameters=1)

    record = caplog.records[-1]
    assert record.getMessage() == "Statement prepared (sql='select :a' parameters=1)"
    assert record.context == {"sql": "select :a", "parameters": 1}
    assert record.funcName == "test_log_with_context_renders_fields"


def test_log_with_context_without_fields(caplog: pytest.LogCaptureFixture) -> None:
    logger = get_logger("test")
    with caplog.at_level(logging.DEBUG, logger="sqlbridge.test"):
        log_with_context(logger, logging.DEBUG, "100% done")
    assert caplog.records[-1].getMessage() == "100% done"


def test_log_with_context_skips_disabled_levels(caplog: pytest.LogCaptureFixture) -> None:
    logger = get_logger("test")
    with caplog.at_level(logging.WARNING, logger="sqlbridge.test"):
        log_with_context(logger, logging.DEBUG, "hidden", uri=":memory:")
    assert not [record for record in caplog.records if record.getMessage().startswith("hidden")]


def test_lifecycle_events_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Test opening, preparing, closing and deferred release are logged at DEBUG."""
    with caplog.at_level(logging.DEBUG, logger="sqlbridge"):
        connection = open_database(":memory:")
        statement = connection.prepare("select 1 as x")
        connection.close()
        statement.close()

    messages = [record.getMessage() for record in caplog.records if record.name.startswith("sqlbridge")]
    assert "Connection opened (uri=':memory:')" in messages
    assert "Statement prepared (sql='select 1 as x' parameters=0)" in messages
    assert any(message.startswith("Connection closed; native release deferred") for message in messages)
    assert "Native database handle released (uri=':memory:')" in messages

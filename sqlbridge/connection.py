"""Database connections."""

import logging
import weakref
from contextlib import closing
from typing import TYPE_CHECKING, Any, Optional

from typing_extensions import Unpack

from sqlbridge.core.engine import open_native
from sqlbridge.core.error_mapper import wrap_engine_errors
from sqlbridge.core.handle import CLOSED_PLACEHOLDER, DatabaseHandle
from sqlbridge.core.splitter import split_statements
from sqlbridge.exceptions import ArgumentTypeError, ConnectionClosedError
from sqlbridge.statement import Statement
from sqlbridge.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from types import TracebackType

    from sqlbridge.core.engine import ConnectionParams

__all__ = ("Connection", "open")

logger = get_logger("connection")

_DATABASE_LIST_SQL = "PRAGMA database_list"


class Connection:
    """An open database.

    ``uri`` may be ``":memory:"`` for a private in-memory database, ``""`` for a
    private temporary on-disk database removed on clean close, or a filesystem
    path opened read-write and created if absent.

    Closing a connection stops all further use of it and of its statements. The
    native handle itself is released once the connection and every statement
    prepared from it are closed or reclaimed, in whichever order that happens.
    """

    def __init__(self, uri: Any, **params: "Unpack[ConnectionParams]") -> None:
        native = open_native(uri, params)
        self._handle = DatabaseHandle(native, uri)
        self._finalizer = weakref.finalize(self, self._handle.close_connection)
        log_with_context(logger, logging.DEBUG, "Connection opened", uri=uri)

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    @property
    def db_filename(self) -> str:
        """Absolute path of the main database file.

        Empty for in-memory and temporary databases, ``"#CLOSED"`` once closed.
        """
        if self.closed:
            return CLOSED_PLACEHOLDER
        native = self._handle.native()
        with wrap_engine_errors(sql=_DATABASE_LIST_SQL), closing(native.execute(_DATABASE_LIST_SQL)) as cursor:
            for _seq, name, filename in cursor:
                if name == "main":
                    return filename or ""
        return ""

    @property
    def statement_count(self) -> int:
        """Number of prepared statements still holding the native handle."""
        return self._handle.statement_count

    def close(self) -> None:
        """Close the connection. Further calls are no-ops."""
        if self._finalizer.alive:
            self._finalizer()
            log_with_context(logger, logging.DEBUG, "Connection closed", uri=self._handle.uri)

    def exec(self, sql: Any) -> None:
        """Execute one or more ``;``-separated statements, discarding all rows.

        Statements run in order; the first failure stops the script and is
        raised. Statements that already ran are not rolled back unless the
        script's own transaction control says so.

        Raises:
            ArgumentTypeError: ``sql`` is not a string.
            ConnectionClosedError: The connection is closed.
        """
        if not isinstance(sql, str):
            msg = f"sql: Expected string, not {type(sql).__name__!r}"
            raise ArgumentTypeError(msg)
        native = self._handle.native()

        for statement in split_statements(sql):
            with wrap_engine_errors(sql=statement), closing(native.cursor()) as cursor:
                cursor.execute(statement)
                for _ in cursor:
                    pass

    def prepare(self, sql: Any) -> Statement:
        """Prepare exactly one statement for repeated execution.

        Args:
            sql: Statement text. A single trailing ``;`` is allowed, nothing after it.

        Returns:
            The prepared statement.
        """
        if self.closed:
            raise ConnectionClosedError
        return Statement.prepare(self, self._handle, sql)

    def __enter__(self) -> "Connection":
        return self

    def __exit__(
        self,
        exc_type: "Optional[type[BaseException]]",
        exc_val: "Optional[BaseException]",
        exc_tb: "Optional[TracebackType]",
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        if self.closed:
            return "<Connection [closed]>"
        filename = self.db_filename
        return f"<Connection {filename or '[temporary]'}>"


def open(uri: Any, **params: "Unpack[ConnectionParams]") -> Connection:  # noqa: A001
    """Open a database connection.

    Args:
        uri: ``":memory:"``, ``""`` or a filesystem path.
        **params: Connection parameters; see :class:`sqlbridge.config.ConnectionParams`.

    Raises:
        ArgumentTypeError: ``uri`` is not a string.
        CannotOpenError: The database could not be opened.
        ImproperConfigurationError: Invalid connection parameters.

    Returns:
        The open connection.
    """
    return Connection(uri, **params)

"""Prepared statements."""

import logging
import re
import weakref
from collections.abc import Generator
from contextlib import closing, contextmanager
from typing import TYPE_CHECKING, Any, Final, Optional

from sqlbridge.core.error_mapper import wrap_engine_errors
from sqlbridge.core.handle import CLOSED_PLACEHOLDER
from sqlbridge.core.parameters import bind_parameters, compile_layout
from sqlbridge.core.result import RunResult, collect_rows, column_names
from sqlbridge.core.splitter import is_blank, split_first
from sqlbridge.core.type_conversion import result_value_converter
from sqlbridge.exceptions import ArgumentTypeError, ArgumentValueError, StatementClosedError
from sqlbridge.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    import sqlite3
    from types import TracebackType

    from sqlbridge.connection import Connection
    from sqlbridge.core.handle import DatabaseHandle
    from sqlbridge.core.parameters import ParameterLayout
    from sqlbridge.typing import BindParameters, ResultRow

__all__ = ("Statement",)

logger = get_logger("statement")

_EXPLAIN_PREFIX: Final = re.compile(r"(?:\s|--[^\n]*\n?|/\*(?:[^*]|\*(?!/))*\*/)*EXPLAIN\b", re.IGNORECASE)
_CHANGES_SQL: Final = "SELECT changes(), last_insert_rowid()"


def _compile(native: "sqlite3.Connection", layout: "ParameterLayout") -> None:
    """Have the engine compile the statement without running it.

    ``EXPLAIN`` makes the engine parse and plan the statement, so syntax errors
    and unknown tables or columns surface here rather than on first execution.
    """
    explain_sql = layout.native_sql if _EXPLAIN_PREFIX.match(layout.native_sql) else f"EXPLAIN {layout.native_sql}"
    with wrap_engine_errors(sql=layout.sql, translate=layout.restore_placeholders), closing(native.cursor()) as cursor:
        cursor.execute(explain_sql, (None,) * layout.count)


def _drain(cursor: "sqlite3.Cursor") -> None:
    for _ in cursor:
        pass


class Statement:
    """One prepared statement, reusable across executions.

    Created by :meth:`sqlbridge.Connection.prepare`. Every execution binds its
    own parameters and always leaves the statement reset, so a failed ``run``,
    ``one`` or ``all`` can be retried with the same object.
    """

    def __init__(self, connection: "Connection", handle: "DatabaseHandle", layout: "ParameterLayout") -> None:
        # The owning connection stays reachable for as long as this statement is.
        self._connection = connection
        self._handle = handle
        self._layout = layout
        self._finalizer = weakref.finalize(self, handle.release_statement, handle.register_statement())

    @classmethod
    def prepare(cls, connection: "Connection", handle: "DatabaseHandle", sql: Any) -> "Statement":
        """Validate and compile exactly one statement against ``handle``.

        Args:
            connection: The owning connection.
            handle: Native database handle of the owning connection.
            sql: Statement text. A single trailing ``;`` is allowed.

        Raises:
            ArgumentTypeError: ``sql`` is not a string.
            ArgumentValueError: ``sql`` is blank or has content after its terminator.
            ConnectionClosedError: The owning connection is closed.
            SQLSyntaxError: The engine rejected the statement.

        Returns:
            The prepared statement.
        """
        if not isinstance(sql, str):
            msg = f"sql: Expected string, not {type(sql).__name__!r}"
            raise ArgumentTypeError(msg)
        native = handle.native()

        statement_sql, tail = split_first(sql)
        if tail:
            msg = "Trailing characters in SQL statement"
            raise ArgumentValueError(msg, sql=sql)
        if is_blank(statement_sql):
            msg = "SQL statement is empty"
            raise ArgumentValueError(msg, sql=sql)

        layout = compile_layout(statement_sql)
        _compile(native, layout)
        statement = cls(connection, handle, layout)
        log_with_context(logger, logging.DEBUG, "Statement prepared", sql=layout.sql, parameters=layout.count)
        return statement

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    @property
    def sql(self) -> str:
        """Statement text as prepared, or ``"#CLOSED"`` once closed."""
        if self.closed:
            return CLOSED_PLACEHOLDER
        return self._layout.sql

    @property
    def parameter_count(self) -> int:
        """Number of values a positional parameter sequence must supply."""
        return self._layout.count

    def close(self) -> None:
        """Release the statement. Further calls are no-ops."""
        if self._finalizer.alive:
            self._finalizer()
            log_with_context(logger, logging.DEBUG, "Statement closed", sql=self._layout.sql)

    @contextmanager
    def _execute(self, parameters: "BindParameters") -> "Generator[sqlite3.Cursor, None, None]":
        if self.closed:
            raise StatementClosedError(sql=self._layout.sql)
        native = self._handle.native()
        values = bind_parameters(self._layout, parameters)

        translate = self._layout.restore_placeholders
        with wrap_engine_errors(sql=self._layout.sql, translate=translate), closing(native.cursor()) as cursor:
            cursor.execute(self._layout.native_sql, values)
            yield cursor

    def run(self, parameters: "BindParameters" = None) -> RunResult:
        """Execute to completion, discarding any rows.

        Args:
            parameters: Positional sequence or mapping keyed by placeholder (sigil included).

        Returns:
            Row change count and last inserted rowid of the connection.
        """
        with self._execute(parameters) as cursor:
            _drain(cursor)
            changes, last_insert_rowid = cursor.execute(_CHANGES_SQL).fetchone()
        return RunResult(changes=changes, last_insert_rowid=last_insert_rowid)

    def one(self, parameters: "BindParameters" = None) -> "Optional[ResultRow]":
        """Return the first row, or ``None`` when the result set is empty."""
        with self._execute(parameters) as cursor:
            row = cursor.fetchone()
            if row is None:
                return None
            return result_value_converter.convert_row(column_names(cursor.description), row)

    def all(self, parameters: "BindParameters" = None) -> "list[ResultRow]":
        """Return every row in result order."""
        with self._execute(parameters) as cursor:
            rows = cursor.fetchall()
            return collect_rows(column_names(cursor.description), rows)

    def __enter__(self) -> "Statement":
        return self

    def __exit__(
        self,
        exc_type: "Optional[type[BaseException]]",
        exc_val: "Optional[BaseException]",
        exc_tb: "Optional[TracebackType]",
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Statement {self.sql}>"

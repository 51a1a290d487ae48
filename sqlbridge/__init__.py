"""sqlbridge: a connection/statement API over the embedded SQLite engine."""

from sqlbridge import core, exceptions, typing, utils
from sqlbridge.__metadata__ import __version__
from sqlbridge.config import ConnectionParams, DatabaseConfig
from sqlbridge.connection import Connection, open
from sqlbridge.core.engine import initialize
from sqlbridge.core.result import RunResult
from sqlbridge.exceptions import (
    ArgumentTypeError,
    ArgumentValueError,
    BusyError,
    CannotOpenError,
    ConnectionClosedError,
    ConstraintViolationError,
    EngineError,
    ErrorKind,
    OutOfRangeError,
    SQLBridgeError,
    SQLSyntaxError,
    StatementClosedError,
    UnknownParameterError,
)
from sqlbridge.statement import Statement
from sqlbridge.typing import BindParameters, BindValue, ResultRow

__all__ = (
    "ArgumentTypeError",
    "ArgumentValueError",
    "BindParameters",
    "BindValue",
    "BusyError",
    "CannotOpenError",
    "Connection",
    "ConnectionClosedError",
    "ConnectionParams",
    "ConstraintViolationError",
    "DatabaseConfig",
    "EngineError",
    "ErrorKind",
    "OutOfRangeError",
    "ResultRow",
    "RunResult",
    "SQLBridgeError",
    "SQLSyntaxError",
    "Statement",
    "StatementClosedError",
    "UnknownParameterError",
    "__version__",
    "core",
    "exceptions",
    "initialize",
    "open",
    "typing",
    "utils",
)

"""Translation of engine failures into the sqlbridge exception taxonomy.

Mapping priority:
1. SQLite extended result codes (most reliable)
2. SQLite primary result codes (``code & 0xFF``)
3. SQLite error names
4. Error message patterns
5. :class:`EngineError` fallback carrying whatever code is known
"""

import sqlite3
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Final, Optional

from sqlbridge.exceptions import (
    ArgumentTypeError,
    ArgumentValueError,
    BusyError,
    CannotOpenError,
    CheckViolationError,
    ConstraintViolationError,
    EngineError,
    ForeignKeyViolationError,
    NotNullViolationError,
    OutOfRangeError,
    PrimaryKeyViolationError,
    SQLBridgeError,
    SQLSyntaxError,
    UniqueViolationError,
)
from sqlbridge.utils.logging import get_logger
from sqlbridge.utils.type_guards import has_sqlite_error

__all__ = ("create_mapped_exception", "primary_code", "wrap_engine_errors")

logger = get_logger("core.error_mapper")

SQLITE_ERROR_CODE: Final = 1
SQLITE_BUSY_CODE: Final = 5
SQLITE_LOCKED_CODE: Final = 6
SQLITE_CANTOPEN_CODE: Final = 14
SQLITE_TOOBIG_CODE: Final = 18
SQLITE_CONSTRAINT_CODE: Final = 19
SQLITE_RANGE_CODE: Final = 25
SQLITE_CONSTRAINT_CHECK_CODE: Final = 275
SQLITE_CONSTRAINT_FOREIGNKEY_CODE: Final = 787
SQLITE_CONSTRAINT_NOTNULL_CODE: Final = 1299
SQLITE_CONSTRAINT_PRIMARYKEY_CODE: Final = 1555
SQLITE_CONSTRAINT_UNIQUE_CODE: Final = 2067
SQLITE_CONSTRAINT_ROWID_CODE: Final = 2579

_PRIMARY_NAMES: Final[dict[int, str]] = {
    SQLITE_ERROR_CODE: "SQLITE_ERROR",
    2: "SQLITE_INTERNAL",
    3: "SQLITE_PERM",
    4: "SQLITE_ABORT",
    SQLITE_BUSY_CODE: "SQLITE_BUSY",
    SQLITE_LOCKED_CODE: "SQLITE_LOCKED",
    7: "SQLITE_NOMEM",
    8: "SQLITE_READONLY",
    9: "SQLITE_INTERRUPT",
    10: "SQLITE_IOERR",
    11: "SQLITE_CORRUPT",
    12: "SQLITE_NOTFOUND",
    13: "SQLITE_FULL",
    SQLITE_CANTOPEN_CODE: "SQLITE_CANTOPEN",
    15: "SQLITE_PROTOCOL",
    16: "SQLITE_EMPTY",
    17: "SQLITE_SCHEMA",
    SQLITE_TOOBIG_CODE: "SQLITE_TOOBIG",
    SQLITE_CONSTRAINT_CODE: "SQLITE_CONSTRAINT",
    20: "SQLITE_MISMATCH",
    21: "SQLITE_MISUSE",
    22: "SQLITE_NOLFS",
    23: "SQLITE_AUTH",
    24: "SQLITE_FORMAT",
    SQLITE_RANGE_CODE: "SQLITE_RANGE",
    26: "SQLITE_NOTADB",
}

_CONSTRAINT_CLASSES: Final[dict[int, type[ConstraintViolationError]]] = {
    SQLITE_CONSTRAINT_UNIQUE_CODE: UniqueViolationError,
    SQLITE_CONSTRAINT_PRIMARYKEY_CODE: PrimaryKeyViolationError,
    SQLITE_CONSTRAINT_ROWID_CODE: PrimaryKeyViolationError,
    SQLITE_CONSTRAINT_NOTNULL_CODE: NotNullViolationError,
    SQLITE_CONSTRAINT_FOREIGNKEY_CODE: ForeignKeyViolationError,
    SQLITE_CONSTRAINT_CHECK_CODE: CheckViolationError,
}

_CONSTRAINT_PATTERNS: Final[tuple[tuple[str, type[ConstraintViolationError]], ...]] = (
    ("unique constraint", UniqueViolationError),
    ("primary key", PrimaryKeyViolationError),
    ("not null constraint", NotNullViolationError),
    ("foreign key constraint", ForeignKeyViolationError),
    ("check constraint", CheckViolationError),
)


def primary_code(code: int) -> int:
    """Strip the extended bits from an engine result code."""
    return code & 0xFF


def _code_name(code: "Optional[int]", name: "Optional[str]") -> "Optional[str]":
    if name:
        return name
    if code is None:
        return None
    return _PRIMARY_NAMES.get(primary_code(code))


def _constraint_class(code: "Optional[int]", name: "Optional[str]", message: str) -> type[ConstraintViolationError]:
    if code is not None and code in _CONSTRAINT_CLASSES:
        return _CONSTRAINT_CLASSES[code]
    for pattern, error_class in _CONSTRAINT_PATTERNS:
        if pattern in message:
            return error_class
    return ConstraintViolationError


def _engine_error_class(
    code: "Optional[int]", name: "Optional[str]", message: str
) -> "type[EngineError] | type[OutOfRangeError]":
    primary = primary_code(code) if code is not None else None
    upper_name = name or ""

    if primary in {SQLITE_BUSY_CODE, SQLITE_LOCKED_CODE} or upper_name.startswith(("SQLITE_BUSY", "SQLITE_LOCKED")):
        return BusyError
    if primary == SQLITE_CONSTRAINT_CODE or upper_name.startswith("SQLITE_CONSTRAINT"):
        return _constraint_class(code, name, message)
    if primary == SQLITE_CANTOPEN_CODE or upper_name.startswith("SQLITE_CANTOPEN"):
        return CannotOpenError
    if primary == SQLITE_TOOBIG_CODE or upper_name == "SQLITE_TOOBIG":
        return OutOfRangeError
    if primary == SQLITE_ERROR_CODE or upper_name == "SQLITE_ERROR":
        return SQLSyntaxError

    if primary is None:
        if "database is locked" in message or "database table is locked" in message or "busy" in message:
            return BusyError
        if "constraint failed" in message:
            return _constraint_class(None, None, message)
        if "unable to open database" in message:
            return CannotOpenError
        if "syntax error" in message or "no such" in message or "incomplete input" in message:
            return SQLSyntaxError
    return EngineError


def create_mapped_exception(
    error: BaseException,
    *,
    sql: "Optional[str]" = None,
    path: "Optional[str]" = None,
    translate: "Optional[Callable[[str], str]]" = None,
) -> SQLBridgeError:
    """Map an engine or host-driver exception to a sqlbridge exception.

    This is a factory function that returns an exception instance rather than
    raising, so it can be used from ``except`` blocks and ``__exit__`` handlers alike.

    Args:
        error: The exception raised by the engine binding.
        sql: Statement text being executed, if any.
        path: Database path being opened, if any.
        translate: Rewrites the engine message before it becomes the error detail.

    Returns:
        A sqlbridge exception with the original as its cause.
    """
    message = str(error)
    if translate is not None:
        message = translate(message)

    if isinstance(error, sqlite3.ProgrammingError):
        mapped: SQLBridgeError = ArgumentValueError(message, sql=sql)
    elif isinstance(error, sqlite3.InterfaceError):
        mapped = ArgumentTypeError(message, sql=sql)
    elif isinstance(error, UnicodeError):
        mapped = ArgumentValueError(f"Text is not valid Unicode: {message}", sql=sql)
    elif isinstance(error, OverflowError):
        mapped = OutOfRangeError(message, sql=sql)
    else:
        if has_sqlite_error(error):
            code: Optional[int] = error.sqlite_errorcode if isinstance(error.sqlite_errorcode, int) else None
            name: Optional[str] = error.sqlite_errorname or None
        else:
            code = None
            name = None
        code_name = _code_name(code, name)
        error_class = _engine_error_class(code, code_name, message.lower())
        if error_class is CannotOpenError:
            detail = f"{message}: {path!r}" if path is not None else message
            mapped = CannotOpenError(detail, code=code_name, sql=sql, engine_code=code, path=path)
        else:
            mapped = error_class(message, code=code_name, sql=sql, engine_code=code)

    mapped.__cause__ = error
    return mapped


@contextmanager
def wrap_engine_errors(
    *,
    sql: "Optional[str]" = None,
    path: "Optional[str]" = None,
    translate: "Optional[Callable[[str], str]]" = None,
) -> Generator[None, None, None]:
    """Convert engine failures raised inside the block into sqlbridge exceptions.

    sqlbridge exceptions raised inside the block pass through untouched.

    Args:
        sql: Statement text being executed, attached to mapped errors.
        path: Database path being opened, attached to ``CannotOpenError``.
        translate: Rewrites engine messages, e.g. to restore placeholder spelling.
    """
    try:
        yield
    except SQLBridgeError:
        raise
    except (sqlite3.Error, UnicodeError, OverflowError) as exc:
        mapped = create_mapped_exception(exc, sql=sql, path=path, translate=translate)
        logger.debug("Engine error mapped to %s [%s]: %s", type(mapped).__name__, mapped.code, exc)
        raise mapped from exc

from enum import Enum
from typing import Any, ClassVar, Optional

__all__ = (
    "ArgumentTypeError",
    "ArgumentValueError",
    "BusyError",
    "CannotOpenError",
    "CheckViolationError",
    "ConnectionClosedError",
    "ConstraintViolationError",
    "EngineError",
    "ErrorKind",
    "ForeignKeyViolationError",
    "ImproperConfigurationError",
    "MissingParameterError",
    "NotNullViolationError",
    "OutOfRangeError",
    "PrimaryKeyViolationError",
    "SQLBridgeError",
    "SQLSyntaxError",
    "StatementClosedError",
    "UniqueViolationError",
    "UnknownParameterError",
)


class ErrorKind(str, Enum):
    """Machine-readable error categories."""

    ARGUMENT_TYPE = "ArgumentType"
    ARGUMENT_VALUE = "ArgumentValue"
    CONNECTION_CLOSED = "ConnectionClosed"
    STATEMENT_CLOSED = "StatementClosed"
    CANNOT_OPEN = "CannotOpen"
    SYNTAX_ERROR = "SyntaxError"
    CONSTRAINT_VIOLATION = "ConstraintViolation"
    BUSY = "Busy"
    OUT_OF_RANGE = "OutOfRange"
    UNKNOWN_PARAMETER = "UnknownParameter"
    ENGINE = "Engine"
    CONFIGURATION = "Configuration"

    def __str__(self) -> str:
        return self.value


class SQLBridgeError(Exception):
    """Base exception class from which all sqlbridge exceptions inherit."""

    kind: ClassVar[ErrorKind] = ErrorKind.ENGINE
    default_code: ClassVar[str] = "ERR_SQLBRIDGE"

    detail: str
    code: str
    sql: Optional[str]
    parameter: Optional[str]
    engine_code: Optional[int]

    def __init__(
        self,
        *args: Any,
        detail: str = "",
        code: Optional[str] = None,
        sql: Optional[str] = None,
        parameter: Optional[str] = None,
        engine_code: Optional[int] = None,
    ) -> None:
        """Initialize ``SQLBridgeError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
            code: machine-readable code; defaults to the class ``default_code``.
            sql: the SQL text the failure relates to, if any.
            parameter: the bind parameter name or position the failure relates to, if any.
            engine_code: the engine's numeric (extended) result code, if the failure came from the engine.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        self.code = code or self.default_code
        self.sql = sql
        self.parameter = parameter
        self.engine_code = engine_code
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__}({self.code}) - {self.detail}"
        return f"{self.__class__.__name__}({self.code})"

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLBridgeError):
    """The engine or a connection was configured in an unsupported way."""

    kind = ErrorKind.CONFIGURATION
    default_code = "ERR_IMPROPER_CONFIGURATION"


# -- Local argument validation --
class ArgumentTypeError(SQLBridgeError, TypeError):
    """A host value of the wrong type was passed across the boundary."""

    kind = ErrorKind.ARGUMENT_TYPE
    default_code = "ERR_INVALID_ARG_TYPE"


class ArgumentValueError(SQLBridgeError, ValueError):
    """A host value of the right type but the wrong shape was passed."""

    kind = ErrorKind.ARGUMENT_VALUE
    default_code = "ERR_INVALID_ARG_VALUE"


class MissingParameterError(ArgumentValueError):
    """A placeholder was left without a value."""


class UnknownParameterError(SQLBridgeError, KeyError):
    """A named bind key has no matching placeholder in the statement."""

    kind = ErrorKind.UNKNOWN_PARAMETER
    default_code = "ERR_UNKNOWN_PARAMETER"


class OutOfRangeError(SQLBridgeError, ValueError):
    """A value does not fit the engine's storage limits."""

    kind = ErrorKind.OUT_OF_RANGE
    default_code = "ERR_VALUE_OUT_OF_RANGE"


# -- Lifecycle --
class ConnectionClosedError(SQLBridgeError):
    """An operation was attempted on a closed connection."""

    kind = ErrorKind.CONNECTION_CLOSED
    default_code = "ERR_CONNECTION_CLOSED"
    detail = "Attempted to use a closed database connection"


class StatementClosedError(SQLBridgeError):
    """An operation was attempted on a closed statement."""

    kind = ErrorKind.STATEMENT_CLOSED
    default_code = "ERR_STATEMENT_CLOSED"
    detail = "Attempted to execute a closed statement"


# -- Engine errors --
class EngineError(SQLBridgeError):
    """Base class for failures reported by the embedded engine."""

    kind = ErrorKind.ENGINE
    default_code = "SQLITE_ERROR"


class CannotOpenError(EngineError):
    """The database path could not be opened."""

    kind = ErrorKind.CANNOT_OPEN
    default_code = "SQLITE_CANTOPEN"

    path: Optional[str]

    def __init__(self, *args: Any, path: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.path = path


class SQLSyntaxError(EngineError):
    """The engine rejected the statement text."""

    kind = ErrorKind.SYNTAX_ERROR
    default_code = "SQLITE_ERROR"


class BusyError(EngineError):
    """The database is locked by another writer."""

    kind = ErrorKind.BUSY
    default_code = "SQLITE_BUSY"


class ConstraintViolationError(EngineError):
    """A constraint failed while executing a statement."""

    kind = ErrorKind.CONSTRAINT_VIOLATION
    default_code = "SQLITE_CONSTRAINT"


class UniqueViolationError(ConstraintViolationError):
    """A UNIQUE constraint failed."""

    default_code = "SQLITE_CONSTRAINT_UNIQUE"


class PrimaryKeyViolationError(ConstraintViolationError):
    """A PRIMARY KEY constraint failed."""

    default_code = "SQLITE_CONSTRAINT_PRIMARYKEY"


class NotNullViolationError(ConstraintViolationError):
    """A NOT NULL constraint failed."""

    default_code = "SQLITE_CONSTRAINT_NOTNULL"


class ForeignKeyViolationError(ConstraintViolationError):
    """A FOREIGN KEY constraint failed."""

    default_code = "SQLITE_CONSTRAINT_FOREIGNKEY"


class CheckViolationError(ConstraintViolationError):
    """A CHECK constraint failed."""

    default_code = "SQLITE_CONSTRAINT_CHECK"

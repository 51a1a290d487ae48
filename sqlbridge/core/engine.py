"""Process-wide engine initialization and native handle creation.

Initialization is explicit and idempotent: :func:`initialize` may be called any
number of times from any thread and performs its checks exactly once.
"""

import logging
import sqlite3
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final, Optional, TypedDict

from typing_extensions import NotRequired

from sqlbridge.core.error_mapper import wrap_engine_errors
from sqlbridge.exceptions import ArgumentTypeError, ArgumentValueError, ImproperConfigurationError
from sqlbridge.utils.logging import get_logger, log_with_context

__all__ = (
    "DEFAULT_CONNECTION_PARAMS",
    "MIN_SQLITE_VERSION",
    "ConnectionParams",
    "EngineInfo",
    "initialize",
    "is_initialized",
    "open_native",
    "resolve_connection_params",
)

logger = get_logger("core.engine")
trace_logger = get_logger("trace")

MIN_SQLITE_VERSION: Final = (3, 7, 15)


class ConnectionParams(TypedDict, total=False):
    """Native connection parameters."""

    timeout: NotRequired[float]
    """Seconds to wait on a locked database before failing with Busy; 0 fails fast."""
    check_same_thread: NotRequired[bool]
    """Pin the connection to the creating thread."""
    cached_statements: NotRequired[int]
    """Size of the engine-side prepared statement cache."""
    trace_sql: NotRequired[bool]
    """Log every SQL string the engine executes to ``sqlbridge.trace`` at DEBUG."""


DEFAULT_CONNECTION_PARAMS: Final[ConnectionParams] = {
    "timeout": 0.0,
    "check_same_thread": False,
    "cached_statements": 128,
    "trace_sql": False,
}


@dataclass(frozen=True)
class EngineInfo:
    """Facts about the linked engine, captured once at initialization."""

    sqlite_version: str
    sqlite_version_info: "tuple[int, ...]"
    threadsafety: int


_init_lock = threading.Lock()
_engine_info: Optional[EngineInfo] = None


def initialize() -> EngineInfo:
    """Initialize the engine binding for this process.

    Safe to call repeatedly; only the first call does any work.

    Raises:
        ImproperConfigurationError: The linked SQLite library is older than
            :data:`MIN_SQLITE_VERSION`.

    Returns:
        Engine information.
    """
    global _engine_info  # noqa: PLW0603

    if _engine_info is not None:
        return _engine_info

    with _init_lock:
        if _engine_info is not None:
            return _engine_info

        version_info = tuple(sqlite3.sqlite_version_info)
        if version_info < MIN_SQLITE_VERSION:
            required = ".".join(str(part) for part in MIN_SQLITE_VERSION)
            msg = f"SQLite {sqlite3.sqlite_version} is too old; sqlbridge requires {required} or newer"
            raise ImproperConfigurationError(msg)

        _engine_info = EngineInfo(
            sqlite_version=sqlite3.sqlite_version,
            sqlite_version_info=version_info,
            threadsafety=getattr(sqlite3, "threadsafety", 1),
        )
        log_with_context(
            logger,
            logging.DEBUG,
            "Engine initialized",
            sqlite_version=_engine_info.sqlite_version,
            threadsafety=_engine_info.threadsafety,
        )
        return _engine_info


def is_initialized() -> bool:
    """Return True once :func:`initialize` has completed."""
    return _engine_info is not None


def resolve_connection_params(params: "Optional[Mapping[str, Any]]" = None) -> ConnectionParams:
    """Merge caller parameters over the defaults and validate them.

    Args:
        params: Caller-supplied parameters.

    Raises:
        ImproperConfigurationError: Unknown keys or values of the wrong type.

    Returns:
        Complete connection parameters.
    """
    resolved: dict[str, Any] = dict(DEFAULT_CONNECTION_PARAMS)
    for key, value in (params or {}).items():
        if key not in DEFAULT_CONNECTION_PARAMS:
            msg = f"Unknown connection parameter {key!r}"
            raise ImproperConfigurationError(msg)
        resolved[key] = value

    timeout = resolved["timeout"]
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
        msg = f"timeout must be a non-negative number of seconds, not {timeout!r}"
        raise ImproperConfigurationError(msg)
    cached_statements = resolved["cached_statements"]
    if isinstance(cached_statements, bool) or not isinstance(cached_statements, int) or cached_statements < 0:
        msg = f"cached_statements must be a non-negative integer, not {cached_statements!r}"
        raise ImproperConfigurationError(msg)
    for flag in ("check_same_thread", "trace_sql"):
        if not isinstance(resolved[flag], bool):
            msg = f"{flag} must be a bool, not {resolved[flag]!r}"
            raise ImproperConfigurationError(msg)

    return ConnectionParams(
        timeout=float(timeout),
        check_same_thread=resolved["check_same_thread"],
        cached_statements=cached_statements,
        trace_sql=resolved["trace_sql"],
    )


def _trace_statement(statement: str) -> None:
    trace_logger.debug("%s", statement)


def open_native(uri: Any, params: "Optional[Mapping[str, Any]]" = None) -> sqlite3.Connection:
    """Open a native database handle for read-write access, creating the file if absent.

    Args:
        uri: ``":memory:"``, ``""`` for a temporary on-disk database, or a filesystem path.
        params: Connection parameters; see :class:`ConnectionParams`.

    Raises:
        ArgumentTypeError: ``uri`` is not a string.
        ArgumentValueError: ``uri`` contains a NUL character.
        CannotOpenError: The engine could not open the path.

    Returns:
        The native connection, in engine-controlled transaction mode.
    """
    if not isinstance(uri, str):
        msg = f"uri: Expected string, not {type(uri).__name__!r}"
        raise ArgumentTypeError(msg)
    if "\x00" in uri:
        msg = "uri: Embedded NUL character"
        raise ArgumentValueError(msg)

    initialize()
    resolved = resolve_connection_params(params)

    with wrap_engine_errors(path=uri):
        native = sqlite3.connect(
            uri,
            timeout=resolved["timeout"],
            isolation_level=None,
            check_same_thread=resolved["check_same_thread"],
            cached_statements=resolved["cached_statements"],
        )

    if resolved["trace_sql"]:
        native.set_trace_callback(_trace_statement)

    return native

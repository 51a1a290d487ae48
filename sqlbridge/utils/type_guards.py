"""Type guard functions for runtime type checking in sqlbridge."""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlbridge.protocols import SqliteErrorProtocol

if TYPE_CHECKING:
    from typing_extensions import TypeGuard

__all__ = ("has_sqlite_error", "is_bind_mapping", "is_bind_sequence", "is_blob", "is_integer")


def has_sqlite_error(obj: Any) -> "TypeGuard[SqliteErrorProtocol]":
    """Check if an exception carries SQLite result code information.

    Args:
        obj: Exception to check.

    Returns:
        True when ``sqlite_errorcode`` and ``sqlite_errorname`` are present.
    """
    return isinstance(obj, SqliteErrorProtocol)


def is_integer(obj: Any) -> "TypeGuard[int]":
    """Check for a host integer, excluding ``bool``."""
    return isinstance(obj, int) and not isinstance(obj, bool)


def is_blob(obj: Any) -> "TypeGuard[bytes | bytearray | memoryview]":
    """Check for a binary buffer."""
    return isinstance(obj, (bytes, bytearray, memoryview))


def is_bind_mapping(obj: Any) -> "TypeGuard[Mapping[str, Any]]":
    """Check whether bind parameters are keyed by placeholder name."""
    return isinstance(obj, Mapping)


def is_bind_sequence(obj: Any) -> "TypeGuard[Sequence[Any]]":
    """Check whether bind parameters are positional.

    Text and binary buffers are sequences too, but never parameter lists.
    """
    return isinstance(obj, Sequence) and not isinstance(obj, (str, bytes, bytearray, memoryview))

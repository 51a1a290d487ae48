"""Runtime-checkable protocols used to narrow engine objects without hasattr() probing."""

from typing import Protocol, runtime_checkable

__all__ = ("SqliteErrorProtocol",)


@runtime_checkable
class SqliteErrorProtocol(Protocol):
    """Protocol for ``sqlite3.Error`` instances that carry engine result codes (Python 3.11+)."""

    sqlite_errorcode: int
    sqlite_errorname: str

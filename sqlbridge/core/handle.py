"""Shared ownership of one native database handle.

A :class:`DatabaseHandle` is owned jointly by one ``Connection`` and every
``Statement`` prepared from it. The native handle is released when the last of
these events happens:

- the connection is closed (explicitly or by reclamation), and
- every registered statement is closed (explicitly or by reclamation).

Release never depends on the order in which the host runtime reclaims objects.
Both release paths are idempotent and never raise, since they also run from
``weakref.finalize`` callbacks.
"""

import itertools
import logging
import sqlite3
import threading
from typing import Final, Optional

from sqlbridge.exceptions import ConnectionClosedError
from sqlbridge.utils.logging import get_logger, log_with_context

__all__ = ("CLOSED_PLACEHOLDER", "DatabaseHandle")

logger = get_logger("core.handle")

CLOSED_PLACEHOLDER: Final = "#CLOSED"
"""Non-authoritative value reported by ``sql`` / ``db_filename`` after close."""


class DatabaseHandle:
    """Reference-counted owner of a native ``sqlite3.Connection``."""

    __slots__ = ("_connection_open", "_lock", "_native", "_statements", "_tokens", "uri")

    def __init__(self, native: sqlite3.Connection, uri: str) -> None:
        self._native: Optional[sqlite3.Connection] = native
        self._connection_open = True
        self._statements: set[int] = set()
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()
        self.uri = uri

    @property
    def connection_open(self) -> bool:
        return self._connection_open

    @property
    def released(self) -> bool:
        """True once the native handle has been closed."""
        return self._native is None

    @property
    def statement_count(self) -> int:
        """Number of statements still holding a reference."""
        return len(self._statements)

    def native(self) -> sqlite3.Connection:
        """Return the native handle for an engine call.

        Raises:
            ConnectionClosedError: The owning connection has been closed.
        """
        native = self._native
        if not self._connection_open or native is None:
            raise ConnectionClosedError
        return native

    def register_statement(self) -> int:
        """Register a new statement and return its token."""
        with self._lock:
            if not self._connection_open:
                raise ConnectionClosedError
            token = next(self._tokens)
            self._statements.add(token)
            return token

    def release_statement(self, token: int) -> None:
        """Drop a statement's reference, releasing the native handle if it was the last one."""
        with self._lock:
            self._statements.discard(token)
            native = self._take_if_unused()
        self._close_native(native)

    def close_connection(self) -> None:
        """Drop the connection's reference, releasing the native handle if nothing else holds it."""
        with self._lock:
            if not self._connection_open:
                return
            self._connection_open = False
            native = self._take_if_unused()
            pending = len(self._statements)
        if native is None and pending:
            log_with_context(
                logger, logging.DEBUG, "Connection closed; native release deferred", uri=self.uri, statements=pending
            )
        self._close_native(native)

    def _take_if_unused(self) -> Optional[sqlite3.Connection]:
        if self._connection_open or self._statements or self._native is None:
            return None
        native, self._native = self._native, None
        return native

    def _close_native(self, native: Optional[sqlite3.Connection]) -> None:
        if native is None:
            return
        try:
            native.close()
        except sqlite3.Error:
            logger.warning("Failed to release native database handle for %r", self.uri, exc_info=True)
            return
        log_with_context(logger, logging.DEBUG, "Native database handle released", uri=self.uri)

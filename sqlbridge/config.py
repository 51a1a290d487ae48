"""Database configuration."""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, cast

from sqlbridge.connection import Connection
from sqlbridge.core.engine import DEFAULT_CONNECTION_PARAMS, ConnectionParams, resolve_connection_params
from sqlbridge.exceptions import ImproperConfigurationError
from sqlbridge.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = ("DEFAULT_CONNECTION_PARAMS", "ConnectionParams", "DatabaseConfig")

logger = get_logger("config")


class DatabaseConfig:
    """Reusable description of how to open a database."""

    __slots__ = ("connection_config", "database")

    def __init__(
        self, database: str = ":memory:", connection_config: "ConnectionParams | dict[str, Any] | None" = None
    ) -> None:
        """Initialize the configuration.

        Args:
            database: ``":memory:"``, ``""`` for a temporary on-disk database, or a filesystem path.
            connection_config: Connection parameters, validated eagerly.

        Raises:
            ImproperConfigurationError: ``database`` is not a string or the parameters are invalid.
        """
        if not isinstance(database, str):
            msg = f"database must be a string, not {type(database).__name__!r}"
            raise ImproperConfigurationError(msg)
        self.database = database
        self.connection_config: ConnectionParams = resolve_connection_params(connection_config)

    def create_connection(self) -> Connection:
        """Open a new connection. The caller owns it and must close it."""
        logger.debug("Creating connection to %r", self.database)
        return Connection(self.database, **cast("dict[str, Any]", self.connection_config))

    @contextmanager
    def provide_connection(self) -> "Generator[Connection, None, None]":
        """Provide a connection that is closed when the block exits.

        Yields:
            Connection: An open connection.
        """
        connection = self.create_connection()
        try:
            yield connection
        finally:
            connection.close()

    def __repr__(self) -> str:
        return f"DatabaseConfig(database={self.database!r}, connection_config={self.connection_config!r})"

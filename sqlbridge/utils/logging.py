"""Logging helpers for sqlbridge.

Library modules obtain loggers through :func:`get_logger`, all under the
``sqlbridge`` namespace. No handlers are configured here beyond a
``NullHandler``; applications decide where records go.
"""

import logging
from typing import Any, Final, Optional

__all__ = ("ROOT_LOGGER_NAME", "get_logger", "log_with_context")

ROOT_LOGGER_NAME: Final = "sqlbridge"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: "Optional[str]" = None) -> logging.Logger:
    """Get a logger under the ``sqlbridge`` namespace.

    Args:
        name: Logger name, with or without the ``sqlbridge.`` prefix. If not
            provided, returns the root sqlbridge logger.

    Returns:
        Logger instance.
    """
    if name is None or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log a lifecycle event with its context (uri, sql, statement counts).

    The context is appended to the message as ``key=value`` pairs and is also
    attached to the record as ``record.context`` for handlers that format it
    themselves.

    Args:
        logger: The logger to use.
        level: Log level.
        message: Event description.
        **context: Event fields.
    """
    if not logger.isEnabledFor(level):
        return
    if not context:
        logger.log(level, "%s", message, stacklevel=2)
        return
    rendered = " ".join(f"{key}={value!r}" for key, value in context.items())
    logger.log(level, "%s (%s)", message, rendered, extra={"context": context}, stacklevel=2)

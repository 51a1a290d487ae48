"""SQL script splitting.

Statement boundaries are decided by the engine itself: a ``;`` ends a statement
only where ``sqlite3.complete_statement`` agrees, which keeps semicolons inside
string literals, comments and ``CREATE TRIGGER ... BEGIN ... END`` bodies intact.
"""

import re
import sqlite3
from typing import Final

__all__ = ("is_blank", "split_first", "split_statements")

_TERMINATOR: Final = re.compile(";")
_BLANK: Final = re.compile(r"(?:\s|;|--[^\n]*(?:\n|\Z)|/\*(?:[^*]|\*(?!/))*(?:\*/|\Z))*\Z")


def is_blank(sql: str) -> bool:
    """Return True when ``sql`` holds only whitespace, comments and bare terminators."""
    return _BLANK.match(sql) is not None


def _boundaries(script: str) -> "list[int]":
    boundaries: list[int] = []
    start = 0
    for match in _TERMINATOR.finditer(script):
        end = match.end()
        if sqlite3.complete_statement(script[start:end]):
            boundaries.append(end)
            start = end
    return boundaries


def split_first(sql: str) -> "tuple[str, str]":
    """Split off the first complete statement.

    Args:
        sql: SQL text.

    Returns:
        ``(statement, tail)`` where ``statement`` ends with its terminator, if it
        has one, and ``tail`` is everything after it, whitespace included. Text
        without a terminator is returned whole with an empty tail. Leading empty
        statements (bare ``;``) are skipped.
    """
    start = 0
    for end in _boundaries(sql):
        if is_blank(sql[start:end]):
            start = end
            continue
        return sql[start:end], sql[end:]
    return sql[start:], ""


def split_statements(script: str) -> "list[str]":
    """Split a script into individual statements, dropping blank fragments.

    A trailing fragment without a terminator is kept as the last statement so the
    engine can report it (for example an unterminated trigger body).

    Args:
        script: One or more statements separated by ``;``.

    Returns:
        Statements in script order.
    """
    statements: list[str] = []
    start = 0
    for end in _boundaries(script):
        fragment = script[start:end]
        start = end
        if not is_blank(fragment):
            statements.append(fragment)
    tail = script[start:]
    if not is_blank(tail):
        statements.append(tail)
    return statements

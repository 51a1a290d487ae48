from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from sqlbridge import Connection
from sqlbridge import open as open_database

here = Path(__file__).parent
root_path = here.parent


@pytest.fixture
def memory_connection() -> Generator[Connection, None, None]:
    """Provide an in-memory connection, closed after the test."""
    connection = open_database(":memory:")
    try:
        yield connection
    finally:
        connection.close()


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    """Path of a not-yet-created database file."""
    return tmp_path / "test.db"

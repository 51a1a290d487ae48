"""Execution result types."""

from typing import TYPE_CHECKING, Any

from mypy_extensions import mypyc_attr

from sqlbridge.core.type_conversion import result_value_converter

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlbridge.typing import ResultRow

__all__ = ("RunResult", "collect_rows", "column_names")


@mypyc_attr(allow_interpreted_subclasses=True)
class RunResult:
    """Summary of a statement executed with ``Statement.run()``.

    Attributes:
        changes: Rows modified by the most recently completed INSERT, UPDATE or
            DELETE on the connection.
        last_insert_rowid: Rowid of the most recent successful insert into a
            rowid table on the connection; exact 64-bit value.
    """

    __slots__ = ("changes", "last_insert_rowid")

    def __init__(self, changes: int, last_insert_rowid: int) -> None:
        self.changes = changes
        self.last_insert_rowid = last_insert_rowid

    def __repr__(self) -> str:
        return f"RunResult(changes={self.changes}, last_insert_rowid={self.last_insert_rowid})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RunResult):
            return NotImplemented
        return self.changes == other.changes and self.last_insert_rowid == other.last_insert_rowid

    def __hash__(self) -> int:
        return hash((self.changes, self.last_insert_rowid))


def column_names(description: "Sequence[Any] | None") -> "list[str]":
    """Extract column names from a cursor description."""
    if not description:
        return []
    return [col[0] for col in description]


def collect_rows(columns: "Sequence[str]", rows: "Iterable[Sequence[Any]]") -> "list[ResultRow]":
    """Convert raw engine rows into result rows, in result order."""
    return [result_value_converter.convert_row(columns, row) for row in rows]

"""Conversion between host values and the engine's five storage classes.

Every value crossing the boundary maps to exactly one :class:`StorageClass`.
Anything else is rejected with :class:`~sqlbridge.exceptions.ArgumentTypeError`;
there is no best-effort coercion. Booleans, dates, decimals and arbitrary
objects must be converted by the caller.

Classes are designed for mypyc compilation with ``__slots__`` and no nested closures.
"""

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, Final, Optional

from mypy_extensions import mypyc_attr

from sqlbridge.exceptions import ArgumentTypeError, ArgumentValueError, OutOfRangeError
from sqlbridge.utils.type_guards import is_blob, is_integer

if TYPE_CHECKING:
    from sqlbridge.typing import BindValue, ResultRow

__all__ = (
    "INT64_MAX",
    "INT64_MIN",
    "BindValueConverter",
    "ResultValueConverter",
    "StorageClass",
    "bind_value_converter",
    "classify",
    "result_value_converter",
)

INT64_MIN: Final[int] = -(2**63)
INT64_MAX: Final[int] = 2**63 - 1


class StorageClass(Enum):
    """The engine's storage classes."""

    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"

    def __str__(self) -> str:
        return self.name


def classify(value: Any) -> "Optional[StorageClass]":
    """Return the storage class a host value maps to, or ``None`` if it maps to none.

    ``bool`` is deliberately excluded from INTEGER even though it subclasses ``int``.
    A whole-valued ``float`` is still REAL.
    """
    if value is None:
        return StorageClass.NULL
    if is_integer(value):
        return StorageClass.INTEGER
    if isinstance(value, float):
        return StorageClass.REAL
    if isinstance(value, str):
        return StorageClass.TEXT
    if is_blob(value):
        return StorageClass.BLOB
    return None


def _describe(parameter: "Optional[str]") -> str:
    return f"bind parameter {parameter}" if parameter else "bind parameter"


@mypyc_attr(allow_interpreted_subclasses=True)
class BindValueConverter:
    """Converts host values into engine bind values (INPUT)."""

    __slots__ = ()

    def convert_value(self, value: Any, parameter: "Optional[str]" = None) -> "BindValue":
        """Convert a single host value.

        Args:
            value: Host value.
            parameter: Placeholder name or ``?N`` position, used in error messages.

        Raises:
            ArgumentTypeError: The value belongs to no storage class.
            ArgumentValueError: Text that cannot be encoded as UTF-8.
            OutOfRangeError: An integer outside the signed 64-bit range.

        Returns:
            The value in its engine representation.
        """
        storage_class = classify(value)
        if storage_class is StorageClass.NULL:
            return None
        if storage_class is StorageClass.INTEGER:
            return self._convert_integer(value, parameter)
        if storage_class is StorageClass.REAL:
            return float(value)
        if storage_class is StorageClass.TEXT:
            return self._convert_text(value, parameter)
        if storage_class is StorageClass.BLOB:
            return bytes(value)
        msg = f"Unsupported type {type(value).__name__!r} for {_describe(parameter)}"
        raise ArgumentTypeError(msg, parameter=parameter)

    def _convert_integer(self, value: int, parameter: "Optional[str]") -> int:
        if value < INT64_MIN or value > INT64_MAX:
            msg = f"Integer {_describe(parameter)} does not fit in a signed 64-bit int"
            raise OutOfRangeError(msg, parameter=parameter)
        return int(value)

    def _convert_text(self, value: str, parameter: "Optional[str]") -> str:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            msg = f"Text {_describe(parameter)} is not valid Unicode: {exc.reason}"
            raise ArgumentValueError(msg, parameter=parameter) from exc
        return str(value)

    def convert_sequence(self, values: "Sequence[Any]") -> "list[BindValue]":
        """Convert positional values; positions are reported 1-based as ``?N``."""
        return [self.convert_value(value, f"?{index}") for index, value in enumerate(values, start=1)]

    def convert_mapping(self, values: "Mapping[str, Any]") -> "dict[str, BindValue]":
        """Convert keyed values, preserving keys."""
        return {key: self.convert_value(value, key) for key, value in values.items()}


@mypyc_attr(allow_interpreted_subclasses=True)
class ResultValueConverter:
    """Converts engine result values into host values (OUTPUT).

    The engine only produces the five storage classes; integers arrive as exact
    Python ``int`` so 64-bit magnitudes are never rounded through ``float``.
    """

    __slots__ = ()

    def convert_value(self, value: Any, column: "Optional[str]" = None) -> "BindValue":
        storage_class = classify(value)
        if storage_class is None:
            msg = f"Engine produced unsupported type {type(value).__name__!r} for column {column!r}"
            raise ArgumentTypeError(msg)
        if storage_class is StorageClass.BLOB and not isinstance(value, bytes):
            return bytes(value)
        return value  # type: ignore[no-any-return]

    def convert_row(self, columns: "Sequence[str]", values: "Sequence[Any]") -> "ResultRow":
        """Build a result row in column order.

        When several columns share a name the last one wins, matching plain
        ``dict`` assignment order.
        """
        row: ResultRow = {}
        for column, value in zip(columns, values):
            row[column] = self.convert_value(value, column)
        return row


bind_value_converter: Final = BindValueConverter()
result_value_converter: Final = ResultValueConverter()

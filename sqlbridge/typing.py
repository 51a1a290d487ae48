from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

from typing_extensions import TypeAlias

__all__ = ("BindParameters", "BindValue", "ResultRow")

BindValue: TypeAlias = Union[None, int, float, str, bytes]
"""A value in one of the engine's five storage classes."""

BindParameters: TypeAlias = Optional[Union[Sequence[Any], Mapping[str, Any]]]
"""Positional values in placeholder order, or values keyed by placeholder name (sigil included)."""

ResultRow: TypeAlias = dict[str, BindValue]
"""One result row, keyed by column name in column order."""

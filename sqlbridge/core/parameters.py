"""Placeholder extraction and parameter binding.

A single regex pass finds every placeholder while skipping string literals,
quoted identifiers and comments. Indices are assigned the way the engine assigns
them:

- ``?`` takes the next index after the largest one seen so far.
- ``?NNN`` takes index NNN.
- ``:name``, ``@name`` and ``$name`` reuse the index of an earlier occurrence of
  the same name (sigil included), otherwise take the next index.

The compiled :class:`ParameterLayout` rewrites every placeholder to its explicit
``?NNN`` form so the engine always receives one complete positional tuple, and
name lookups (which include the sigil) never depend on how the host driver
strips prefixes.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Final, Optional

from sqlbridge.core.type_conversion import BindValueConverter, bind_value_converter
from sqlbridge.exceptions import ArgumentTypeError, ArgumentValueError, MissingParameterError, UnknownParameterError
from sqlbridge.utils.type_guards import is_bind_mapping, is_bind_sequence

if TYPE_CHECKING:
    from sqlbridge.typing import BindParameters, BindValue

__all__ = (
    "MAX_VARIABLE_NUMBER",
    "ParameterInfo",
    "ParameterLayout",
    "bind_parameters",
    "compile_layout",
    "extract_parameters",
)

MAX_VARIABLE_NUMBER: Final[int] = 32766
"""Largest ``?NNN`` index the engine accepts (SQLITE_MAX_VARIABLE_NUMBER default)."""

_PARAMETER_REGEX: Final = re.compile(
    r"""
    # Literals, identifiers and comments are matched first and skipped.
    (?P<squote>'(?:[^']|'')*'?) |
    (?P<dquote>"(?:[^"]|"")*"?) |
    (?P<backtick>`(?:[^`]|``)*`?) |
    (?P<bracket>\[[^\]]*\]?) |
    (?P<line_comment>--[^\n]*) |
    (?P<block_comment>/\*[\s\S]*?(?:\*/|\Z)) |
    # Placeholders
    (?P<numbered>\?(?P<number>[0-9]+)) |
    (?P<qmark>\?) |
    # A sigil inside an identifier (e.g. ``a$b``) does not start a placeholder.
    (?P<named>(?<![\w$])[:@$](?P<name>[\w$]+))
    """,
    re.VERBOSE,
)
_REWRITTEN_PLACEHOLDER: Final = re.compile(r"\?([0-9]+)")


@dataclass(frozen=True)
class ParameterInfo:
    """One placeholder occurrence in statement text."""

    index: int
    """1-based engine index."""
    position: int
    """Character offset of the placeholder in the original text."""
    placeholder: str
    """The placeholder exactly as written, e.g. ``?``, ``?3``, ``:name``."""
    name: "Optional[str]" = None
    """Lookup name (sigil included); ``None`` for bare ``?``."""


@dataclass(frozen=True)
class ParameterLayout:
    """Placeholder layout of one statement."""

    sql: str
    native_sql: str
    count: int
    names: "Mapping[str, int]" = field(default_factory=dict)
    parameters: "tuple[ParameterInfo, ...]" = ()

    def name_of(self, index: int) -> str:
        """Return the declared name of an index, or its ``?N`` form for unnamed placeholders."""
        for name, named_index in self.names.items():
            if named_index == index:
                return name
        return f"?{index}"

    def restore_placeholders(self, text: str) -> str:
        """Replace rewritten ``?N`` placeholders in engine text with the caller's spelling.

        Engine messages quote the rewritten statement, e.g. ``near "?1"``; this
        maps them back to ``:name`` (or ``?`` for bare placeholders).
        """
        if self.native_sql == self.sql:
            return text
        spellings: dict[int, str] = {}
        for info in self.parameters:
            spellings.setdefault(info.index, info.placeholder)
        return _REWRITTEN_PLACEHOLDER.sub(lambda match: spellings.get(int(match.group(1)), match.group(0)), text)


def extract_parameters(sql: str) -> "list[ParameterInfo]":
    """Extract placeholder occurrences from SQL text in textual order.

    Args:
        sql: SQL string to analyze.

    Raises:
        ArgumentValueError: A ``?NNN`` index outside ``1..MAX_VARIABLE_NUMBER``.

    Returns:
        One :class:`ParameterInfo` per occurrence.
    """
    parameters: list[ParameterInfo] = []
    named: dict[str, int] = {}
    highest = 0

    for match in _PARAMETER_REGEX.finditer(sql):
        kind = match.lastgroup
        if kind == "qmark":
            highest += 1
            parameters.append(ParameterInfo(index=highest, position=match.start(), placeholder="?"))
        elif kind == "numbered":
            placeholder = match.group("numbered")
            index = int(match.group("number"))
            if index < 1 or index > MAX_VARIABLE_NUMBER:
                msg = f"Variable number must be between ?1 and ?{MAX_VARIABLE_NUMBER}"
                raise ArgumentValueError(msg, sql=sql, parameter=placeholder)
            highest = max(highest, index)
            named.setdefault(placeholder, index)
            parameters.append(
                ParameterInfo(index=index, position=match.start(), placeholder=placeholder, name=placeholder)
            )
        elif kind == "named":
            placeholder = match.group("named")
            if placeholder not in named:
                highest += 1
                named[placeholder] = highest
            index = named[placeholder]
            parameters.append(
                ParameterInfo(index=index, position=match.start(), placeholder=placeholder, name=placeholder)
            )

    if highest > MAX_VARIABLE_NUMBER:
        msg = f"Too many SQL variables (limit {MAX_VARIABLE_NUMBER})"
        raise ArgumentValueError(msg, sql=sql)
    return parameters


@lru_cache(maxsize=1024)
def compile_layout(sql: str) -> ParameterLayout:
    """Compile and cache the placeholder layout of a single statement.

    Args:
        sql: Statement text as written by the caller.

    Returns:
        Layout with the engine-ready text.
    """
    parameters = extract_parameters(sql)
    if not parameters:
        return ParameterLayout(sql=sql, native_sql=sql, count=0)

    pieces: list[str] = []
    cursor = 0
    names: dict[str, int] = {}
    for info in parameters:
        pieces.append(sql[cursor : info.position])
        pieces.append(f"?{info.index}")
        cursor = info.position + len(info.placeholder)
        if info.name is not None:
            names.setdefault(info.name, info.index)
    pieces.append(sql[cursor:])

    return ParameterLayout(
        sql=sql,
        native_sql="".join(pieces),
        count=max(info.index for info in parameters),
        names=names,
        parameters=tuple(parameters),
    )


def bind_parameters(
    layout: ParameterLayout, parameters: "BindParameters" = None, converter: "Optional[BindValueConverter]" = None
) -> "tuple[BindValue, ...]":
    """Resolve caller parameters into one complete positional tuple.

    Args:
        layout: Placeholder layout of the statement.
        parameters: ``None``, a positional sequence, or a mapping keyed by placeholder name.
        converter: Value converter; defaults to the shared :class:`BindValueConverter`.

    Raises:
        ArgumentTypeError: The container or a value has an unsupported type.
        ArgumentValueError: The number of values does not match the placeholders.
        UnknownParameterError: A mapping key names no placeholder.
        MissingParameterError: A mapping leaves a placeholder unbound.

    Returns:
        Values ordered by engine index.
    """
    converter = converter or bind_value_converter

    if parameters is None:
        if layout.count:
            msg = f"Statement expects {layout.count} bind parameter(s) but none were supplied"
            raise MissingParameterError(msg, sql=layout.sql)
        return ()

    if is_bind_mapping(parameters):
        return _bind_mapping(layout, parameters, converter)

    if is_bind_sequence(parameters):
        if len(parameters) != layout.count:
            msg = f"Statement expects {layout.count} bind parameter(s) but {len(parameters)} were supplied"
            raise ArgumentValueError(msg, sql=layout.sql)
        return tuple(converter.convert_sequence(parameters))

    msg = f"Bind parameters must be a sequence or a mapping, not {type(parameters).__name__!r}"
    raise ArgumentTypeError(msg, sql=layout.sql)


def _bind_mapping(
    layout: ParameterLayout, parameters: "Mapping[Any, Any]", converter: BindValueConverter
) -> "tuple[BindValue, ...]":
    values: list[BindValue] = [None] * layout.count
    bound = [False] * layout.count

    for key, value in parameters.items():
        if not isinstance(key, str):
            msg = f"Bind parameter names must be strings, not {type(key).__name__!r}"
            raise ArgumentTypeError(msg, sql=layout.sql)
        index = layout.names.get(key)
        if index is None:
            msg = f"A named bind parameter is not present in the query: {key}"
            raise UnknownParameterError(msg, sql=layout.sql, parameter=key)
        values[index - 1] = converter.convert_value(value, key)
        bound[index - 1] = True

    for position, is_bound in enumerate(bound, start=1):
        if not is_bound:
            name = layout.name_of(position)
            msg = f"No value supplied for bind parameter {name}"
            raise MissingParameterError(msg, sql=layout.sql, parameter=name)

    return tuple(values)

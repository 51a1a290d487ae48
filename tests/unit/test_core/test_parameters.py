"""Unit tests for placeholder extraction and binding."""

import pytest

from sqlbridge.core.parameters import MAX_VARIABLE_NUMBER, bind_parameters, compile_layout, extract_parameters
from sqlbridge.exceptions import (
    ArgumentTypeError,
    ArgumentValueError,
    MissingParameterError,
    OutOfRangeError,
    UnknownParameterError,
)


def test_qmark_indices() -> None:
    """Test bare placeholders are numbered left to right."""
    layout = compile_layout("select ?, ?, ?")
    assert layout.count == 3
    assert layout.native_sql == "select ?1, ?2, ?3"
    assert dict(layout.names) == {}


def test_named_placeholders_share_index() -> None:
    """Test repeated names reuse the index of their first occurrence."""
    layout = compile_layout("select :a, @b, :a, $c")
    assert layout.count == 3
    assert dict(layout.names) == {":a": 1, "@b": 2, "$c": 3}
    assert layout.native_sql == "select ?1, ?2, ?1, ?3"


def test_sigil_is_part_of_the_name() -> None:
    """Test the same identifier with different sigils is two parameters."""
    layout = compile_layout("select :x, @x, $x")
    assert dict(layout.names) == {":x": 1, "@x": 2, "$x": 3}


def test_numbered_placeholders() -> None:
    """Test ?NNN takes its own index and bare ? continues after the largest one."""
    layout = compile_layout("select ?2, ?1, ?")
    assert [info.index for info in layout.parameters] == [2, 1, 3]
    assert layout.count == 3


def test_mixed_named_and_qmark() -> None:
    """Test named and bare placeholders share one index space."""
    layout = compile_layout("select ?, :n, ?")
    assert [info.index for info in layout.parameters] == [1, 2, 3]
    assert layout.name_of(2) == ":n"
    assert layout.name_of(1) == "?1"


@pytest.mark.parametrize(
    "sql",
    [
        "select '?', ':a'",
        'select "?" from t',
        "select `:a` from t",
        "select [@a] from t",
        "select 1 -- ? :a\n",
        "select 1 /* ? :a */",
        "select 'it''s ?'",
    ],
)
def test_placeholders_inside_literals_and_comments_ignored(sql: str) -> None:
    """Test text inside literals, quoted identifiers and comments is never a placeholder."""
    assert extract_parameters(sql) == []
    assert compile_layout(sql).native_sql == sql


def test_cast_operator_is_not_a_placeholder() -> None:
    """Test only sigil-prefixed identifiers count as named placeholders."""
    layout = compile_layout("select :a || ': ' || ?")
    assert layout.count == 2
    assert dict(layout.names) == {":a": 1}


@pytest.mark.parametrize("sql", ["select ?0", f"select ?{MAX_VARIABLE_NUMBER + 1}"])
def test_numbered_out_of_bounds(sql: str) -> None:
    """Test ?NNN outside the engine limits is rejected."""
    with pytest.raises(ArgumentValueError, match="between"):
        extract_parameters(sql)


def test_layout_is_cached() -> None:
    """Test compiling the same text twice returns the same layout."""
    assert compile_layout("select :cached") is compile_layout("select :cached")


def test_bind_nothing() -> None:
    """Test statements without placeholders accept omitted parameters."""
    assert bind_parameters(compile_layout("select 1")) == ()
    assert bind_parameters(compile_layout("select 1"), []) == ()


def test_bind_omitted_with_placeholders() -> None:
    """Test omitted parameters fail when the statement declares some."""
    with pytest.raises(ArgumentValueError, match="expects 1"):
        bind_parameters(compile_layout("select ?"))


def test_bind_sequence() -> None:
    """Test positional binding in declaration order."""
    layout = compile_layout("select :a, :b, :a")
    assert bind_parameters(layout, (1, "x")) == (1, "x")
    assert bind_parameters(layout, [None, b"\x00"]) == (None, b"\x00")


@pytest.mark.parametrize("values", [(), (1,), (1, 2, 3)])
def test_bind_sequence_count_mismatch(values: tuple) -> None:
    """Test positional binding requires exactly one value per index."""
    with pytest.raises(ArgumentValueError, match="expects 2"):
        bind_parameters(compile_layout("select ?, ?"), values)


def test_bind_mapping() -> None:
    """Test keyed binding includes the sigil in the lookup key."""
    layout = compile_layout("select :a, @b, $c, :a")
    assert bind_parameters(layout, {"$c": 3, ":a": 1, "@b": 2}) == (1, 2, 3)


def test_bind_mapping_numbered() -> None:
    """Test ?NNN placeholders can be bound by their written form."""
    layout = compile_layout("select ?1, ?2")
    assert bind_parameters(layout, {"?2": "b", "?1": "a"}) == ("a", "b")


def test_bind_mapping_unknown_key() -> None:
    """Test a key with no placeholder fails UnknownParameter."""
    with pytest.raises(UnknownParameterError, match="not present in the query: a") as exc_info:
        bind_parameters(compile_layout("select :a"), {"a": 1})
    assert exc_info.value.parameter == "a"


def test_bind_mapping_missing_key() -> None:
    """Test a placeholder left unbound fails MissingParameter."""
    with pytest.raises(MissingParameterError) as exc_info:
        bind_parameters(compile_layout("select :a, :b"), {":a": 1})
    assert exc_info.value.parameter == ":b"


def test_bind_mapping_non_string_key() -> None:
    """Test mapping keys must be strings."""
    with pytest.raises(ArgumentTypeError):
        bind_parameters(compile_layout("select :a"), {1: 1})


@pytest.mark.parametrize("parameters", ["ab", b"ab", bytearray(b"ab"), memoryview(b"ab"), 5, object()])
def test_bind_rejects_non_containers(parameters: object) -> None:
    """Test only sequences and mappings are parameter containers."""
    with pytest.raises(ArgumentTypeError, match="sequence or a mapping"):
        bind_parameters(compile_layout("select ?, ?"), parameters)  # type: ignore[arg-type]


def test_bind_converts_values() -> None:
    """Test values are marshalled while binding."""
    layout = compile_layout("select ?")
    with pytest.raises(OutOfRangeError):
        bind_parameters(layout, [2**63])
    with pytest.raises(ArgumentTypeError):
        bind_parameters(layout, [True])


@pytest.mark.parametrize("sql", ["select a$b from t", "select a$b$c, x$ from t", "select a:b from t"])
def test_sigils_inside_identifiers_ignored(sql: str) -> None:
    """Test a sigil preceded by an identifier character is part of that identifier."""
    assert extract_parameters(sql) == []
    assert compile_layout(sql).native_sql == sql


def test_identifier_dollar_next_to_placeholder() -> None:
    layout = compile_layout("select a$b, $c from t where a$b = :d")
    assert dict(layout.names) == {"$c": 1, ":d": 2}
    assert layout.native_sql == "select a$b, ?1 from t where a$b = ?2"


def test_restore_placeholders() -> None:
    """Test engine text quoting rewritten placeholders gets the caller's spelling back."""
    layout = compile_layout("select :a, ?, @b")
    assert layout.restore_placeholders('near "?3": syntax error') == 'near "@b": syntax error'
    assert layout.restore_placeholders('near "?2"') == 'near "?"'
    assert layout.restore_placeholders("?9 unknown") == "?9 unknown"
    assert compile_layout("select 1").restore_placeholders("?1") == "?1"

"""Tests for AutoJsonDecoder: the token queue and the decode operations."""

from decimal import Decimal

import pytest

from autojson.datum import read_datum
from autojson.decoder import AutoJsonDecoder
from autojson.errors import (
    EndOfInput,
    LengthMismatch,
    ProtocolError,
    SchemaMismatch,
    TypeMismatch,
)
from autojson.schema import parse_schema


def _decoder(decl, *nodes, **kwargs) -> AutoJsonDecoder:
    return AutoJsonDecoder.from_nodes(parse_schema(decl), nodes, **kwargs)


INT_ARRAY = {"type": "array", "items": "int"}


# ---------------------------------------------------------------------------
# Arrays and maps
# ---------------------------------------------------------------------------

def test_read_int_array():
    d = _decoder(INT_ARRAY, [1, 2, 3])
    assert d.read_array_start() == 3
    assert [d.read_int(), d.read_int(), d.read_int()] == [1, 2, 3]
    assert d.array_next() == 0

def test_read_empty_array():
    d = _decoder(INT_ARRAY, [])
    assert d.read_array_start() == 0

def test_read_map():
    d = _decoder({"type": "map", "values": "long"}, {"a": 1, "b": 2})
    assert d.read_map_start() == 2
    assert (d.read_string(), d.read_long()) == ("a", 1)
    assert (d.read_string(), d.read_long()) == ("b", 2)
    assert d.map_next() == 0

def test_skip_array_stops_at_next_sibling():
    schema = {
        "type": "record",
        "name": "R",
        "fields": [
            {"name": "xs", "type": INT_ARRAY},
            {"name": "after", "type": "string"},
        ],
    }
    d = _decoder(schema, {"xs": [1, 2, 3], "after": "next"})
    assert d.skip_array() == 0
    assert d.read_string() == "next"

def test_skip_map():
    schema = {
        "type": "record",
        "name": "R",
        "fields": [
            {"name": "m", "type": {"type": "map", "values": INT_ARRAY}},
            {"name": "flag", "type": "boolean"},
        ],
    }
    d = _decoder(schema, {"m": {"a": [1], "b": [2, 3]}, "flag": True})
    assert d.skip_map() == 0
    assert d.read_boolean() is True
    assert not d._stack


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def test_read_long_from_integral_float():
    assert _decoder("long", Decimal("3.0")).read_long() == 3
    assert _decoder("long", 3.0).read_long() == 3

def test_read_long_rejects_fraction():
    with pytest.raises(TypeMismatch, match="Expected long. Got 3.5"):
        _decoder("long", Decimal("3.5")).read_long()

def test_read_int_range():
    assert _decoder("int", 2**31 - 1).read_int() == 2**31 - 1
    with pytest.raises(TypeMismatch):
        _decoder("int", 2**31).read_int()

def test_read_long_range():
    assert _decoder("long", 2**31).read_long() == 2**31
    with pytest.raises(TypeMismatch):
        _decoder("long", 2**63).read_long()

def test_read_int_rejects_infinity():
    with pytest.raises(TypeMismatch):
        _decoder("int", float("inf")).read_int()

def test_read_float_and_double_promote():
    assert _decoder("float", 123).read_float() == 123.0
    assert _decoder("double", Decimal("0.25")).read_double() == 0.25

def test_read_double_out_of_range_is_infinite():
    assert _decoder("double", 10**400).read_double() == float("inf")
    assert _decoder("double", -(10**400)).read_double() == float("-inf")
    assert _decoder("float", Decimal("1e400")).read_float() == float("inf")

def test_huge_number_in_float_union():
    schema = parse_schema(["null", "float"])
    d = AutoJsonDecoder.from_text(schema, "1" + "0" * 400)
    assert read_datum(schema, d) == float("inf")


# ---------------------------------------------------------------------------
# Text, bytes, fixed, enum, union
# ---------------------------------------------------------------------------

def test_read_bytes():
    assert _decoder("bytes", "\x00\xff").read_bytes() == b"\x00\xff"

def test_read_fixed_length_checked():
    d = _decoder({"type": "fixed", "name": "F", "size": 2}, "ab")
    with pytest.raises(LengthMismatch):
        d.read_fixed(3)

def test_read_fixed():
    assert _decoder({"type": "fixed", "name": "F", "size": 2}, "ab").read_fixed(2) == b"ab"

def test_skip_string_advances():
    d = _decoder({"type": "array", "items": "string"}, ["a", "b"])
    assert d.read_array_start() == 2
    d.skip_string()
    assert d.read_string() == "b"

def test_read_enum():
    d = _decoder({"type": "enum", "name": "E", "symbols": ["A", "B"]}, "B")
    assert d.read_enum() == 1

def test_read_index_then_payload():
    d = _decoder(["null", "string"], {"string": "x"}, None)
    assert d.read_index() == 1
    assert d.read_string() == "x"
    assert d.read_index() == 0
    d.read_null()


# ---------------------------------------------------------------------------
# Documents and errors
# ---------------------------------------------------------------------------

def test_documents_are_loaded_lazily():
    pulled = []

    def nodes():
        for n in (1, 2):
            pulled.append(n)
            yield n

    d = AutoJsonDecoder.from_nodes(parse_schema("int"), nodes())
    assert pulled == []
    assert d.read_int() == 1
    assert pulled == [1]
    assert d.read_int() == 2
    assert pulled == [1, 2]

def test_end_of_input():
    d = _decoder("int", 1)
    d.read_int()
    with pytest.raises(EndOfInput):
        d.read_int()

def test_end_of_input_is_eof_error():
    with pytest.raises(EOFError):
        _decoder("string").read_string()

def test_has_more():
    d = _decoder("int", 1)
    assert d.has_more()
    d.read_int()
    assert not d.has_more()

def test_resolution_error_raised_on_first_read():
    d = _decoder("int", "one")
    with pytest.raises(SchemaMismatch):
        d.read_int()

def test_out_of_order_read_is_protocol_error():
    d = _decoder(INT_ARRAY, [1])
    with pytest.raises(ProtocolError):
        d.read_int()

def test_from_text_multiple_documents():
    d = AutoJsonDecoder.from_text(parse_schema("long"), "1 2\n3")
    assert [d.read_long() for _ in range(3)] == [1, 2, 3]
    assert not d.has_more()

def test_break_ambiguity_flag():
    schema = parse_schema(["string", {"type": "map", "values": "string"}])
    with pytest.raises(SchemaMismatch):
        AutoJsonDecoder.from_nodes(schema, [{"string": "x"}]).read_index()
    d = AutoJsonDecoder.from_nodes(schema, [{"string": "x"}], break_ambiguity=True)
    assert d.break_ambiguity
    assert d.read_index() == 1

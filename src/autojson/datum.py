"""Generic datum reader: drives an ``AutoJsonDecoder`` and builds plain values.

Records become ``dict`` (fields in declared order), arrays ``list``, maps
``dict``, enums their symbol, bytes and fixed ``bytes``, null ``None``.
"""

from __future__ import annotations

from typing import Any, Iterator

from .decoder import AutoJsonDecoder
from .schema import Kind, Schema


_PRIMITIVE_READERS: dict[Kind, str] = {
    Kind.NULL: "read_null",
    Kind.BOOLEAN: "read_boolean",
    Kind.INT: "read_int",
    Kind.LONG: "read_long",
    Kind.FLOAT: "read_float",
    Kind.DOUBLE: "read_double",
    Kind.STRING: "read_string",
    Kind.BYTES: "read_bytes",
}


def read_datum(schema: Schema, decoder: AutoJsonDecoder) -> Any:
    """Read one value of *schema* from *decoder*."""
    kind = schema.kind
    if kind is Kind.RECORD:
        return {field.name: read_datum(field.schema, decoder) for field in schema.fields}
    if kind is Kind.ARRAY:
        items: list[Any] = []
        count = decoder.read_array_start()
        while count:
            for _ in range(count):
                items.append(read_datum(schema.items, decoder))
            count = decoder.array_next()
        return items
    if kind is Kind.MAP:
        entries: dict[str, Any] = {}
        count = decoder.read_map_start()
        while count:
            for _ in range(count):
                key = decoder.read_string()
                entries[key] = read_datum(schema.values, decoder)
            count = decoder.map_next()
        return entries
    if kind is Kind.UNION:
        return read_datum(schema.branches[decoder.read_index()], decoder)
    if kind is Kind.ENUM:
        return schema.symbols[decoder.read_enum()]
    if kind is Kind.FIXED:
        return decoder.read_fixed(schema.size)
    return getattr(decoder, _PRIMITIVE_READERS[kind])()


def skip_datum(schema: Schema, decoder: AutoJsonDecoder) -> None:
    """Consume one value of *schema* without building it."""
    kind = schema.kind
    if kind is Kind.RECORD:
        for field in schema.fields:
            skip_datum(field.schema, decoder)
    elif kind is Kind.ARRAY:
        count = decoder.skip_array()
        while count:
            for _ in range(count):
                skip_datum(schema.items, decoder)
            count = decoder.array_next()
    elif kind is Kind.MAP:
        count = decoder.skip_map()
        while count:
            for _ in range(count):
                decoder.skip_string()
                skip_datum(schema.values, decoder)
            count = decoder.map_next()
    elif kind is Kind.UNION:
        skip_datum(schema.branches[decoder.read_index()], decoder)
    elif kind is Kind.FIXED:
        decoder.skip_fixed(schema.size)
    elif kind is Kind.STRING:
        decoder.skip_string()
    elif kind is Kind.BYTES:
        decoder.skip_bytes()
    else:
        read_datum(schema, decoder)


def iter_datums(decoder: AutoJsonDecoder) -> Iterator[Any]:
    """Yield one value per document until the decoder's source runs out."""
    while decoder.has_more():
        yield read_datum(decoder.schema, decoder)

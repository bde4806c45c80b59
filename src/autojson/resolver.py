"""Resolver: walks a reader schema and a parsed JSON tree together.

The result is the document's token list, in exactly the order the decode
operations pull them (see ``decoder.AutoJsonDecoder``).

Unions are decided from JSON shape alone.  Two strategies run at every
schema position:

- *wrapped*: ``{"long": 3}`` names the branch in a single-property object;
- *bare*: ``3`` is tried against each union branch in declaration order.

If exactly one succeeds its tokens are used; if both succeed the position is
ambiguous and ``AmbiguityError`` is raised, unless the resolver was built
with ``break_ambiguity=True``, in which case a successful bare form wins
without the wrapped form ever being tried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .errors import (
    AmbiguityError,
    LengthMismatch,
    MissingField,
    NoEnumMatch,
    SchemaMismatch,
)
from .schema import Field, Kind, RecordSchema, Schema
from .tokens import BranchIndex, Leaf, SkipMarker, Token

logger = logging.getLogger(__name__)


_NUMERIC_ORDER = ("int", "long", "float", "double")
_TEXT_NAMES = frozenset({"string", "bytes"})


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def resolve(schema: Schema, node: Any, *, break_ambiguity: bool = False) -> list[Token]:
    """Linearize *node* against *schema* and return its tokens."""
    return Resolver(break_ambiguity=break_ambiguity).resolve(schema, node)


# ---------------------------------------------------------------------------
# Shape helpers
# ---------------------------------------------------------------------------

def describe(node: Any) -> str:
    """Name the JSON shape of a parsed node."""
    if node is None:
        return "null"
    if isinstance(node, bool):
        return "boolean"
    if isinstance(node, str):
        return "string"
    if isinstance(node, dict):
        return "object"
    if isinstance(node, list):
        return "array"
    if is_number(node):
        return "number"
    return type(node).__name__


def is_number(node: Any) -> bool:
    return isinstance(node, (int, float, Decimal)) and not isinstance(node, bool)


def type_names_match(written: str, declared: str) -> bool:
    """True if a value tagged *written* may be read as type *declared*.

    Numbers may widen (int <= long <= float <= double) but never narrow;
    string and bytes are interchangeable.
    """
    if written in _NUMERIC_ORDER and declared in _NUMERIC_ORDER:
        return _NUMERIC_ORDER.index(written) <= _NUMERIC_ORDER.index(declared)
    if written in _TEXT_NAMES and declared in _TEXT_NAMES:
        return True
    return written == declared


def _names_compatible(written: str, schema: Schema) -> bool:
    return type_names_match(written, schema.name) or written == schema.fullname


def _expected(schema: Schema) -> str:
    if schema.kind is Kind.UNION:
        return "[" + ", ".join(b.fullname for b in schema.branches) + "]"
    return schema.fullname


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class _Attempt:
    """Outcome of one strategy.  Neither set means "not applicable"."""

    tokens: list[Token] | None = None
    error: SchemaMismatch | None = None


class Resolver:
    """Stateless apart from its ambiguity policy; ``resolve`` is pure."""

    def __init__(self, break_ambiguity: bool = False) -> None:
        self.break_ambiguity = break_ambiguity

    def resolve(self, schema: Schema, node: Any) -> list[Token]:
        bare = self._resolve_bare(schema, node)
        if self.break_ambiguity and bare.tokens is not None:
            logger.debug("ambiguity broken: bare %s taken for %s", describe(node), _expected(schema))
            return bare.tokens

        wrapped = self._resolve_wrapped(schema, node)
        if bare.tokens is not None and wrapped.tokens is not None:
            raise AmbiguityError(_expected(schema), describe(node))
        if bare.tokens is not None:
            return bare.tokens
        if wrapped.tokens is not None:
            return wrapped.tokens
        raise wrapped.error or bare.error or SchemaMismatch(_expected(schema), describe(node))

    # -- Strategies -------------------------------------------------------

    def _resolve_bare(self, schema: Schema, node: Any) -> _Attempt:
        if schema.kind is not Kind.UNION:
            try:
                return _Attempt(tokens=self._resolve_kind(schema, node))
            except SchemaMismatch as exc:
                return _Attempt(error=exc)

        for index, branch in enumerate(schema.branches):
            try:
                tokens = self._resolve_kind(branch, node)
            except SchemaMismatch:
                continue
            logger.debug("bare %s selects branch %d (%s)", describe(node), index, branch.fullname)
            return _Attempt(tokens=[BranchIndex(index), *tokens])
        return _Attempt(error=SchemaMismatch(_expected(schema), describe(node)))

    def _resolve_wrapped(self, schema: Schema, node: Any) -> _Attempt:
        if not isinstance(node, dict) or len(node) != 1:
            return _Attempt()
        ((type_name, payload),) = node.items()

        if schema.kind is not Kind.UNION:
            # Written as a union, read as a single type
            if not _names_compatible(type_name, schema):
                return _Attempt()
            try:
                return _Attempt(tokens=self._resolve_kind(schema, payload))
            except SchemaMismatch:
                return _Attempt()

        index = schema.index_named(type_name)
        if index is not None:
            try:
                tokens = self._resolve_kind(schema.branches[index], payload)
            except SchemaMismatch as exc:
                return _Attempt(error=exc)
            logger.debug("wrapped %r selects branch %d", type_name, index)
            return _Attempt(tokens=[BranchIndex(index), *tokens])

        # {"long": 0} may still be read by a "float" branch
        for index, branch in enumerate(schema.branches):
            if not _names_compatible(type_name, branch):
                continue
            try:
                tokens = self._resolve_kind(branch, payload)
            except SchemaMismatch:
                continue
            logger.debug("wrapped %r promoted to branch %d (%s)", type_name, index, branch.fullname)
            return _Attempt(tokens=[BranchIndex(index), *tokens])
        return _Attempt()

    # -- Per-kind rules ---------------------------------------------------

    def _resolve_kind(self, schema: Schema, node: Any) -> list[Token]:
        kind = schema.kind
        if kind is Kind.RECORD:
            return self._resolve_record(schema, node)
        if kind is Kind.ARRAY:
            _expect(schema, node, isinstance(node, list))
            return _collection([self.resolve(schema.items, element) for element in node])
        if kind is Kind.MAP:
            _expect(schema, node, isinstance(node, dict))
            return _collection(
                [[Leaf(key), *self.resolve(schema.values, value)] for key, value in node.items()]
            )
        if kind is Kind.ENUM:
            _expect(schema, node, isinstance(node, str))
            symbol = node
            if not schema.has_symbol(symbol):
                if schema.default is None:
                    raise NoEnumMatch(schema.fullname, symbol)
                symbol = schema.default
            return [Leaf(schema.ordinal(symbol))]
        if kind is Kind.FIXED:
            return [Leaf(_to_bytes(schema, node, schema.size))]
        if kind is Kind.BYTES:
            return [Leaf(_to_bytes(schema, node, None))]
        if kind in (Kind.INT, Kind.LONG, Kind.FLOAT, Kind.DOUBLE):
            _expect(schema, node, is_number(node))
            return [Leaf(node)]  # parsed at read time
        if kind is Kind.STRING:
            _expect(schema, node, isinstance(node, str))
            return [Leaf(node)]
        if kind is Kind.BOOLEAN:
            _expect(schema, node, isinstance(node, bool))
            return [Leaf(node)]
        if kind is Kind.NULL:
            _expect(schema, node, node is None)
            return []
        raise TypeError(f"Unsupported schema kind: {kind}")

    def _resolve_record(self, schema: RecordSchema, node: Any) -> list[Token]:
        # Fields are matched by name, then alias; extra properties are ignored.
        _expect(schema, node, isinstance(node, dict))
        tokens: list[Token] = []
        for field in schema.fields:
            tokens.extend(self.resolve(field.schema, _field_value(schema, field, node)))
        return tokens


def _field_value(schema: RecordSchema, field: Field, node: dict) -> Any:
    if field.name in node:
        return node[field.name]
    for alias in field.aliases:
        if alias in node:
            return node[alias]
    if field.has_default:
        return field.default
    raise MissingField(schema.fullname, field.name)


def _collection(entries: list[list[Token]]) -> list[Token]:
    body: list[Token] = []
    if entries:
        body.append(Leaf(len(entries)))
        for entry in entries:
            body.extend(entry)
    body.append(Leaf(0))
    return [SkipMarker(len(body)), *body]


def _to_bytes(schema: Schema, node: Any, size: int | None) -> bytes:
    _expect(schema, node, isinstance(node, str))
    try:
        data = node.encode("latin-1")
    except UnicodeEncodeError:
        raise SchemaMismatch(schema.fullname, "string with characters above U+00FF") from None
    if size is not None and len(data) != size:
        raise LengthMismatch(size, len(data))
    return data


def _expect(schema: Schema, node: Any, ok: bool) -> None:
    if not ok:
        raise SchemaMismatch(_expected(schema), describe(node))

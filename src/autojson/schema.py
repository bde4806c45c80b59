"""Reader schema model and the Avro-style declaration parser.

Schemas are immutable trees of small dataclasses.  ``parse_schema`` builds one
from the usual JSON declaration syntax::

    schema = parse_schema('''
        {"type": "record", "name": "Thing", "fields": [
            {"name": "size", "type": "float"},
            {"name": "note", "type": "string", "aliases": ["desc"]},
            {"name": "good", "type": "boolean", "default": true}
        ]}''')
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .errors import SchemaParseError


# ---------------------------------------------------------------------------
# NoDefault — singleton for fields declared without a default
# ---------------------------------------------------------------------------

class _NoDefault:
    """Marks a field without a default (``None`` is the JSON null default)."""

    _instance: "_NoDefault | None" = None

    def __new__(cls) -> "_NoDefault":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __bool__(self) -> bool:
        return False


NO_DEFAULT = _NoDefault()


# ---------------------------------------------------------------------------
# Kind
# ---------------------------------------------------------------------------

class Kind(Enum):
    RECORD = "record"
    ENUM = "enum"
    ARRAY = "array"
    MAP = "map"
    UNION = "union"
    FIXED = "fixed"
    STRING = "string"
    BYTES = "bytes"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    NULL = "null"


PRIMITIVE_KINDS = frozenset(
    {
        Kind.STRING,
        Kind.BYTES,
        Kind.INT,
        Kind.LONG,
        Kind.FLOAT,
        Kind.DOUBLE,
        Kind.BOOLEAN,
        Kind.NULL,
    }
)

_PRIMITIVE_NAMES: dict[str, Kind] = {k.value: k for k in PRIMITIVE_KINDS}

_COMPLEX_TYPES = frozenset({"record", "error", "enum", "fixed", "array", "map"})


# ---------------------------------------------------------------------------
# Schema nodes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PrimitiveSchema:
    kind: Kind

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def fullname(self) -> str:
        return self.kind.value


@dataclass(frozen=True, slots=True)
class ArraySchema:
    items: "Schema"

    kind = Kind.ARRAY
    name = "array"
    fullname = "array"


@dataclass(frozen=True, slots=True)
class MapSchema:
    values: "Schema"

    kind = Kind.MAP
    name = "map"
    fullname = "map"


@dataclass(frozen=True, slots=True)
class UnionSchema:
    branches: tuple["Schema", ...]

    kind = Kind.UNION
    name = "union"
    fullname = "union"

    def index_named(self, name: str) -> int | None:
        """Return the index of the branch whose full name is *name*."""
        for i, branch in enumerate(self.branches):
            if branch.fullname == name:
                return i
        return None


@dataclass(frozen=True, slots=True)
class EnumSchema:
    name: str
    symbols: tuple[str, ...]
    default: str | None = None
    namespace: str | None = None

    kind = Kind.ENUM

    @property
    def fullname(self) -> str:
        return _fullname(self.name, self.namespace)

    def has_symbol(self, symbol: str) -> bool:
        return symbol in self.symbols

    def ordinal(self, symbol: str) -> int:
        return self.symbols.index(symbol)


@dataclass(frozen=True, slots=True)
class FixedSchema:
    name: str
    size: int
    namespace: str | None = None

    kind = Kind.FIXED

    @property
    def fullname(self) -> str:
        return _fullname(self.name, self.namespace)


@dataclass(frozen=True, slots=True)
class Field:
    name: str
    schema: "Schema"
    aliases: tuple[str, ...] = ()
    default: Any = NO_DEFAULT

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT


@dataclass(frozen=True, slots=True, eq=False)
class RecordSchema:
    """A record type.

    Equality is identity: a record may contain itself through its fields,
    and ``parse_schema`` fills ``fields`` once the name is registered.
    """

    name: str
    fields: tuple[Field, ...] = field(default=(), repr=False)
    namespace: str | None = None

    kind = Kind.RECORD

    @property
    def fullname(self) -> str:
        return _fullname(self.name, self.namespace)


Schema = Union[
    PrimitiveSchema,
    ArraySchema,
    MapSchema,
    UnionSchema,
    EnumSchema,
    FixedSchema,
    RecordSchema,
]


def primitive(name: str) -> PrimitiveSchema:
    """Shorthand for ``PrimitiveSchema(Kind(name))``."""
    return PrimitiveSchema(_PRIMITIVE_NAMES[name])


def _fullname(name: str, namespace: str | None) -> str:
    if namespace and "." not in name:
        return f"{namespace}.{name}"
    return name


# ---------------------------------------------------------------------------
# Declaration parsing
# ---------------------------------------------------------------------------

def parse_schema(declaration: Any) -> Schema:
    """Parse a JSON schema declaration (text or decoded object)."""
    if isinstance(declaration, str):
        try:
            declaration = json.loads(declaration)
        except json.JSONDecodeError:
            # A bare type name such as ``int`` or a previously declared name
            pass
    return _SchemaParser().parse(declaration, None)


class _SchemaParser:
    def __init__(self) -> None:
        self.names: dict[str, Schema] = {}

    def parse(self, decl: Any, namespace: str | None) -> Schema:
        if isinstance(decl, str):
            return self._parse_name(decl, namespace)
        if isinstance(decl, list):
            return self._parse_union(decl, namespace)
        if isinstance(decl, dict):
            return self._parse_object(decl, namespace)
        raise SchemaParseError(f"Not a schema declaration: {decl!r}")

    def _parse_name(self, name: str, namespace: str | None) -> Schema:
        if name in _PRIMITIVE_NAMES:
            return PrimitiveSchema(_PRIMITIVE_NAMES[name])
        for candidate in (_fullname(name, namespace), name):
            if candidate in self.names:
                return self.names[candidate]
        raise SchemaParseError(f"Unknown type name: {name}")

    def _parse_union(self, decl: list, namespace: str | None) -> UnionSchema:
        branches = tuple(self.parse(d, namespace) for d in decl)
        seen: set[str] = set()
        for branch in branches:
            if branch.kind == Kind.UNION:
                raise SchemaParseError("Unions may not immediately contain other unions")
            if branch.fullname in seen:
                raise SchemaParseError(f"Duplicate in union: {branch.fullname}")
            seen.add(branch.fullname)
        return UnionSchema(branches)

    def _parse_object(self, decl: dict, namespace: str | None) -> Schema:
        type_ = decl.get("type")
        if type_ is None:
            raise SchemaParseError(f"No type in declaration: {decl!r}")
        if not isinstance(type_, str) or type_ not in _COMPLEX_TYPES:
            # {"type": "int", "logicalType": ...}, references and nesting
            return self.parse(type_, namespace)

        if type_ == "array":
            return ArraySchema(self.parse(self._require(decl, "items"), namespace))
        if type_ == "map":
            return MapSchema(self.parse(self._require(decl, "values"), namespace))

        name, namespace = self._split_name(decl, namespace)
        if type_ == "enum":
            symbols = tuple(self._require(decl, "symbols"))
            if len(set(symbols)) != len(symbols):
                raise SchemaParseError(f"Duplicate enum symbol in {name}")
            default = decl.get("default")
            if default is not None and default not in symbols:
                raise SchemaParseError(f"Enum default {default!r} is not a symbol of {name}")
            return self._register(EnumSchema(name, symbols, default, namespace))
        if type_ == "fixed":
            size = self._require(decl, "size")
            if not isinstance(size, int) or isinstance(size, bool) or size < 0:
                raise SchemaParseError(f"Invalid fixed size: {size!r}")
            return self._register(FixedSchema(name, size, namespace))

        # record / error
        record = self._register(RecordSchema(name, (), namespace))
        fields: list[Field] = []
        seen: set[str] = set()
        for fdecl in self._require(decl, "fields"):
            fname = self._require(fdecl, "name")
            if fname in seen:
                raise SchemaParseError(f"Duplicate field {fname} in {name}")
            seen.add(fname)
            fields.append(
                Field(
                    name=fname,
                    schema=self.parse(self._require(fdecl, "type"), namespace),
                    aliases=tuple(fdecl.get("aliases", ())),
                    default=fdecl.get("default", NO_DEFAULT),
                )
            )
        object.__setattr__(record, "fields", tuple(fields))
        return record

    def _split_name(self, decl: dict, namespace: str | None) -> tuple[str, str | None]:
        name = self._require(decl, "name")
        if "." in name:
            ns, _, simple = name.rpartition(".")
            return simple, ns
        return name, decl.get("namespace", namespace)

    def _register(self, schema: Schema) -> Schema:
        if schema.fullname in self.names:
            raise SchemaParseError(f"Can't redefine: {schema.fullname}")
        self.names[schema.fullname] = schema
        return schema

    @staticmethod
    def _require(decl: Any, key: str) -> Any:
        if not isinstance(decl, dict) or key not in decl:
            raise SchemaParseError(f"Declaration is missing {key!r}: {decl!r}")
        return decl[key]

"""autojson — decode JSON against a reader schema, without the writer's schema."""

from .datum import iter_datums, read_datum, skip_datum
from .decoder import AutoJsonDecoder
from .errors import (
    AmbiguityError,
    AutoJsonError,
    EndOfInput,
    LengthMismatch,
    MissingField,
    NoEnumMatch,
    ProtocolError,
    SchemaMismatch,
    SchemaParseError,
    TypeMismatch,
)
from .resolver import Resolver, resolve
from .schema import (
    NO_DEFAULT,
    ArraySchema,
    EnumSchema,
    Field,
    FixedSchema,
    Kind,
    MapSchema,
    PrimitiveSchema,
    RecordSchema,
    Schema,
    UnionSchema,
    parse_schema,
)
from .source import iter_documents
from .tokens import BranchIndex, Leaf, SkipMarker, Token

__all__ = [
    "AutoJsonDecoder",
    "read_datum",
    "skip_datum",
    "iter_datums",
    "iter_documents",
    "resolve",
    "Resolver",
    "parse_schema",
    "Schema",
    "Kind",
    "PrimitiveSchema",
    "ArraySchema",
    "MapSchema",
    "UnionSchema",
    "EnumSchema",
    "FixedSchema",
    "RecordSchema",
    "Field",
    "NO_DEFAULT",
    "Token",
    "Leaf",
    "BranchIndex",
    "SkipMarker",
    "AutoJsonError",
    "SchemaParseError",
    "SchemaMismatch",
    "MissingField",
    "NoEnumMatch",
    "LengthMismatch",
    "AmbiguityError",
    "TypeMismatch",
    "ProtocolError",
    "EndOfInput",
]

"""AutoJsonDecoder — the pull-based decode surface over resolved tokens.

Each top-level JSON document is resolved against the reader schema in one
go; its tokens are kept on a stack (last token first) and handed out one
decode operation at a time.  The operations must be called in depth-first
schema order: record fields in declared order, arrays and maps as
count / elements / ... / zero, unions as index then payload.

Usage::

    decoder = AutoJsonDecoder.from_text(parse_schema('{"type": "array", "items": "int"}'),
                                        "[1, 2, 3]")
    decoder.read_array_start()   # 3
    decoder.read_int()           # 1
"""

from __future__ import annotations

import logging
import math
from typing import IO, Any, Iterable

from .errors import EndOfInput, LengthMismatch, ProtocolError, TypeMismatch
from .resolver import Resolver, is_number
from .schema import Schema
from .source import iter_documents
from .tokens import BranchIndex, Leaf, SkipMarker, Token

logger = logging.getLogger(__name__)


_INT_RANGE = (-(2**31), 2**31 - 1)
_LONG_RANGE = (-(2**63), 2**63 - 1)

# Smallest positive single / double: only exactly integral floats pass.
_FLOAT_EPSILON = 1.401298464324817e-45
_DOUBLE_EPSILON = math.ulp(0.0)


class AutoJsonDecoder:
    """Decodes JSON documents against a reader schema only."""

    def __init__(
        self,
        schema: Schema,
        documents: Iterable[Any],
        *,
        break_ambiguity: bool = False,
    ) -> None:
        self.schema = schema
        self._documents = iter(documents)
        self._resolver = Resolver(break_ambiguity=break_ambiguity)
        self._stack: list[Token] = []

    # -- Construction -----------------------------------------------------

    @classmethod
    def from_text(cls, schema: Schema, text: str | bytes, *, break_ambiguity: bool = False) -> AutoJsonDecoder:
        return cls(schema, iter_documents(text), break_ambiguity=break_ambiguity)

    @classmethod
    def from_stream(cls, schema: Schema, stream: IO, *, break_ambiguity: bool = False) -> AutoJsonDecoder:
        return cls(schema, iter_documents(stream), break_ambiguity=break_ambiguity)

    @classmethod
    def from_nodes(cls, schema: Schema, nodes: Iterable[Any], *, break_ambiguity: bool = False) -> AutoJsonDecoder:
        """Decode already-parsed trees (``json.loads`` output and the like)."""
        return cls(schema, nodes, break_ambiguity=break_ambiguity)

    @property
    def break_ambiguity(self) -> bool:
        return self._resolver.break_ambiguity

    # -- Token queue ------------------------------------------------------

    def has_more(self) -> bool:
        """True if tokens are pending or another document could be loaded."""
        return bool(self._stack) or self._fill()

    def _fill(self) -> bool:
        try:
            node = next(self._documents)
        except StopIteration:
            logger.debug("document source exhausted")
            return False
        tokens = self._resolver.resolve(self.schema, node)
        logger.debug("resolved document into %d tokens", len(tokens))
        tokens.reverse()
        self._stack = tokens
        return True

    def _pop(self, expected: type) -> Any:
        while not self._stack:
            if not self._fill():
                raise EndOfInput("no more JSON documents")
        token = self._stack.pop()
        if not isinstance(token, expected):
            raise ProtocolError(f"Expected {expected.__name__} token. Got {token!r}")
        return token

    def _pop_leaf(self, *types: type) -> Any:
        value = self._pop(Leaf).value
        if types and not isinstance(value, types):
            raise ProtocolError(f"Expected {' or '.join(t.__name__ for t in types)} leaf. Got {value!r}")
        return value

    def _skip_collection(self) -> int:
        marker = self._pop(SkipMarker)
        if marker.offset > len(self._stack):
            raise ProtocolError(f"Skip marker runs past the document: {marker.offset}")
        del self._stack[len(self._stack) - marker.offset:]
        return 0

    # -- Primitives -------------------------------------------------------

    def read_null(self) -> None:
        return None

    def read_boolean(self) -> bool:
        return self._pop_leaf(bool)

    def read_int(self) -> int:
        return _integral(self._pop_leaf(), "int", _INT_RANGE, _FLOAT_EPSILON)

    def read_long(self) -> int:
        # The writer may have used int
        return _integral(self._pop_leaf(), "long", _LONG_RANGE, _DOUBLE_EPSILON)

    def read_float(self) -> float:
        return _floating(self._pop_leaf(), "float")

    def read_double(self) -> float:
        return _floating(self._pop_leaf(), "double")

    def read_string(self) -> str:
        return self._pop_leaf(str)

    def skip_string(self) -> None:
        self._pop_leaf(str)

    def read_bytes(self) -> bytes:
        return self._pop_leaf(bytes)

    def skip_bytes(self) -> None:
        self._pop_leaf(bytes)

    def read_fixed(self, size: int) -> bytes:
        data = self._pop_leaf(bytes)
        if len(data) != size:
            raise LengthMismatch(size, len(data))
        return data

    def skip_fixed(self, size: int) -> None:
        self.read_fixed(size)

    def read_enum(self) -> int:
        return self._pop_leaf(int)

    # -- Structure --------------------------------------------------------

    def read_array_start(self) -> int:
        self._pop(SkipMarker)
        return self._pop_leaf(int)

    def array_next(self) -> int:
        return self._pop_leaf(int)

    def skip_array(self) -> int:
        return self._skip_collection()

    def read_map_start(self) -> int:
        self._pop(SkipMarker)
        return self._pop_leaf(int)

    def map_next(self) -> int:
        return self._pop_leaf(int)

    def skip_map(self) -> int:
        return self._skip_collection()

    def read_index(self) -> int:
        return self._pop(BranchIndex).index


# ---------------------------------------------------------------------------
# Number parsing
# ---------------------------------------------------------------------------

def _integral(value: Any, name: str, bounds: tuple[int, int], epsilon: float) -> int:
    if not is_number(value):
        raise TypeMismatch(name, str(value))
    if isinstance(value, int):
        result = value
    else:
        number = float(value)
        if not math.isfinite(number):
            raise TypeMismatch(name, str(value))
        result = round(number)
        if abs(number - result) > epsilon:
            raise TypeMismatch(name, str(value))
    low, high = bounds
    if not low <= result <= high:
        raise TypeMismatch(name, str(value))
    return int(result)


def _floating(value: Any, name: str) -> float:
    if not is_number(value):
        raise TypeMismatch(name, str(value))
    # Through the text, so out-of-range numbers become inf instead of overflowing
    return float(str(value))

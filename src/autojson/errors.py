"""Exception hierarchy for autojson."""

from __future__ import annotations


class AutoJsonError(Exception):
    """Base class for every error raised by autojson."""


class SchemaParseError(AutoJsonError):
    """A schema declaration could not be turned into a schema tree."""


# ---------------------------------------------------------------------------
# Resolution errors (raised while linearizing a document)
# ---------------------------------------------------------------------------

class SchemaMismatch(AutoJsonError):
    """The JSON shape does not satisfy the reader schema at some position."""

    def __init__(self, expected: str, actual: str, message: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(message or f"Expected {expected}. Got {actual}")


class MissingField(SchemaMismatch):
    def __init__(self, record: str, field: str) -> None:
        self.field = field
        super().__init__(record, "object", f"missing required field {field}")


class NoEnumMatch(SchemaMismatch):
    def __init__(self, enum: str, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(enum, "string", f"No match for {symbol}")


class LengthMismatch(SchemaMismatch):
    def __init__(self, expected_length: int, actual_length: int) -> None:
        self.expected_length = expected_length
        self.actual_length = actual_length
        super().__init__(
            "fixed",
            "string",
            f"Expected fixed length {expected_length}, but got {actual_length}",
        )


class AmbiguityError(SchemaMismatch):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(expected, actual, f"Ambiguity: {expected}: {actual}")


# ---------------------------------------------------------------------------
# Protocol errors (raised while the queue is consumed)
# ---------------------------------------------------------------------------

class TypeMismatch(AutoJsonError):
    """A number leaf cannot be read as the requested numeric type."""

    def __init__(self, expected: str, text: str) -> None:
        self.expected = expected
        self.text = text
        super().__init__(f"Expected {expected}. Got {text}")


class ProtocolError(AutoJsonError):
    """A decode operation popped a token of the wrong kind."""


class EndOfInput(AutoJsonError, EOFError):
    """The document source has no further JSON document."""

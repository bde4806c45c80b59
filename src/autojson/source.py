"""Document source: one parsed JSON tree per top-level document."""

from __future__ import annotations

import io
from typing import IO, Any, Iterator

import ijson


def iter_documents(source: str | bytes | IO) -> Iterator[Any]:
    """Yield each top-level JSON document in *source*, lazily.

    *source* is JSON text, raw bytes, or a text or binary file object holding
    any number of concatenated (whitespace-separated) documents.  Integral
    numbers come back as ``int``, the rest as ``decimal.Decimal`` so the
    number text is kept exactly.  Malformed text raises ``ijson.JSONError``.
    """
    yield from ijson.items(_binary(source), "", multiple_values=True)


def _binary(source: str | bytes | IO) -> IO[bytes]:
    if isinstance(source, str):
        return io.BytesIO(source.encode("utf-8"))
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    if isinstance(source, io.TextIOBase):
        return _EncodedReader(source)
    return source


class _EncodedReader:
    """Byte view of a text stream, decoded by the stream's own encoding.

    Reads continue from the stream's current position, so lines already
    consumed by the caller are not seen again.
    """

    def __init__(self, text: IO[str]) -> None:
        self._text = text

    def read(self, size: int = -1) -> bytes:
        return self._text.read(size).encode("utf-8")

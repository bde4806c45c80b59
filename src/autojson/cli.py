"""``autojson-decode`` — decode JSON documents against a reader schema.

Prints one decoded value per line as JSON.  Bytes and fixed values are
written as latin-1 text, the way they appear in the input.

Usage::

    autojson-decode thing.avsc input.json
    cat input.json | autojson-decode --break-ambiguity thing.avsc
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import IO, Any

import ijson

from .datum import iter_datums
from .decoder import AutoJsonDecoder
from .errors import AutoJsonError
from .schema import Schema, parse_schema

logger = logging.getLogger(__name__)


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=_encode_bytes)


def _encode_bytes(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def decode_stream(
    schema: Schema,
    stream: IO,
    dest: IO[str],
    *,
    break_ambiguity: bool = False,
) -> int:
    """Decode every document in *stream*, writing one line each to *dest*.

    Returns the number of documents written.
    """
    decoder = AutoJsonDecoder.from_stream(schema, stream, break_ambiguity=break_ambiguity)
    count = 0
    for value in iter_datums(decoder):
        print(_to_json(value), file=dest)
        count += 1
    logger.info("decoded %d documents", count)
    return count


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autojson-decode",
        description="Decode JSON documents using only the reader's schema.",
    )
    parser.add_argument("schema", help="schema declaration file (Avro JSON syntax)")
    parser.add_argument("input", nargs="?", help="JSON input file (default: stdin)")
    parser.add_argument(
        "--break-ambiguity",
        action="store_true",
        help="prefer bare union values over wrapped ones instead of failing",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        with open(args.schema, encoding="utf-8") as fh:
            schema = parse_schema(fh.read())
    except (OSError, AutoJsonError) as exc:
        print(f"Error reading schema '{args.schema}': {exc}", file=sys.stderr)
        return 2

    try:
        if args.input is None:
            decode_stream(schema, sys.stdin.buffer, sys.stdout, break_ambiguity=args.break_ambiguity)
        else:
            with open(args.input, "rb") as fh:
                decode_stream(schema, fh, sys.stdout, break_ambiguity=args.break_ambiguity)
    except OSError as exc:
        print(f"Error reading '{args.input}': {exc}", file=sys.stderr)
        return 2
    except (AutoJsonError, ijson.JSONError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Tokens — the linearized form of one resolved JSON document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class Leaf:
    """Primitive payload: boolean, raw number, text, bytes, ordinal or count."""

    value: Any


@dataclass(frozen=True, slots=True)
class BranchIndex:
    index: int


@dataclass(frozen=True, slots=True)
class SkipMarker:
    """Opens an array or map.

    ``offset`` is the number of tokens after the marker, up to and including
    the collection's terminal zero count.
    """

    offset: int


Token = Union[Leaf, BranchIndex, SkipMarker]

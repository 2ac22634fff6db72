"""Token types produced by the template lexer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Literal:
    """Plain text copied to the output unchanged."""

    text: str


@dataclass(frozen=True)
class EnvRef:
    """Environment variable reference.

    ``braced`` records whether the reference was written as ``{%NAME%}``; the
    braces are consumed either way.
    """

    name: str
    braced: bool = False


@dataclass(frozen=True)
class ResultRef:
    """``{ID.FIELD}``: a field of a previously published result."""

    results_id: str
    field: str


@dataclass(frozen=True)
class IndexedResultRef:
    """``{ID.FIELD[N].SUB}``: a field of the N-th element of a result array.

    ``index`` keeps the raw bracket text; it is parsed when the reference is
    resolved so ``%NAME%`` may supply it.
    """

    results_id: str
    field: str
    index: str
    sub: str


@dataclass(frozen=True)
class KeyedResultRef:
    """``{ID.FIELD[$KEY$VALUE].SUB}``: a field of the first element whose KEY equals VALUE."""

    results_id: str
    field: str
    key: str
    value: str
    sub: str


@dataclass(frozen=True)
class ArchivePayloadRef:
    """``<a|b|c>``: local files whose bytes replace the whole string."""

    paths: Tuple[str, ...]


Token = Union[Literal, EnvRef, ResultRef, IndexedResultRef, KeyedResultRef]


__all__ = [
    "ArchivePayloadRef",
    "EnvRef",
    "IndexedResultRef",
    "KeyedResultRef",
    "Literal",
    "ResultRef",
    "Token",
]

"""Template resolution for command parameters."""

from .lexer import tokenize
from .payload import build_archive, parse_payload
from .resolver import resolve_params, resolve_string
from .tokens import ArchivePayloadRef, EnvRef, IndexedResultRef, KeyedResultRef, Literal, ResultRef

__all__ = [
    "ArchivePayloadRef",
    "EnvRef",
    "IndexedResultRef",
    "KeyedResultRef",
    "Literal",
    "ResultRef",
    "build_archive",
    "parse_payload",
    "resolve_params",
    "resolve_string",
    "tokenize",
]

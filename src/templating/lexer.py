"""Single-pass lexer for the directive language embedded in parameter strings.

A directive opens with ``{`` and closes at the first following ``}``.  ``{!``
is an escape: it yields a literal ``{`` and the text after it is scanned as
ordinary literal text.  Outside braces, ``%NAME%`` is an environment
reference.  Resolved values are concatenated by the resolver and never fed
back into the lexer, so a value containing markers cannot start a new
directive.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from contracts.errors import ResolutionError

from .tokens import EnvRef, IndexedResultRef, KeyedResultRef, Literal, ResultRef, Token

REP_START = "{"
REP_END = "}"
ESCAPE = "!"
ENV_MARKER = "%"
KV_MARKER = "$"

ENV_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
ENV_PATTERN = re.compile(rf"{ENV_MARKER}({ENV_NAME}){ENV_MARKER}")

_PART = r"[^.\[\]]+"
_SCALAR_BODY = re.compile(rf"({_PART})\.({_PART})")
_ARRAY_BODY = re.compile(rf"({_PART})\.({_PART})\[([^\[\]]*)\]\.({_PART})")


def _literal_tokens(segment: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    for match in ENV_PATTERN.finditer(segment):
        if match.start() > pos:
            tokens.append(Literal(segment[pos:match.start()]))
        tokens.append(EnvRef(match.group(1)))
        pos = match.end()
    if pos < len(segment):
        tokens.append(Literal(segment[pos:]))
    return tokens


def _malformed(body: str) -> ResolutionError:
    return ResolutionError(
        "directive.malformed",
        f"{REP_START}{body}{REP_END} (write '{REP_START}{ESCAPE}' for a literal brace)",
    )


def parse_directive(body: str) -> Token:
    """Classify the text between ``{`` and ``}``."""

    env = ENV_PATTERN.fullmatch(body)
    if env is not None:
        return EnvRef(env.group(1), braced=True)

    if "[" in body or "]" in body:
        array = _ARRAY_BODY.fullmatch(body)
        if array is None:
            raise _malformed(body)
        results_id, field, inner, sub = array.groups()
        # A key/value marker wins over anything that looks like an index.
        if KV_MARKER in inner:
            remainder = inner[inner.index(KV_MARKER) + 1:]
            key, sep, value = remainder.partition(KV_MARKER)
            if not key or not sep:
                raise _malformed(body)
            return KeyedResultRef(results_id, field, key, value, sub)
        return IndexedResultRef(results_id, field, inner, sub)

    scalar = _SCALAR_BODY.fullmatch(body)
    if scalar is None:
        raise _malformed(body)
    return ResultRef(*scalar.groups())


def tokenize(text: str) -> Tuple[Token, ...]:
    """Split ``text`` into literal, environment and result tokens."""

    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        start = text.find(REP_START, pos)
        if start < 0:
            tokens.extend(_literal_tokens(text[pos:]))
            break
        tokens.extend(_literal_tokens(text[pos:start]))
        if text.startswith(ESCAPE, start + 1):
            tokens.append(Literal(REP_START))
            pos = start + 2
            continue
        end = text.find(REP_END, start + 1)
        if end < 0:
            raise ResolutionError("directive.unterminated", text[start:])
        tokens.append(parse_directive(text[start + 1:end]))
        pos = end + 1
    return _merge_literals(tokens)


def _merge_literals(tokens: List[Token]) -> Tuple[Token, ...]:
    merged: List[Token] = []
    for token in tokens:
        if isinstance(token, Literal) and merged and isinstance(merged[-1], Literal):
            merged[-1] = Literal(merged[-1].text + token.text)
        else:
            merged.append(token)
    return tuple(merged)


def has_markers(text: str) -> bool:
    """Return ``True`` when ``text`` may contain anything besides literal text."""

    return REP_START in text or ENV_MARKER in text


__all__ = ["ENV_PATTERN", "has_markers", "parse_directive", "tokenize"]

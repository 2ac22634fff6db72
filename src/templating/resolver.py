"""Resolve templated command parameters against published results.

Every string leaf goes through three steps: environment references and result
directives are resolved left to right by rendering the lexer's tokens, then a
value that is entirely ``<path|...>`` is replaced by binary payload bytes.
Resolution never mutates its input; a new tree is returned.

All failures are fatal: a missing variable, an unpublished result, a missing
field, a bad index or an unmatched key raises :class:`ResolutionError`, and an
unreadable payload file raises :class:`ResourceError`.
"""

from __future__ import annotations

import os
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping, Sequence

from contracts.errors import ResolutionError, ResourceError
from contracts.jsoncanon import canonical_text

from . import payload
from .lexer import ENV_PATTERN, has_markers, tokenize
from .tokens import EnvRef, IndexedResultRef, KeyedResultRef, Literal, ResultRef, Token

_INDEX_PATTERN = re.compile(r"[0-9]+")


def render_value(value: Any) -> str:
    """Return the text form used when ``value`` is spliced into a string."""

    if value is None:
        raise ResolutionError("result.null_value")
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ResolutionError("result.binary_value", str(exc)) from exc
    try:
        return canonical_text(value)
    except (TypeError, ValueError) as exc:
        raise ResolutionError("result.unrenderable", f"{type(value).__name__}: {exc}") from exc


def _env(name: str, environ: Mapping[str, str]) -> str:
    if name not in environ:
        raise ResolutionError("env.missing", name)
    return environ[name]


def expand_env(text: str, environ: Mapping[str, str]) -> str:
    """Replace every ``%NAME%`` in ``text`` with its environment value."""

    return ENV_PATTERN.sub(lambda match: _env(match.group(1), environ), text)


def _published(results: Mapping[str, Any], results_id: str) -> Any:
    if results_id not in results:
        raise ResolutionError("result.unpublished", results_id)
    return results[results_id]


def _field(container: Any, name: str, where: str) -> Any:
    if not isinstance(container, Mapping) or name not in container:
        raise ResolutionError("result.missing_field", f"{where}.{name}")
    return container[name]


def _sequence(value: Any, where: str) -> Sequence[Any]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ResolutionError("result.not_a_sequence", where)
    return value


def _lookup(token: Token, results: Mapping[str, Any], environ: Mapping[str, str]) -> Any:
    results_id = expand_env(token.results_id, environ)
    field = expand_env(token.field, environ)
    where = f"{results_id}.{field}"
    value = _field(_published(results, results_id), field, results_id)
    if isinstance(token, ResultRef):
        return value

    items = _sequence(value, where)
    sub = expand_env(token.sub, environ)
    if isinstance(token, IndexedResultRef):
        raw_index = expand_env(token.index, environ)
        if not _INDEX_PATTERN.fullmatch(raw_index):
            raise ResolutionError("result.bad_index", f"{where}[{raw_index}]")
        index = int(raw_index, 10)
        if index >= len(items):
            raise ResolutionError("result.index_out_of_range", f"{where}[{index}] (length {len(items)})")
        return _field(items[index], sub, f"{where}[{index}]")

    key = expand_env(token.key, environ)
    wanted = expand_env(token.value, environ)
    for position, item in enumerate(items):
        if not isinstance(item, Mapping) or item.get(key) is None:
            continue
        candidate = item[key]
        if isinstance(candidate, (Mapping, list, tuple)):
            continue
        try:
            rendered = render_value(candidate)
        except ResolutionError:
            continue
        if rendered == wanted:
            return _field(item, sub, f"{where}[{position}]")
    raise ResolutionError("result.no_match", f"{where}[${key}${wanted}]")


def _render_token(token: Token, results: Mapping[str, Any], environ: Mapping[str, str]) -> str:
    if isinstance(token, Literal):
        return token.text
    if isinstance(token, EnvRef):
        return _env(token.name, environ)
    return render_value(_lookup(token, results, environ))


def resolve_string(
    text: str,
    results: Mapping[str, Any],
    *,
    environ: Mapping[str, str] | None = None,
    base_dir: Path | None = None,
) -> str | bytes:
    """Resolve a single parameter string.

    Returns text, or bytes when the resolved value names a binary payload.
    """

    env = os.environ if environ is None else environ
    resolved = text
    if has_markers(text):
        resolved = "".join(_render_token(token, results, env) for token in tokenize(text))
    ref = payload.parse_payload(resolved)
    if ref is not None:
        return payload.materialise(ref, base_dir)
    return resolved


def _child_path(path: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}"


def _walk(node: Any, path: str, results: Mapping[str, Any], environ: Mapping[str, str] | None, base_dir: Path | None) -> Any:
    if isinstance(node, str):
        try:
            return resolve_string(node, results, environ=environ, base_dir=base_dir)
        except (ResolutionError, ResourceError) as exc:
            if exc.path is None:
                raise type(exc)(exc.code, exc.detail, path=path) from exc
            raise
    if isinstance(node, Mapping):
        return {key: _walk(value, _child_path(path, key), results, environ, base_dir) for key, value in node.items()}
    if isinstance(node, (list, tuple)):
        return [_walk(item, _child_path(path, index), results, environ, base_dir) for index, item in enumerate(node)]
    return node


def resolve_params(
    params: Any,
    results: Mapping[str, Any],
    *,
    environ: Mapping[str, str] | None = None,
    base_dir: Path | None = None,
) -> Any:
    """Return a resolved copy of ``params``; the input tree is left untouched."""

    return _walk(params, "$", results, environ, base_dir)


__all__ = ["expand_env", "render_value", "resolve_params", "resolve_string"]

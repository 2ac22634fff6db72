"""Static cross-reference checks for command files.

Finds problems that would otherwise abort a run half way through: directives
that do not parse, references to results that are never published or only
published later, and unset environment variables.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Tuple

from templating.lexer import ENV_MARKER, has_markers, tokenize
from templating.payload import parse_payload
from templating.tokens import EnvRef, IndexedResultRef, KeyedResultRef, ResultRef

from .command_file import CommandFile
from .errors import CommandError, ValidationIssue, ValidationReport, make_error, make_warning

_RESULT_TOKENS = (ResultRef, IndexedResultRef, KeyedResultRef)


def _strings(node: Any, path: str) -> Iterator[Tuple[str, str]]:
    if isinstance(node, str):
        yield path, node
    elif isinstance(node, Mapping):
        for key, value in node.items():
            yield from _strings(value, f"{path}.{key}")
    elif isinstance(node, (list, tuple)):
        for index, item in enumerate(node):
            yield from _strings(item, f"{path}[{index}]")


def _check_string(
    text: str,
    path: str,
    own_id: str,
    published: set[str],
    declared: Mapping[str, int],
    environ: Mapping[str, str] | None,
    base_dir: Path,
) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    try:
        tokens = tokenize(text)
    except CommandError as exc:
        return [make_error(exc.code, exc.detail or str(exc), path)]

    for token in tokens:
        if isinstance(token, EnvRef):
            if environ is not None and token.name not in environ:
                issues.append(make_warning("env.unset", f"environment variable {token.name} is not set", path))
            continue
        if not isinstance(token, _RESULT_TOKENS):
            continue
        results_id = token.results_id
        if ENV_MARKER in results_id:
            issues.append(make_warning("reference.dynamic", f"resultsID {results_id!r} depends on the environment", path))
        elif results_id == own_id:
            issues.append(make_error("reference.self", f"command references its own result {results_id!r}", path))
        elif results_id in published:
            continue
        elif results_id in declared:
            issues.append(
                make_error(
                    "reference.forward",
                    f"{results_id!r} is published later, by command {declared[results_id]}",
                    path,
                )
            )
        else:
            issues.append(make_error("reference.unknown", f"no command publishes {results_id!r}", path))

    if not has_markers(text):
        try:
            ref = parse_payload(text)
        except CommandError as exc:
            return issues + [make_error(exc.code, exc.detail or str(exc), path)]
        if ref is not None:
            for raw in ref.paths:
                candidate = Path(raw) if Path(raw).is_absolute() else base_dir / raw
                if not candidate.exists():
                    issues.append(make_warning("payload.missing", f"{candidate} does not exist", path))
    return issues


def check_refs(
    command_file: CommandFile,
    *,
    environ: Mapping[str, str] | None = None,
    base_dir: Path | None = None,
) -> ValidationReport:
    """Check every directive of ``command_file`` without calling anything."""

    started = time.perf_counter()
    root = base_dir if base_dir is not None else Path.cwd()
    declared = {command.results_id: index for index, command in enumerate(command_file.commands)}
    published: set[str] = set()
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    for index, command in enumerate(command_file.commands):
        for path, text in _strings(command.params, f"$.commands[{index}].params"):
            for issue in _check_string(text, path, command.results_id, published, declared, environ, root):
                (warnings if issue.severity == "WARN" else errors).append(issue)
        published.add(command.results_id)

    timings = {"crossrefs": int((time.perf_counter() - started) * 1000)}
    return ValidationReport(ok=not errors, errors=errors, warnings=warnings, timings_ms=timings)


__all__ = ["check_refs"]

"""Post-invocation checks of declared ``expectedResults``."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from contracts.errors import ExpectationError, ExpectationMismatch
from contracts.jsoncanon import canonical_text

_MISSING = object()


def _canonical(value: Any) -> str:
    try:
        return canonical_text(value)
    except (TypeError, ValueError):
        # Values JSON cannot express never compare equal to an expectation.
        return f"<unserialisable {type(value).__name__}>"


def compare(expected: Optional[Mapping[str, Any]], result: Any) -> List[ExpectationMismatch]:
    """Return one mismatch per expected property whose canonical JSON differs.

    Only the named properties are compared; a property missing from the result
    never matches, not even an expected ``null``.
    """

    mismatches: List[ExpectationMismatch] = []
    if not expected:
        return mismatches

    for name, want in expected.items():
        wanted = canonical_text(want)
        actual = result.get(name, _MISSING) if isinstance(result, Mapping) else _MISSING
        if actual is _MISSING:
            mismatches.append(ExpectationMismatch(name=name, expected=wanted, actual=None))
            continue
        actual_text = _canonical(actual)
        if actual_text != wanted:
            mismatches.append(ExpectationMismatch(name=name, expected=wanted, actual=actual_text))
    return mismatches


def verify(results_id: str, expected: Optional[Mapping[str, Any]], result: Any) -> None:
    """Raise :class:`ExpectationError` when ``result`` does not meet ``expected``."""

    mismatches = compare(expected, result)
    if mismatches:
        raise ExpectationError(results_id, mismatches)


__all__ = ["compare", "verify"]

"""JSON Canonicalization Scheme (JCS) helpers.

This module implements a tiny subset of RFC 8785 that is sufficient for
comparing API results with declared expectations and for rendering looked-up
values into templates.  Objects are transformed into their canonical
representation by recursively sorting dictionary keys, normalising numbers,
and emitting UTF-8 encoded bytes without superfluous whitespace.

SDK responses carry a few types JSON does not know about.  ``Decimal`` is
treated as a number, ``date``/``datetime`` become ISO 8601 strings and binary
payloads are decoded as UTF-8 (base64 when they are not valid UTF-8).
"""

from __future__ import annotations

import base64
import json
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any

__all__ = ["canonical_text", "jcs_dump"]


def _canonical_number(value: float) -> str:
    """Return the ECMAScript-compatible canonical string for ``value``.

    The implementation mirrors the algorithm from RFC 8785 §3.2.3.  We rely on
    :func:`decimal.Decimal` for deterministic conversion and then format the
    number using the shortest representation that round-trips back to the
    original float.
    """

    if math.isnan(value) or math.isinf(value):
        raise ValueError("NaN and Infinity are not permitted in JCS payloads")

    if value == 0:
        # Normalise both +0.0 and -0.0 to "0"
        return "0"

    decimal_value = Decimal(repr(value))
    normalized = format(decimal_value.normalize(), "f")
    if "E" in normalized or "e" in normalized:
        normalized = format(decimal_value.normalize(), "e")
    if normalized.endswith(".0"):
        normalized = normalized[:-2]
    return normalized


def _binary_text(value: bytes) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return base64.b64encode(value).decode("ascii")


def _canonicalize(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, int):
        return obj
    if isinstance(obj, Decimal):
        if not obj.is_finite():
            raise ValueError("NaN and Infinity are not permitted in JCS payloads")
        if obj == obj.to_integral_value():
            return int(obj)
        return json.loads(_canonical_number(float(obj)))
    if isinstance(obj, float):
        return json.loads(_canonical_number(obj))
    if isinstance(obj, str):
        return obj
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return _binary_text(bytes(obj))
    if isinstance(obj, (list, tuple)):
        return [_canonicalize(item) for item in obj]
    if isinstance(obj, dict):
        canonical_dict = {}
        for key in sorted(obj.keys(), key=str):
            value = obj[key]
            canonical_dict[str(key)] = _canonicalize(value)
        return canonical_dict
    raise TypeError(f"Unsupported type for JCS canonicalisation: {type(obj)!r}")


def jcs_dump(obj: Any) -> bytes:
    """Return canonical JCS bytes for ``obj``.

    The output is encoded as UTF-8 and guaranteed to be stable for supported
    inputs.  Unsupported value types raise :class:`TypeError`.
    """

    canonical = _canonicalize(obj)
    dumped = json.dumps(
        canonical,
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    )
    return dumped.encode("utf-8")


def canonical_text(obj: Any) -> str:
    """Return the canonical JSON text for ``obj``."""

    return jcs_dump(obj).decode("utf-8")


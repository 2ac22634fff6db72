from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from contracts.jsoncanon import canonical_text, jcs_dump


def test_canonical_order_and_numbers():
    payload_a = {"b": 2, "a": 1.0}
    payload_b = {"a": 1, "b": 2}
    assert jcs_dump(payload_a) == jcs_dump(payload_b)
    assert canonical_text(payload_a) == '{"a":1,"b":2}'


def test_rejects_nan():
    import math
    import pytest

    with pytest.raises(ValueError):
        jcs_dump({"value": math.nan})


def test_sdk_value_types():
    moment = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    payload = {"size": Decimal("10"), "ratio": Decimal("0.5"), "at": moment, "body": b"ok"}
    assert canonical_text(payload) == '{"at":"2024-05-01T12:30:00+00:00","body":"ok","ratio":0.5,"size":10}'


def test_unsupported_type_raises_type_error():
    import pytest

    with pytest.raises(TypeError):
        jcs_dump({"value": object()})

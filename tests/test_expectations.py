from __future__ import annotations

from decimal import Decimal

import pytest

from contracts.errors import ExpectationError
from orchestrator.expectations import compare, verify


def test_empty_expectations_pass() -> None:
    assert compare(None, {"a": 1}) == []
    assert compare({}, "anything") == []


def test_canonical_comparison_ignores_key_order_and_number_form() -> None:
    result = {"Config": {"b": 2, "a": 1.0}, "Size": Decimal("10"), "Extra": "ignored"}
    assert compare({"Config": {"a": 1, "b": 2}, "Size": 10}, result) == []


def test_mismatch_reports_both_sides() -> None:
    (mismatch,) = compare({"State": "Active"}, {"State": "Pending"})
    assert mismatch.name == "State"
    assert mismatch.expected == '"Active"'
    assert mismatch.actual == '"Pending"'


def test_missing_property_never_matches() -> None:
    (mismatch,) = compare({"Gone": None}, {"Other": 1})
    assert mismatch.actual is None


def test_non_mapping_result_fails_every_property() -> None:
    assert [m.name for m in compare({"a": 1, "b": 2}, ["a"])] == ["a", "b"]


def test_verify_raises_with_all_mismatches() -> None:
    with pytest.raises(ExpectationError) as excinfo:
        verify("fn", {"a": 1, "b": 2}, {"a": 2, "b": 3})
    assert excinfo.value.code == "expectation.mismatch"
    assert [m.name for m in excinfo.value.mismatches] == ["a", "b"]


def test_verify_accepts_matching_result() -> None:
    verify("fn", {"Runtime": "nodejs18.x"}, {"Runtime": "nodejs18.x", "Other": True})

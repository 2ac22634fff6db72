"""Shared error types for command loading, resolution and invocation."""

from __future__ import annotations


from dataclasses import dataclass, field
from typing import Any, List, Sequence

SEVERITY_ERROR = "ERROR"
SEVERITY_WARN = "WARN"


@dataclass(frozen=True)
class ValidationIssue:
    """Single finding produced while checking a command file."""

    code: str
    msg: str
    path: str
    severity: str


@dataclass(frozen=True)
class ValidationReport:
    """Aggregate result of checking a command file."""

    ok: bool
    errors: List[ValidationIssue]
    warnings: List[ValidationIssue]
    timings_ms: dict[str, int] = field(default_factory=dict)


def make_error(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct an error-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_ERROR)


def make_warning(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct a warning-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_WARN)


class CommandError(RuntimeError):
    """Base class for every error that aborts a command run.

    ``code`` is a stable dotted identifier (``result.unpublished``), ``detail``
    a human readable hint and ``path`` the JSON path of the offending
    parameter when one is known.
    """

    def __init__(self, code: str, detail: str | None = None, *, path: str | None = None) -> None:
        self.code = code
        self.detail = detail
        self.path = path
        message = code if detail is None else f"{code}:{detail}"
        if path:
            message = f"{message} (at {path})"
        super().__init__(message)


class ResolutionError(CommandError):
    """A directive could not be resolved against the environment or results."""


class ResourceError(CommandError):
    """A local file named by a binary payload could not be read."""


class InvocationError(CommandError):
    """The invocation collaborator rejected or failed a call."""


@dataclass(frozen=True)
class ExpectationMismatch:
    """One expected property that did not match the returned result."""

    name: str
    expected: str
    actual: str | None


class ExpectationError(CommandError):
    """A completed call returned a result that does not match expectations."""

    def __init__(self, results_id: str, mismatches: Sequence[ExpectationMismatch]) -> None:
        self.mismatches = list(mismatches)
        names = ", ".join(item.name for item in self.mismatches)
        super().__init__("expectation.mismatch", f"{results_id}: {names}")


class ConfigError(CommandError):
    """The command file or the invoker configuration is unusable."""

    def __init__(
        self,
        code: str,
        detail: str | None = None,
        *,
        path: str | None = None,
        report: ValidationReport | None = None,
    ) -> None:
        self.report = report
        super().__init__(code, detail, path=path)


def describe(exc: BaseException) -> dict[str, Any]:
    """Return a JSON-friendly summary of ``exc`` for logs and reports."""

    payload: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, CommandError):
        payload["code"] = exc.code
        if exc.path:
            payload["path"] = exc.path
    if isinstance(exc, ExpectationError):
        payload["mismatches"] = [
            {"name": item.name, "expected": item.expected, "actual": item.actual}
            for item in exc.mismatches
        ]
    return payload


__all__ = [
    "SEVERITY_ERROR",
    "SEVERITY_WARN",
    "CommandError",
    "ConfigError",
    "ExpectationError",
    "ExpectationMismatch",
    "InvocationError",
    "ResolutionError",
    "ResourceError",
    "ValidationIssue",
    "ValidationReport",
    "describe",
    "make_error",
    "make_warning",
]

"""Shared contracts: error taxonomy, canonical JSON and command-file validation."""

from __future__ import annotations

from .errors import (
    CommandError,
    ConfigError,
    ExpectationError,
    InvocationError,
    ResolutionError,
    ResourceError,
    ValidationIssue,
    ValidationReport,
)
from .jsoncanon import canonical_text, jcs_dump

__all__ = [
    "CommandError",
    "ConfigError",
    "ExpectationError",
    "InvocationError",
    "ResolutionError",
    "ResourceError",
    "ValidationIssue",
    "ValidationReport",
    "canonical_text",
    "jcs_dump",
]

"""Command and run-report definitions for the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from contracts.command_file import Command
from contracts.errors import CommandError

STATUS_OK = "ok"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"


@dataclass(frozen=True)
class CommandOutcome:
    """What happened to one command during a run."""

    index: int
    results_id: str
    status: str
    error: Optional[CommandError] = None
    duration_ms: int = 0


@dataclass
class RunReport:
    """Container for a finished run."""

    run_id: str
    ok: bool
    outcomes: Tuple[CommandOutcome, ...] = ()
    results: Mapping[str, Any] = field(default_factory=dict)
    failed_index: Optional[int] = None

    @property
    def error(self) -> Optional[CommandError]:
        if self.failed_index is None:
            return None
        return self.outcomes[self.failed_index].error


__all__ = [
    "Command",
    "CommandOutcome",
    "RunReport",
    "STATUS_FAILED",
    "STATUS_OK",
    "STATUS_SKIPPED",
]

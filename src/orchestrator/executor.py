"""Sequential execution of command lists."""

from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from contracts.errors import CommandError, InvocationError, describe
from templating import resolve_params

from . import expectations, log
from .store import ResultStore
from .task import STATUS_FAILED, STATUS_OK, STATUS_SKIPPED, Command, CommandOutcome, RunReport

_LOGGER = logging.getLogger(__name__)

EventSink = Callable[[Dict[str, Any]], Any]


class Invoker(Protocol):
    """Anything able to perform a named remote call."""

    def invoke(self, object_type: str, method: str, params: Mapping[str, Any]) -> Any:
        """Perform ``object_type.method`` with resolved ``params`` and return its result."""


class Executor(Protocol):
    """Abstract execution backend."""

    def submit(self, commands: Sequence[Command]) -> RunReport:
        """Run a command list and report the outcome."""


def summarise(node: Any) -> Any:
    """Return ``node`` with binary payloads replaced by a short marker."""

    if isinstance(node, (bytes, bytearray)):
        return f"<bytes:{len(node)}>"
    if isinstance(node, Mapping):
        return {str(key): summarise(value) for key, value in node.items()}
    if isinstance(node, (list, tuple)):
        return [summarise(item) for item in node]
    return node


class SequentialExecutor:
    """Runs commands one at a time, threading results forward.

    Command ``i + 1`` is never resolved before command ``i`` has returned, so
    every directive sees all results published before it.  The first failure
    of any kind stops the run; the remaining commands are reported as
    skipped and never invoked.
    """

    def __init__(
        self,
        invoker: Invoker,
        *,
        environ: Mapping[str, str] | None = None,
        base_dir: Path | None = None,
        event_sink: EventSink | None = None,
        run_id: str | None = None,
    ) -> None:
        self.invoker = invoker
        self.environ = environ if environ is not None else os.environ
        self.base_dir = base_dir
        self.event_sink = event_sink or log.append_event
        self.run_id = run_id or f"run-{uuid.uuid4().hex[:12]}"

    def _emit(self, event: str, **fields: Any) -> None:
        try:
            self.event_sink({"event": event, "run_id": self.run_id, **fields})
        except (OSError, TypeError, ValueError) as exc:
            _LOGGER.warning("dropped %s event for %s: %s", event, self.run_id, exc)

    def _invoke(self, command: Command, params: Mapping[str, Any]) -> Any:
        try:
            return self.invoker.invoke(command.object_type, command.method, params)
        except CommandError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise InvocationError("invoke.failed", f"{command.capability}: {exc}") from exc

    def _execute(self, index: int, command: Command, store: ResultStore) -> None:
        params = resolve_params(command.params, store, environ=self.environ, base_dir=self.base_dir)
        shown = summarise(params)
        _LOGGER.info("[%d] %s -> %s params=%s", index, command.capability, command.results_id, shown)
        self._emit(
            "command.started",
            index=index,
            results_id=command.results_id,
            capability=command.capability,
            params=shown,
        )

        result = self._invoke(command, params)
        _LOGGER.debug("[%d] %s returned %s", index, command.capability, result)
        store.publish(command.results_id, result)
        expectations.verify(command.results_id, command.expected_results, result)

    def submit(self, commands: Sequence[Command]) -> RunReport:
        store = ResultStore()
        outcomes: List[CommandOutcome] = []
        failed_index: Optional[int] = None
        self._emit("run.started", commands=len(commands))

        for index, command in enumerate(commands):
            started = time.perf_counter()
            try:
                self._execute(index, command, store)
            except CommandError as exc:
                duration_ms = int((time.perf_counter() - started) * 1000)
                _LOGGER.error("[%d] %s failed: %s", index, command.capability, exc)
                self._emit(
                    "command.failed",
                    index=index,
                    results_id=command.results_id,
                    duration_ms=duration_ms,
                    error=describe(exc),
                )
                outcomes.append(CommandOutcome(index, command.results_id, STATUS_FAILED, exc, duration_ms))
                failed_index = index
                break

            duration_ms = int((time.perf_counter() - started) * 1000)
            self._emit("command.completed", index=index, results_id=command.results_id, duration_ms=duration_ms)
            outcomes.append(CommandOutcome(index, command.results_id, STATUS_OK, None, duration_ms))

        if failed_index is not None:
            for index in range(failed_index + 1, len(commands)):
                self._emit("command.skipped", index=index, results_id=commands[index].results_id)
                outcomes.append(CommandOutcome(index, commands[index].results_id, STATUS_SKIPPED))

        ok = failed_index is None
        self._emit("run.finished", ok=ok, published=list(store.ids()))
        return RunReport(
            run_id=self.run_id,
            ok=ok,
            outcomes=tuple(outcomes),
            results=store,
            failed_index=failed_index,
        )


__all__ = ["EventSink", "Executor", "Invoker", "SequentialExecutor", "summarise"]

"""Append-only store of published command results."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Tuple

from contracts.errors import CommandError


class ResultStore(Mapping[str, Any]):
    """Maps ``resultsID`` to the raw result returned by that command.

    Entries are only ever added, one per successful invocation, in command
    order.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def publish(self, results_id: str, result: Any) -> None:
        if results_id in self._entries:
            raise CommandError("store.duplicate_results_id", results_id)
        self._entries[results_id] = result

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def __getitem__(self, results_id: str) -> Any:
        return self._entries[results_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ResultStore({list(self._entries)!r})"


__all__ = ["ResultStore"]

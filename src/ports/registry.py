"""Capability registry mapping ``objectType.method`` to invocation handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Protocol, Tuple

from contracts.errors import CommandError, ConfigError, InvocationError

Handler = Callable[[Mapping[str, Any]], Any]


class Binder(Protocol):
    """Produces the handler for one capability, or raises when it cannot."""

    def bind(self, object_type: str, method: str) -> Handler:
        ...


@dataclass(frozen=True)
class Capability:
    """Description of a registered remote operation."""

    object_type: str
    method: str
    handler: Handler
    source: str

    @property
    def name(self) -> str:
        return f"{self.object_type}.{self.method}"


class CapabilityRegistry:
    """Explicit table of the operations a run is allowed to call.

    The registry implements the executor's invoker protocol, so a run can only
    reach what was registered up front.
    """

    def __init__(self) -> None:
        self._capabilities: Dict[Tuple[str, str], Capability] = {}

    def register(self, object_type: str, method: str, handler: Handler, *, source: str = "manual") -> Capability:
        key = (object_type, method)
        if key in self._capabilities:
            raise ConfigError("registry.duplicate", f"{object_type}.{method}")
        capability = Capability(object_type=object_type, method=method, handler=handler, source=source)
        self._capabilities[key] = capability
        return capability

    def get(self, object_type: str, method: str) -> Capability:
        try:
            return self._capabilities[(object_type, method)]
        except KeyError:
            raise InvocationError("capability.unregistered", f"{object_type}.{method}") from None

    def invoke(self, object_type: str, method: str, params: Mapping[str, Any]) -> Any:
        return self.get(object_type, method).handler(params)

    def capabilities(self) -> List[Capability]:
        return list(self._capabilities.values())

    def __contains__(self, key: object) -> bool:
        return key in self._capabilities

    def __len__(self) -> int:
        return len(self._capabilities)


def build_registry(commands: Iterable[Any], binder: Binder, *, source: str = "binder") -> CapabilityRegistry:
    """Register every distinct capability used by ``commands``.

    Binding happens once, before anything runs, so an unknown service or
    operation is reported as a configuration error instead of surfacing in the
    middle of a run.
    """

    registry = CapabilityRegistry()
    for command in commands:
        key = (command.object_type, command.method)
        if key in registry:
            continue
        try:
            handler = binder.bind(command.object_type, command.method)
        except CommandError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ConfigError("registry.bind_failed", f"{command.object_type}.{command.method}: {exc}") from exc
        registry.register(command.object_type, command.method, handler, source=source)
    return registry


__all__ = ["Binder", "Capability", "CapabilityRegistry", "Handler", "build_registry"]

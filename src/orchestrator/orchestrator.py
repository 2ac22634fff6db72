"""Run entry points (command file → registry → sequential run)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from contracts.command_file import load_command_file
from ports import AwsPort, InvokerConfig, build_registry, resolve_invoker_config
from ports._utils import build_env

from .executor import EventSink, Invoker, SequentialExecutor
from .task import Command, RunReport

_LOGGER = logging.getLogger(__name__)

PortFactory = Callable[[InvokerConfig], Any]


def run_commands(
    commands: Sequence[Command],
    invoker: Invoker,
    *,
    environ: Mapping[str, str] | None = None,
    base_dir: Path | None = None,
    event_sink: EventSink | None = None,
    run_id: str | None = None,
) -> RunReport:
    """Execute ``commands`` in order and return the full report."""

    executor = SequentialExecutor(
        invoker,
        environ=environ,
        base_dir=base_dir,
        event_sink=event_sink,
        run_id=run_id,
    )
    report = executor.submit(commands)
    if report.ok:
        _LOGGER.info("run %s finished: %d command(s) ok", report.run_id, len(report.outcomes))
    else:
        _LOGGER.error("run %s aborted at command %s", report.run_id, report.failed_index)
    return report


def run(commands: Sequence[Command], invoker: Invoker, **options: Any) -> bool:
    """Execute ``commands`` and return ``True`` when every command succeeded."""

    return run_commands(commands, invoker, **options).ok


def run_file(
    path: str | Path,
    *,
    env_overrides: Mapping[str, str] | None = None,
    port_factory: Optional[PortFactory] = None,
    event_sink: EventSink | None = None,
    base_dir: Path | None = None,
) -> RunReport:
    """Load the command file at ``path`` and run it against a freshly bound port.

    Configuration problems (unreadable or invalid file, unknown service or
    operation) raise :class:`contracts.errors.ConfigError` before anything is
    invoked.
    """

    env_map = build_env(env_overrides)
    command_file = load_command_file(path)
    config = resolve_invoker_config(command_file.api_versions, env_map)
    _LOGGER.debug("invoker config: %s", config)

    factory = port_factory or AwsPort
    registry = build_registry(command_file.commands, factory(config), source=getattr(factory, "__name__", "port"))
    return run_commands(
        command_file.commands,
        registry,
        environ=env_map,
        base_dir=base_dir,
        event_sink=event_sink,
    )


__all__ = ["PortFactory", "run", "run_commands", "run_file"]

"""Command orchestrator: result store, sequential executor and run entry points."""

from .executor import Executor, Invoker, SequentialExecutor
from .store import ResultStore
from .task import Command, CommandOutcome, RunReport
from .orchestrator import run, run_commands, run_file

__all__ = [
    "Command",
    "CommandOutcome",
    "Executor",
    "Invoker",
    "ResultStore",
    "RunReport",
    "SequentialExecutor",
    "run",
    "run_commands",
    "run_file",
]

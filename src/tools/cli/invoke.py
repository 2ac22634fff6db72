"""Command line entry point: run or check a command file."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from contracts.command_file import load_command_file
from contracts.errors import ConfigError, ValidationReport, describe
from contracts.refcheck import check_refs
from orchestrator import log
from orchestrator.orchestrator import run_file
from orchestrator.task import RunReport
from ports._utils import build_env


def _cli_overrides(args: argparse.Namespace) -> Dict[str, str]:
    payload: Dict[str, str] = {}
    if getattr(args, "region", None):
        payload["CLI_AWS_REGION"] = args.region
    if getattr(args, "profile", None):
        payload["CLI_AWS_PROFILE"] = args.profile
    if getattr(args, "connect_timeout", None) is not None:
        payload["CLI_INVOKER_CONNECT_TIMEOUT"] = str(args.connect_timeout)
    if getattr(args, "read_timeout", None) is not None:
        payload["CLI_INVOKER_READ_TIMEOUT"] = str(args.read_timeout)
    return payload


def _report_payload(report: ValidationReport) -> Dict[str, Any]:
    return {
        "ok": report.ok,
        "errors": [asdict(issue) for issue in report.errors],
        "warnings": [asdict(issue) for issue in report.warnings],
    }


def _config_failure(exc: ConfigError) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"ok": False, "error": describe(exc)}
    if exc.report is not None:
        payload.update(_report_payload(exc.report))
        payload["ok"] = False
    return payload


def _run_summary(report: RunReport) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "run_id": report.run_id,
        "ok": report.ok,
        "outcomes": [
            {
                "index": outcome.index,
                "results_id": outcome.results_id,
                "status": outcome.status,
                "duration_ms": outcome.duration_ms,
            }
            for outcome in report.outcomes
        ],
    }
    if report.error is not None:
        summary["failed_index"] = report.failed_index
        summary["error"] = describe(report.error)
    log_path = log.current_log_path()
    if log_path is not None:
        summary["log"] = str(log_path)
    return summary


def _print(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def cmd_run(args: argparse.Namespace) -> int:
    if args.log_dir:
        log.configure(args.log_dir)
    try:
        report = run_file(args.config, env_overrides=_cli_overrides(args))
    except ConfigError as exc:
        _print(_config_failure(exc))
        return 1
    _print(_run_summary(report))
    return 0 if report.ok else 1


def cmd_check(args: argparse.Namespace) -> int:
    try:
        command_file = load_command_file(args.config)
    except ConfigError as exc:
        _print(_config_failure(exc))
        return 1
    report = check_refs(command_file, environ=build_env())
    _print(_report_payload(report))
    return 0 if report.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Execute a sequence of API commands whose parameters may reference earlier results.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic log level written to stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run every command of a command file in order")
    run.add_argument("config", type=Path, help="Command file (.json or .toml)")
    run.add_argument("--region", help="AWS region. Overrides AWS_REGION and config.toml.")
    run.add_argument("--profile", help="AWS credentials profile. Overrides AWS_PROFILE.")
    run.add_argument("--connect-timeout", type=float, help="Connect timeout in seconds.")
    run.add_argument("--read-timeout", type=float, help="Read timeout in seconds.")
    run.add_argument("--log-dir", help="Directory for JSONL run events (defaults to [log].dir).")
    run.set_defaults(func=cmd_run)

    check = sub.add_parser("check", help="Validate a command file and its references without calling anything")
    check.add_argument("config", type=Path, help="Command file (.json or .toml)")
    check.set_defaults(func=cmd_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


__all__ = ["build_parser", "main"]


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())

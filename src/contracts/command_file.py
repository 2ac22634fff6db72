"""Loading and structural validation of command files.

A command file is a JSON (or TOML) document::

    {
      "apiVersions": {"lambda": "2015-03-31"},
      "commands": [
        {"objectType": "Lambda", "method": "createFunction",
         "params": {...}, "resultsID": "fn", "expectedResults": {...}}
      ]
    }

Only the command records are validated; the contents of ``params`` are passed
to the remote API as they are.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import jsonschema

from .errors import ConfigError, ValidationIssue, ValidationReport, make_error, make_warning

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import-untyped]

_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "command_file.schema.json"


@dataclass(frozen=True)
class Command:
    """One remote call taken from a command file.

    ``params`` holds the templated form.  It is never rewritten: resolution
    produces a separate tree for every attempt.
    """

    object_type: str
    method: str
    params: Mapping[str, Any]
    results_id: str
    expected_results: Optional[Mapping[str, Any]] = None

    @property
    def capability(self) -> str:
        return f"{self.object_type}.{self.method}"


@dataclass(frozen=True)
class CommandFile:
    """Parsed command file."""

    commands: Tuple[Command, ...]
    api_versions: Mapping[str, str] = field(default_factory=dict)
    source: Path | None = None


@lru_cache(maxsize=1)
def load_schema() -> Dict[str, Any]:
    """Load the command-file JSON schema shipped with the package."""

    return json.loads(_SCHEMA_PATH.read_text("utf-8"))


@lru_cache(maxsize=1)
def _compiled_validator() -> Any:
    schema = load_schema()
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _jsonschema_path(exc: jsonschema.ValidationError) -> str:
    components: List[str] = ["$"]
    for part in exc.absolute_path:
        if isinstance(part, int):
            components.append(f"[{part}]")
        else:
            components.append(f".{part}")
    return "".join(components)


def _semantic_checks(document: Mapping[str, Any]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    commands = document.get("commands", [])
    if not commands:
        issues.append(make_warning("commands.empty", "command list is empty", "$.commands"))

    seen: Dict[str, int] = {}
    for index, command in enumerate(commands):
        results_id = command["resultsID"]
        if results_id in seen:
            issues.append(
                make_error(
                    "command.duplicate_results_id",
                    f"resultsID {results_id!r} already used by command {seen[results_id]}",
                    f"$.commands[{index}].resultsID",
                )
            )
        else:
            seen[results_id] = index
    return issues


def validate_document(document: Any) -> ValidationReport:
    """Check ``document`` against the schema and the uniqueness rules."""

    started = time.perf_counter()
    validator = _compiled_validator()
    errors: List[ValidationIssue] = [
        make_error("schema.violation", exc.message, _jsonschema_path(exc))
        for exc in sorted(validator.iter_errors(document), key=_jsonschema_path)
    ]
    warnings: List[ValidationIssue] = []
    if not errors:
        for issue in _semantic_checks(document):
            (warnings if issue.severity == "WARN" else errors).append(issue)
    timings = {"schema": int((time.perf_counter() - started) * 1000)}
    return ValidationReport(ok=not errors, errors=errors, warnings=warnings, timings_ms=timings)


def _build_command(raw: Mapping[str, Any]) -> Command:
    expected = raw.get("expectedResults")
    return Command(
        object_type=raw["objectType"],
        method=raw["method"],
        params=raw.get("params", {}),
        results_id=raw["resultsID"],
        expected_results=expected if expected else None,
    )


def parse_document(document: Any, *, source: Path | None = None) -> CommandFile:
    """Validate ``document`` and turn it into a :class:`CommandFile`."""

    report = validate_document(document)
    if not report.ok:
        codes = ", ".join(f"{issue.path}: {issue.msg}" for issue in report.errors[:3])
        if len(report.errors) > 3:
            codes += ", …"
        raise ConfigError("config.invalid", codes, report=report)

    commands = tuple(_build_command(raw) for raw in document["commands"])
    api_versions = {str(k): str(v) for k, v in document.get("apiVersions", {}).items()}
    return CommandFile(commands=commands, api_versions=api_versions, source=source)


def read_document(path: str | Path) -> Any:
    """Read a JSON or TOML command document from ``path``."""

    location = Path(path)
    try:
        raw = location.read_bytes()
    except FileNotFoundError as exc:
        raise ConfigError("config.not_found", str(location)) from exc
    except OSError as exc:
        raise ConfigError("config.unreadable", f"{location}: {exc.strerror or exc}") from exc

    if location.suffix.lower() == ".toml":
        try:
            return tomllib.loads(raw.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigError("config.bad_toml", f"{location}: {exc}") from exc
    try:
        return json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError("config.bad_json", f"{location}: {exc}") from exc


def load_command_file(path: str | Path) -> CommandFile:
    """Read, validate and parse the command file at ``path``."""

    return parse_document(read_document(path), source=Path(path))


__all__ = [
    "Command",
    "CommandFile",
    "load_command_file",
    "load_schema",
    "parse_document",
    "read_document",
    "validate_document",
]

from __future__ import annotations

from pathlib import Path

from contracts.command_file import parse_document
from contracts.refcheck import check_refs


def _file(*commands: dict):
    return parse_document({"commands": list(commands)})


def _command(results_id: str, params: dict | None = None) -> dict:
    return {"objectType": "Lambda", "method": "invoke", "params": params or {}, "resultsID": results_id}


def _codes(issues) -> list[str]:
    return [issue.code for issue in issues]


def test_backward_references_are_fine(tmp_path: Path) -> None:
    command_file = _file(
        _command("a"),
        _command("b", {"X": "{a.Id}", "Y": ["{a.Items[0].Name}", "{a.Items[$k$v].Name}"]}),
    )
    report = check_refs(command_file, environ={}, base_dir=tmp_path)
    assert report.ok
    assert report.errors == []
    assert report.warnings == []


def test_forward_self_and_unknown_references() -> None:
    command_file = _file(
        _command("a", {"X": "{b.Id}"}),
        _command("b", {"Y": "{b.Id}", "Z": {"Deep": ["{ghost.Id}"]}}),
    )
    report = check_refs(command_file)
    assert not report.ok
    assert _codes(report.errors) == ["reference.forward", "reference.self", "reference.unknown"]
    assert [issue.path for issue in report.errors] == [
        "$.commands[0].params.X",
        "$.commands[1].params.Y",
        "$.commands[1].params.Z.Deep[0]",
    ]


def test_malformed_directives_are_errors() -> None:
    report = check_refs(_file(_command("a", {"Policy": '{"Version": "1"}', "T": "{open"})))
    assert _codes(report.errors) == ["directive.malformed", "directive.unterminated"]


def test_environment_dependent_parts_are_warnings() -> None:
    command_file = _file(_command("a"), _command("b", {"X": "{%SRC%.Id}", "Y": "%STAGE%"}))
    report = check_refs(command_file, environ={"SRC": "a"})
    assert report.ok
    assert _codes(report.warnings) == ["reference.dynamic", "env.unset"]


def test_missing_payload_file_is_a_warning(tmp_path: Path) -> None:
    (tmp_path / "index.js").write_text("ok", encoding="utf-8")
    command_file = _file(_command("a", {"Ok": "<index.js>", "Gone": "<gone.js>"}))
    report = check_refs(command_file, base_dir=tmp_path)
    assert report.ok
    assert _codes(report.warnings) == ["payload.missing"]
    assert report.warnings[0].path == "$.commands[0].params.Gone"

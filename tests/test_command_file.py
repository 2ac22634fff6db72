from __future__ import annotations

import json
from pathlib import Path

import pytest

from contracts.command_file import load_command_file, parse_document, validate_document
from contracts.errors import ConfigError


def _document(**extra) -> dict:
    document = {
        "apiVersions": {"lambda": "2015-03-31"},
        "commands": [
            {"objectType": "IAM", "method": "createRole", "params": {"RoleName": "r"}, "resultsID": "role"},
            {
                "objectType": "Lambda",
                "method": "createFunction",
                "params": {"Role": "{role.Arn}"},
                "resultsID": "fn",
                "expectedResults": {"State": "Active"},
            },
        ],
    }
    document.update(extra)
    return document


def test_valid_document_parses_into_commands() -> None:
    command_file = parse_document(_document())
    first, second = command_file.commands
    assert first.capability == "IAM.createRole"
    assert first.expected_results is None
    assert second.results_id == "fn"
    assert second.expected_results == {"State": "Active"}
    assert command_file.api_versions == {"lambda": "2015-03-31"}


def test_missing_required_fields_are_reported_with_paths() -> None:
    document = {"commands": [{"objectType": "IAM", "params": {}}]}
    report = validate_document(document)
    assert not report.ok
    assert {issue.path for issue in report.errors} == {"$.commands[0]"}
    assert all(issue.code == "schema.violation" for issue in report.errors)


def test_results_id_must_not_contain_directive_characters() -> None:
    document = _document()
    document["commands"][0]["resultsID"] = "role.v1"
    report = validate_document(document)
    assert [issue.path for issue in report.errors] == ["$.commands[0].resultsID"]


def test_duplicate_results_id_is_an_error() -> None:
    document = _document()
    document["commands"][1]["resultsID"] = "role"
    with pytest.raises(ConfigError) as excinfo:
        parse_document(document)
    assert excinfo.value.code == "config.invalid"
    (issue,) = excinfo.value.report.errors
    assert issue.code == "command.duplicate_results_id"
    assert issue.path == "$.commands[1].resultsID"


def test_empty_command_list_is_a_warning() -> None:
    report = validate_document({"commands": []})
    assert report.ok
    assert [issue.code for issue in report.warnings] == ["commands.empty"]


def test_load_json_and_toml(tmp_path: Path) -> None:
    json_path = tmp_path / "commands.json"
    json_path.write_text(json.dumps(_document()), encoding="utf-8")
    assert len(load_command_file(json_path).commands) == 2

    toml_path = tmp_path / "commands.toml"
    toml_path.write_text(
        '[[commands]]\nobjectType = "S3"\nmethod = "listBuckets"\nresultsID = "buckets"\n',
        encoding="utf-8",
    )
    command_file = load_command_file(toml_path)
    assert command_file.commands[0].capability == "S3.listBuckets"
    assert command_file.commands[0].params == {}
    assert command_file.source == toml_path


@pytest.mark.parametrize(
    ("name", "content", "code"),
    [
        ("bad.json", "{not json", "config.bad_json"),
        ("bad.toml", "commands = [", "config.bad_toml"),
    ],
)
def test_unparsable_files(tmp_path: Path, name: str, content: str, code: str) -> None:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_command_file(path)
    assert excinfo.value.code == code


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_command_file(tmp_path / "nope.json")
    assert excinfo.value.code == "config.not_found"

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest

from contracts.errors import ResolutionError, ResourceError
from templating import build_archive, parse_payload, resolve_params, resolve_string
from templating.tokens import ArchivePayloadRef


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_payload_requires_whole_string() -> None:
    assert parse_payload("<a.js|lib>") == ArchivePayloadRef(("a.js", "lib"))
    assert parse_payload("x <a.js>") is None
    assert parse_payload("<a.js> y") is None
    assert parse_payload("plain") is None


def test_parse_payload_rejects_empty_segment() -> None:
    with pytest.raises(ResolutionError) as excinfo:
        parse_payload("<a.js||b.js>")
    assert excinfo.value.code == "payload.empty_path"


def test_single_archive_is_passed_verbatim(tmp_path: Path) -> None:
    blob = b"PK\x03\x04 not really a zip"
    (tmp_path / "bundle.zip").write_bytes(blob)
    assert resolve_string("<bundle.zip>", {}, environ={}, base_dir=tmp_path) == blob


def test_files_and_directories_are_zipped(tmp_path: Path) -> None:
    _write(tmp_path / "index.js", "exports.handler = 1;")
    _write(tmp_path / "lib" / "util.js", "module.exports = {};")
    _write(tmp_path / "lib" / "deep" / "x.txt", "x")

    data = resolve_string("<index.js|lib>", {}, environ={}, base_dir=tmp_path)
    assert isinstance(data, bytes)
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        assert archive.namelist() == ["deep/x.txt", "index.js", "util.js"]
        assert archive.read("index.js") == b"exports.handler = 1;"


def test_archives_are_deterministic(tmp_path: Path) -> None:
    a = _write(tmp_path / "a.txt", "alpha")
    b = _write(tmp_path / "b.txt", "beta")
    assert build_archive([a, b]) == build_archive([b, a])


def test_duplicate_entry_names_are_rejected(tmp_path: Path) -> None:
    first = _write(tmp_path / "one" / "same.txt", "1")
    second = _write(tmp_path / "two" / "same.txt", "2")
    with pytest.raises(ResourceError) as excinfo:
        build_archive([first, second])
    assert excinfo.value.code == "payload.duplicate_entry"


def test_missing_file_is_a_resource_error(tmp_path: Path) -> None:
    with pytest.raises(ResourceError) as excinfo:
        resolve_params({"Code": {"ZipFile": "<missing.js>"}}, {}, environ={}, base_dir=tmp_path)
    assert excinfo.value.code == "payload.not_found"
    assert excinfo.value.path == "$.Code.ZipFile"


def test_payload_path_may_come_from_environment(tmp_path: Path) -> None:
    _write(tmp_path / "dev" / "handler.js", "ok")
    data = resolve_string("<%STAGE%/handler.js>", {}, environ={"STAGE": "dev"}, base_dir=tmp_path)
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        assert archive.namelist() == ["handler.js"]

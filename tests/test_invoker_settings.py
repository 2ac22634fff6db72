from __future__ import annotations

from pathlib import Path

import pytest

import project_config
from ports import resolve_invoker_config


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "config.toml"
    monkeypatch.setenv("INVOKER_CONFIG_FILE", str(path))
    project_config.reload()
    yield path
    monkeypatch.delenv("INVOKER_CONFIG_FILE")
    project_config.reload()


def _write(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")
    project_config.reload()


def test_defaults_without_config_file(config_file: Path) -> None:
    config = resolve_invoker_config(None, {})
    assert config.region is None
    assert config.connect_timeout_s == 10.0
    assert config.read_timeout_s == 60.0
    assert config.max_attempts == 1
    assert config.decision_source["region"] == "default"


def test_toml_overrides_defaults(config_file: Path) -> None:
    _write(config_file, '[invoker]\nregion = "eu-west-1"\nread_timeout_s = 30\nmax_attempts = 3\n')
    config = resolve_invoker_config({"Lambda": "2015-03-31"}, {})
    assert config.region == "eu-west-1"
    assert config.read_timeout_s == 30.0
    assert config.max_attempts == 3
    assert config.api_versions == {"lambda": "2015-03-31"}
    assert config.decision_source["read_timeout_s"] == "config"


def test_environment_overrides_toml(config_file: Path) -> None:
    _write(config_file, '[invoker]\nregion = "eu-west-1"\n')
    config = resolve_invoker_config(None, {"AWS_REGION": "us-east-2", "INVOKER_READ_TIMEOUT": "12"})
    assert config.region == "us-east-2"
    assert config.read_timeout_s == 12.0
    assert config.decision_source["region"] == "env"


def test_cli_overrides_environment(config_file: Path) -> None:
    env = {
        "AWS_REGION": "us-east-2",
        "CLI_AWS_REGION": "ap-south-1",
        "INVOKER_CONNECT_TIMEOUT": "4",
        "CLI_INVOKER_CONNECT_TIMEOUT": "2",
    }
    config = resolve_invoker_config(None, env)
    assert config.region == "ap-south-1"
    assert config.connect_timeout_s == 2.0
    assert config.decision_source["connect_timeout_s"] == "cli"


def test_unparsable_numbers_fall_through(config_file: Path) -> None:
    _write(config_file, "[invoker]\nread_timeout_s = 20\n")
    config = resolve_invoker_config(None, {"CLI_INVOKER_READ_TIMEOUT": "soon", "INVOKER_READ_TIMEOUT": "-1"})
    assert config.read_timeout_s == 20.0
    assert config.decision_source["read_timeout_s"] == "config"


def test_service_aliases_from_config(config_file: Path) -> None:
    _write(config_file, '[invoker.service_aliases]\nMyService = "my-svc"\n')
    config = resolve_invoker_config(None, {})
    assert config.service_aliases == {"myservice": "my-svc"}

"""Tests for configuration loading and the server entry point."""
from __future__ import annotations

from pathlib import Path

import pytest

from service import server
from utils.config import ConfigError, ServerConfig, load_settings, parse_bool
from utils.logging import resolve_level


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for key in (
        "OPENAI_SYNTH_CONFIG",
        "OPENAI_SYNTH_HOST",
        "OPENAI_SYNTH_PORT",
        "OPENAI_SYNTH_API_KEY",
        "OPENAI_SYNTH_REQUEST_TIMEOUT_SECS",
        "OPENAI_SYNTH_ENABLE_CORS",
        "OPENAI_SYNTH_ENABLE_LOGGING",
        "OPENAI_SYNTH_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_config_file() -> None:
    config = ServerConfig.from_settings(load_settings())

    assert config == ServerConfig()
    assert config.port == 13673
    assert config.api_key == "sk-mock-openai-api-key-12345"
    assert config.bind_address == "0.0.0.0:13673"
    assert config.base_url == "http://localhost:13673"


def test_yaml_file_and_environment_overrides(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.yaml"
    settings_path.write_text(
        "server:\n  port: 8080\n  log_level: debug\n  enable_cors: false\n",
        encoding="utf-8",
    )

    settings = load_settings(
        settings_path, environ={"OPENAI_SYNTH_PORT": "9090", "OPENAI_SYNTH_ENABLE_LOGGING": "no"}
    )
    config = ServerConfig.from_settings(settings)

    assert config.port == 9090
    assert config.log_level == "debug"
    assert config.enable_cors is False
    assert config.enable_logging is False
    assert config.host == "0.0.0.0"


def test_non_mapping_yaml_is_rejected(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.yaml"
    settings_path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(settings_path, environ={})


def test_bad_environment_value_is_reported() -> None:
    with pytest.raises(ConfigError, match="OPENAI_SYNTH_PORT"):
        load_settings(environ={"OPENAI_SYNTH_PORT": "eighty"})


@pytest.mark.parametrize(
    ("overrides", "fragment"),
    [
        ({"port": 0}, "Invalid port"),
        ({"api_key": ""}, "cannot be empty"),
        ({"api_key": "pk-live"}, "should start with 'sk-'"),
        ({"request_timeout_secs": 0}, "Invalid timeout"),
        ({"log_level": "verbose"}, "Invalid log level"),
    ],
)
def test_validate_rejects_bad_values(overrides, fragment) -> None:
    with pytest.raises(ConfigError, match=fragment):
        ServerConfig(**overrides).validate()


def test_summary_masks_api_key() -> None:
    summary = ServerConfig(host="127.0.0.1", port=8000).summary()
    assert summary["api_key"] == "sk-mock-op***"
    assert summary["base_url"] == "http://127.0.0.1:8000"


def test_log_level_aliases() -> None:
    assert resolve_level("trace") == resolve_level("debug")
    assert resolve_level("warn") == resolve_level("WARNING")


def test_cli_flags_override_file_settings(tmp_path: Path) -> None:
    settings_path = tmp_path / "custom.yaml"
    settings_path.write_text("server:\n  port: 7000\n  host: 127.0.0.1\n", encoding="utf-8")

    config = server.resolve_config(
        ["--config", str(settings_path), "--port", "7001", "--enable-cors", "false"]
    )

    assert config.host == "127.0.0.1"
    assert config.port == 7001
    assert config.enable_cors is False


def test_main_runs_uvicorn_with_resolved_config(monkeypatch) -> None:
    calls = []

    def fake_run(app, **kwargs):
        calls.append((app, kwargs))

    monkeypatch.setattr(server.uvicorn, "run", fake_run)
    server.main(["--port", "8123", "--log-level", "warn"])

    assert len(calls) == 1
    app, kwargs = calls[0]
    assert app.state.config.port == 8123
    assert kwargs == {"host": "0.0.0.0", "port": 8123, "log_level": "warning"}


def test_main_exits_on_invalid_configuration(monkeypatch) -> None:
    monkeypatch.setattr(server.uvicorn, "run", lambda *args, **kwargs: None)
    with pytest.raises(SystemExit) as excinfo:
        server.main(["--api-key", "not-a-key"])
    assert excinfo.value.code == 2


def test_misspelled_boolean_environment_value_is_reported() -> None:
    with pytest.raises(ConfigError, match="OPENAI_SYNTH_ENABLE_CORS"):
        load_settings(environ={"OPENAI_SYNTH_ENABLE_CORS": "ture"})

    settings = load_settings(environ={"OPENAI_SYNTH_ENABLE_CORS": "Off"})
    assert settings["server"]["enable_cors"] is False


def test_yaml_boolean_strings_are_parsed_strictly(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.yaml"
    settings_path.write_text("server:\n  enable_logging: 'false'\n", encoding="utf-8")
    config = ServerConfig.from_settings(load_settings(settings_path, environ={}))
    assert config.enable_logging is False

    settings_path.write_text("server:\n  enable_cors: 'nope'\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="nope"):
        ServerConfig.from_settings(load_settings(settings_path, environ={}))


def test_parse_bool_spellings() -> None:
    assert parse_bool(True) is True
    assert parse_bool(" YES ") is True
    assert parse_bool("0") is False
    with pytest.raises(ValueError):
        parse_bool("maybe")

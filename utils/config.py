"""Configuration loading helpers with YAML and environment overrides."""
from __future__ import annotations

import copy
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

ENV_PREFIX = "OPENAI_SYNTH_"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "server": {
        "host": "0.0.0.0",
        "port": 13673,
        "api_key": "sk-mock-openai-api-key-12345",
        "request_timeout_secs": 30,
        "enable_cors": True,
        "enable_logging": True,
        "log_level": "info",
    },
}

VALID_LOG_LEVELS = ("trace", "debug", "info", "warn", "error")


class ConfigError(ValueError):
    """Raised when the server configuration is unusable."""


def _merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


def parse_bool(value: Any) -> bool:
    """Accept real booleans and the usual on/off spellings; reject anything else."""
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in TRUE_STRINGS:
        return True
    if lowered in FALSE_STRINGS:
        return False
    raise ValueError(f"Expected a boolean, got {value!r}")


def _coerce(raw: str, current: Any) -> Any:
    if isinstance(current, bool):
        return parse_bool(raw)
    if isinstance(current, int):
        return int(raw)
    return raw


def _apply_env(settings: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    """Override ``server`` keys from ``OPENAI_SYNTH_<KEY>`` variables."""
    server = settings["server"]
    for key, current in list(server.items()):
        raw = environ.get(f"{ENV_PREFIX}{key.upper()}")
        if raw is None:
            continue
        try:
            server[key] = _coerce(raw, current)
        except ValueError as exc:
            raise ConfigError(f"Invalid value for {ENV_PREFIX}{key.upper()}: {raw!r}") from exc
    return settings


def load_settings(
    path: str | os.PathLike[str] | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Load YAML configuration if available, else return defaults.

    Environment variables prefixed with ``OPENAI_SYNTH_`` win over both.
    """
    settings = copy.deepcopy(DEFAULT_SETTINGS)

    cfg_path = Path(path or os.environ.get(f"{ENV_PREFIX}CONFIG", "config/settings.yaml"))
    if cfg_path.exists():
        with cfg_path.open("r", encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh) or {}
        if not isinstance(loaded, Mapping):
            raise ConfigError(f"Configuration file {cfg_path} must contain a mapping")
        settings = _merge(settings, loaded)

    return _apply_env(settings, os.environ if environ is None else environ)


@dataclass
class ServerConfig:
    """Runtime options for the HTTP surface."""

    host: str = "0.0.0.0"
    port: int = 13673
    api_key: str = "sk-mock-openai-api-key-12345"
    request_timeout_secs: int = 30
    enable_cors: bool = True
    enable_logging: bool = True
    log_level: str = "info"

    @classmethod
    def from_settings(cls, settings: Optional[Mapping[str, Any]] = None) -> "ServerConfig":
        settings = settings if settings is not None else load_settings()
        server_cfg = settings.get("server", {})
        defaults = cls()
        try:
            return cls(
                host=str(server_cfg.get("host", defaults.host)),
                port=int(server_cfg.get("port", defaults.port)),
                api_key=str(server_cfg.get("api_key", defaults.api_key)),
                request_timeout_secs=int(
                    server_cfg.get("request_timeout_secs", defaults.request_timeout_secs)
                ),
                enable_cors=parse_bool(server_cfg.get("enable_cors", defaults.enable_cors)),
                enable_logging=parse_bool(
                    server_cfg.get("enable_logging", defaults.enable_logging)
                ),
                log_level=str(server_cfg.get("log_level", defaults.log_level)),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid server settings: {exc}") from exc

    @property
    def bind_address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def base_url(self) -> str:
        host = "localhost" if self.host == "0.0.0.0" else self.host
        return f"http://{host}:{self.port}"

    def validate(self) -> "ServerConfig":
        if not 0 < self.port < 65536:
            raise ConfigError("Invalid port: Port must be between 1 and 65535")
        if not self.api_key:
            raise ConfigError("Invalid API key: API key cannot be empty")
        if not self.api_key.startswith("sk-"):
            raise ConfigError("Invalid API key: API key should start with 'sk-'")
        if self.request_timeout_secs <= 0:
            raise ConfigError("Invalid timeout: Timeout cannot be 0")
        if self.log_level.lower() not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: '{self.log_level}'. "
                f"Valid levels: {', '.join(VALID_LOG_LEVELS)}"
            )
        return self

    def summary(self) -> Dict[str, Any]:
        """Return the configuration with the API key masked."""
        payload = asdict(self)
        payload["api_key"] = f"{self.api_key[:10]}***"
        payload["bind_address"] = self.bind_address
        payload["base_url"] = self.base_url
        return payload

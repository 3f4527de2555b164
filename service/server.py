"""Command line entry point running the synthetic API server."""
from __future__ import annotations

import argparse
from typing import Optional, Sequence

import uvicorn

from utils.config import ConfigError, ServerConfig, load_settings, parse_bool
from utils.logging import get_logger, set_level

from .app import create_app

logger = get_logger(__name__)

UVICORN_LEVELS = {"warn": "warning"}


def _str_to_bool(value: str) -> bool:
    try:
        return parse_bool(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openai-synth",
        description="A synthetic OpenAI API server for testing and development",
    )
    parser.add_argument("--config", help="Path to a YAML settings file")
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--api-key")
    parser.add_argument("--request-timeout-secs", type=int)
    parser.add_argument("--enable-cors", type=_str_to_bool)
    parser.add_argument("--enable-logging", type=_str_to_bool)
    parser.add_argument("--log-level")
    return parser


def resolve_config(argv: Optional[Sequence[str]] = None) -> ServerConfig:
    """Merge defaults, the settings file, environment and CLI flags (in that order)."""
    args = build_parser().parse_args(argv)
    config = ServerConfig.from_settings(load_settings(args.config))
    for field_name in (
        "host",
        "port",
        "api_key",
        "request_timeout_secs",
        "enable_cors",
        "enable_logging",
        "log_level",
    ):
        value = getattr(args, field_name)
        if value is not None:
            setattr(config, field_name, value)
    return config.validate()


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        config = resolve_config(argv)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc

    set_level(config.log_level)
    logger.info("Starting server with configuration %s", config.summary())
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=UVICORN_LEVELS.get(config.log_level.lower(), config.log_level.lower()),
    )


if __name__ == "__main__":
    main()

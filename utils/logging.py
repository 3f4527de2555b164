"""Project-wide logging utilities."""
from __future__ import annotations

import json
import logging
from logging import Logger
from typing import Optional

# Accept the level spellings used on the command line and in config files.
_LEVEL_ALIASES = {
    "trace": "DEBUG",
    "warn": "WARNING",
}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def resolve_level(level: str) -> int:
    """Map a textual level (``info``, ``warn``, ``trace`` ...) to ``logging`` constants."""
    name = _LEVEL_ALIASES.get(level.lower(), level.upper())
    return getattr(logging, name, logging.INFO)


def configure_logger(name: str, level: str = "INFO", json_output: bool = True) -> Logger:
    """Configure and return a project logger."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(resolve_level(level))
    handler = logging.StreamHandler()

    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        )
        handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False
    return logger


PROJECT_PACKAGES = ("openai_synth", "synthesis", "service", "utils")


def set_level(level: str, packages: tuple[str, ...] = PROJECT_PACKAGES) -> None:
    """Adjust the level of every project logger created so far."""
    resolved = resolve_level(level)
    for name in list(logging.Logger.manager.loggerDict):
        if name.split(".", 1)[0] in packages:
            logging.getLogger(name).setLevel(resolved)


def get_logger(name: Optional[str] = None) -> Logger:
    """Return a configured logger."""
    logger_name = name or "openai_synth"
    return configure_logger(logger_name)

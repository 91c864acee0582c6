"""Configuration loading from CLI args, env vars, and optional YAML file."""

import logging
import os
from dataclasses import dataclass

import yaml

from logpretty.formatter import DEFAULT_SHORT_MESSAGE_LENGTH
from logpretty.pipeline import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

COLOR_MODES = ("auto", "always", "never")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Config:
    color: str = "auto"
    short_message_length: int = DEFAULT_SHORT_MESSAGE_LENGTH
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.color not in COLOR_MODES:
            raise ValueError(f"color must be one of {', '.join(COLOR_MODES)}, got {self.color!r}")
        if self.short_message_length < 0:
            raise ValueError("short_message_length must be >= 0")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

    def use_color(self, isatty: bool) -> bool:
        """Resolve 'auto' against whether the output is a terminal."""
        if self.color == "auto":
            return isatty
        return self.color == "always"


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def _env_color(environ) -> str | None:
    if "NO_COLOR" in environ:
        return "never"
    return environ.get("LOGPRETTY_COLOR")


def load_config(cli_args, yaml_data: dict, environ=None) -> Config:
    """Build Config; CLI args beat env vars, which beat YAML, which beats defaults."""
    environ = os.environ if environ is None else environ

    def pick(cli_value, env_value, key, default):
        if cli_value is not None:
            return cli_value
        if env_value is not None:
            return env_value
        return yaml_data.get(key, default)

    defaults = Config()
    log_level = "DEBUG" if getattr(cli_args, "verbose", False) else None

    return Config(
        color=pick(getattr(cli_args, "color", None), _env_color(environ),
                   "color", defaults.color),
        short_message_length=int(pick(getattr(cli_args, "short_message", None),
                                      environ.get("LOGPRETTY_SHORT_MESSAGE"),
                                      "short_message_length", defaults.short_message_length)),
        chunk_size=int(pick(getattr(cli_args, "chunk_size", None),
                            environ.get("LOGPRETTY_CHUNK_SIZE"),
                            "chunk_size", defaults.chunk_size)),
        log_level=str(pick(log_level, environ.get("LOGPRETTY_LOG_LEVEL"),
                           "log_level", defaults.log_level)).upper(),
    )

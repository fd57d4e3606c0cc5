"""Configuration loading: JSON file first, then environment overrides."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable

from dotenv import load_dotenv
from pydantic import ValidationError

from voltz_agent.config.schema import Config
from voltz_agent.logging import get_logger

logger = get_logger(__name__)


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


# env var -> (section, field, converter)
_ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "XMTP_WALLET_KEY": ("agent", "wallet_key", str),
    "XMTP_ENV": ("agent", "env", str),
    "API_URL": ("backend", "api_url", str),
    "API_TIMEOUT_MS": ("backend", "timeout_ms", int),
    "LOG_LEVEL": ("logging", "level", str),
    "LOG_JSON": ("logging", "json_output", _as_bool),
    "HEALTH_PORT": ("health", "port", int),
}


def get_config_path() -> Path:
    """Default config file location."""
    return Path.home() / ".voltz" / "config.json"


def apply_env_overrides(config: Config, environ: dict[str, str] | None = None) -> Config:
    """Overwrite config fields from environment variables that are set and non-empty."""
    env = os.environ if environ is None else environ
    for var, (section, field, convert) in _ENV_OVERRIDES.items():
        raw = env.get(var)
        if raw is None or raw == "":
            continue
        try:
            value = convert(raw)
        except ValueError:
            logger.warning("Ignoring invalid environment override", var=var)
            continue
        setattr(getattr(config, section), field, value)
    return config


def load_config(config_path: Path | None = None, *, use_dotenv: bool = True) -> Config:
    """Load configuration from *config_path* (if present) and the environment.

    Invalid or unreadable files fall back to defaults with a warning.
    """
    if use_dotenv:
        load_dotenv()

    path = config_path or get_config_path()
    config = Config()
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            config = Config.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to load config, using defaults", path=str(path), error=str(e))
            config = Config()

    return apply_env_overrides(config)

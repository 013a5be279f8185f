"""Configuration loading and validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from mileage_pricing.exceptions import InvalidConfigError
from mileage_pricing.models import AppConfig

_ENV_TO_CONFIG: dict[str, str] = {
    "MILEAGE_DATASET": "dataset_path",
    "MILEAGE_THETA_FILE": "theta_path",
    "MILEAGE_SEPARATOR": "separator",
    "MILEAGE_LEARNING_RATE": "learning_rate",
    "MILEAGE_TOLERANCE": "tolerance",
    "MILEAGE_MAX_ITERATIONS": "max_iterations",
    "MILEAGE_PROGRESS_EVERY": "progress_every",
    "MILEAGE_TRACE_DIR": "trace_dir",
}


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    dotenv_path: Path | None = None,
) -> AppConfig:
    """Load config from defaults, yaml file, .env, env, and explicit overrides."""
    payload: dict[str, Any] = {}
    dotenv_to_load = dotenv_path if dotenv_path is not None else Path(".env")
    load_dotenv(dotenv_path=dotenv_to_load, override=False)

    if config_path is not None:
        if not config_path.exists():
            raise InvalidConfigError(f"Config file does not exist: {config_path}")
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise InvalidConfigError(f"Config file is not valid YAML: {exc}") from exc
        if not isinstance(raw, dict):
            raise InvalidConfigError("Config file must contain a top-level mapping.")
        payload.update(raw)

    for env_key, config_key in _ENV_TO_CONFIG.items():
        env_value = os.getenv(env_key)
        if env_value is None or env_value == "":
            continue
        payload[config_key] = env_value

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                payload[key] = str(value) if isinstance(value, Path) else value

    try:
        return AppConfig(**payload)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration: {exc}") from exc

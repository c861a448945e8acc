"""Helpers for loading proofsketch configuration."""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from .models import AppSettings, CheckerSettings, ExtractorSettings, GeneratorSettings

CONFIG_ENV_VAR = "PROOFSKETCH_CONFIG"
DEFAULTS_PACKAGE = "proofsketch.config"


def _resolve_config_path(path: str | Path | None = None) -> Path:
    candidate: Path
    if path is not None:
        candidate = Path(path)
    else:
        env_value = os.getenv(CONFIG_ENV_VAR)
        if not env_value:
            msg = (
                f"No configuration path provided and {CONFIG_ENV_VAR} is not set."
                " Set a path or rely on the packaged defaults."
            )
            raise FileNotFoundError(msg)
        candidate = Path(env_value)

    if not candidate.exists():
        raise FileNotFoundError(f"Configuration file not found: {candidate}")

    return candidate


@lru_cache(maxsize=1)
def get_settings(config_path: str | Path | None = None) -> AppSettings:
    """Load the application settings from disk (cached)."""

    if config_path is not None or os.getenv(CONFIG_ENV_VAR):
        resolved_path = _resolve_config_path(config_path)
        with resolved_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    else:
        resource = resources.files(DEFAULTS_PACKAGE).joinpath("defaults.yaml")
        with resource.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}

    return AppSettings.model_validate(data)


def get_extractor_settings(overrides: dict[str, Any] | None = None) -> ExtractorSettings:
    """Return extractor settings with optional overrides."""

    base = get_settings().extractor.model_dump()
    if overrides:
        base.update(overrides)
    return ExtractorSettings(**base)


def get_generator_settings(overrides: dict[str, Any] | None = None) -> GeneratorSettings:
    """Return generator settings with optional overrides."""

    base = get_settings().generator.model_dump()
    if overrides:
        base.update({key: value for key, value in overrides.items() if value is not None})
    return GeneratorSettings(**base)


def get_checker_settings(overrides: dict[str, Any] | None = None) -> CheckerSettings:
    """Return checker settings with optional overrides."""

    base = get_settings().checker.model_dump()
    if overrides:
        base.update({key: value for key, value in overrides.items() if value is not None})
    return CheckerSettings(**base)


__all__ = [
    "CONFIG_ENV_VAR",
    "AppSettings",
    "CheckerSettings",
    "ExtractorSettings",
    "GeneratorSettings",
    "get_checker_settings",
    "get_extractor_settings",
    "get_generator_settings",
    "get_settings",
]

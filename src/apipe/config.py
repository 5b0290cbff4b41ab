"""Configuration loading for apipe runs."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .patch.chunking import DEFAULT_MAX_WRITE, UTF_MAX
from .tools.process import STDIN_PLACEHOLDER

DEFAULT_CONFIG_NAME = "apipe.yaml"

DEFAULT_CONFIG_TEMPLATE: Dict[str, Any] = {
    "engine": {
        "max_write": DEFAULT_MAX_WRITE,
    },
    "transform": {
        "timeout": 60,
        "stdin_placeholder": STDIN_PLACEHOLDER,
    },
    "diff": {
        "command": ["diff"],
        "timeout": 60,
    },
}


class ConfigError(ValueError):
    """Raised when the configuration file cannot be used."""


class SettingsModel(BaseModel):
    """Base model rejecting unknown keys."""

    model_config = ConfigDict(extra="forbid")


class EngineSettings(SettingsModel):
    max_write: int = Field(default=DEFAULT_MAX_WRITE, ge=UTF_MAX)


class TransformSettings(SettingsModel):
    timeout: Optional[float] = Field(default=60, gt=0)
    stdin_placeholder: str = STDIN_PLACEHOLDER


class DiffSettings(SettingsModel):
    command: List[str] = Field(default_factory=lambda: ["diff"], min_length=1)
    timeout: Optional[float] = Field(default=60, gt=0)


class Settings(SettingsModel):
    """Validated apipe configuration."""

    engine: EngineSettings = Field(default_factory=EngineSettings)
    transform: TransformSettings = Field(default_factory=TransformSettings)
    diff: DiffSettings = Field(default_factory=DiffSettings)


def default_config() -> Dict[str, Any]:
    """Return a deep copy of the default configuration template."""
    return copy.deepcopy(DEFAULT_CONFIG_TEMPLATE)


def write_config(config_path: Path, config_data: Dict[str, Any]) -> None:
    """Persist configuration data to disk with stable formatting."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config_data, handle, sort_keys=False)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load and validate settings; a missing file yields the defaults."""

    if config_path is None:
        return Settings()
    path = Path(config_path)
    if not path.exists():
        return Settings()

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as error:
        raise ConfigError(f"Failed to parse config {path}: {error}") from error

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping at the top level.")

    try:
        return Settings.model_validate(data)
    except ValidationError as error:
        raise ConfigError(f"Invalid configuration in {path}: {error}") from error


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "DiffSettings",
    "EngineSettings",
    "Settings",
    "TransformSettings",
    "default_config",
    "load_settings",
    "write_config",
]

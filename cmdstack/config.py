"""Persisted settings and the parameter defaults derived from them."""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from cmdstack.parameters.generator import ALPHANUMERIC
from cmdstack.parameters.models import ParameterType

logger = logging.getLogger("cmdstack.config")

HOME_ENV_VAR = "CMDSTACK_HOME"
DEFAULT_HOME_DIRNAME = ".cmdstack"
CONFIG_FILENAME = "config.json"


class SettingsError(ValueError):
    """An unknown setting or an invalid value for a known one."""


class PrintStyle(str, Enum):
    ALL = "All"
    COMMANDS_ONLY = "CommandsOnly"


class ApplicationTheme(str, Enum):
    DARK = "Dark"
    LIGHT = "Light"
    SYSTEM = "System"


class Settings(BaseModel):
    """User settings; also resolves default bounds for bare placeholders."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    cli_print_style: PrintStyle = PrintStyle.ALL
    cli_display_limit: int = 10
    cli_display_by_most_recently_used: bool = True
    param_string_length_min: int = 5
    param_string_length_max: int = 10
    param_int_range_min: int = 5
    param_int_range_max: int = 10
    param_string_alphabet: str = ALPHANUMERIC
    application_theme: ApplicationTheme = ApplicationTheme.SYSTEM

    @field_validator(
        "cli_display_limit",
        "param_string_length_min",
        "param_string_length_max",
        "param_int_range_min",
        "param_int_range_max",
    )
    def _non_negative(cls, v):  # type: ignore
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("param_string_alphabet")
    def _alphabet(cls, v):  # type: ignore
        if not v:
            raise ValueError("alphabet must not be empty")
        return v

    @model_validator(mode="after")
    def _ranges(self):  # type: ignore
        if self.param_string_length_min > self.param_string_length_max:
            raise ValueError("param_string_length_min must be <= param_string_length_max")
        if self.param_int_range_min > self.param_int_range_max:
            raise ValueError("param_int_range_min must be <= param_int_range_max")
        return self

    def bounds_for(self, param_type: ParameterType) -> Tuple[int, int]:
        """Default (min, max) for a String or Int placeholder without bounds."""
        if param_type is ParameterType.STRING:
            return self.param_string_length_min, self.param_string_length_max
        if param_type is ParameterType.INT:
            return self.param_int_range_min, self.param_int_range_max
        raise ValueError(f"{param_type.value} parameters have no bounds")


def get_home_dir() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_HOME_DIRNAME


def get_config_path() -> Path:
    return get_home_dir() / CONFIG_FILENAME


def load_settings(path: Path | None = None) -> Settings:
    """Read settings, falling back to defaults if the file is missing or bad."""
    path = path or get_config_path()
    if not path.exists():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
        return Settings.model_validate(data)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(settings.model_dump(mode="json"), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return path


def update_setting(key: str, value: Any, path: Path | None = None) -> Settings:
    """Validate and persist a single setting.

    Raises:
        SettingsError: ``key`` is unknown or ``value`` is invalid for it
    """
    if key not in Settings.model_fields:
        raise SettingsError(f"Unknown setting: {key}")

    payload = load_settings(path).model_dump(mode="json")
    payload[key] = value
    try:
        settings = Settings.model_validate(payload)
    except ValidationError as exc:
        raise SettingsError(f"Invalid value for {key}: {value!r}") from exc

    save_settings(settings, path)
    logger.info("Updated setting %s", key)
    return settings


__all__ = [
    "ApplicationTheme",
    "PrintStyle",
    "Settings",
    "SettingsError",
    "get_home_dir",
    "get_config_path",
    "load_settings",
    "save_settings",
    "update_setting",
]

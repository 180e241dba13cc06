"""
Configuration for the identity extraction core.

Settings are read from a YAML file (``config/default.yaml`` unless
``DNIE_CONFIG_FILE`` points elsewhere). String values may reference
environment variables using ``${VAR_NAME:-default_value}``.
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from dnie_reader.exceptions import ConfigurationError

CONFIG_FILE_ENV_VAR = "DNIE_CONFIG_FILE"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

LOG_OFF = "OFF"
LOG_LEVEL_NAMES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET", LOG_OFF)
LOG_FORMAT_NAMES = ("text", "json")


class ExtractionSettings(BaseModel):
    """Tunable defaults used while decoding and merging identity data."""

    default_nationality: str = Field(
        default="España", description="Nationality used when no source supplies one"
    )
    default_document_type: str = Field(
        default="DNI", description="Document type used when the MRZ does not supply one"
    )
    century_pivot: int = Field(
        default=50, description="Two-digit years above this value belong to the 1900s"
    )
    mrz_length: int = Field(default=88, description="Expected MRZ length (two 44-char lines)")
    dg13_max_elements: int = Field(
        default=16, description="Number of positional DG13 elements that carry fields"
    )
    log_level: str = Field(default="INFO", description="Logging level name, or OFF")
    log_format: str = Field(
        default="text", description="Log format: text, json or a %-style format string"
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @field_validator("century_pivot")
    @classmethod
    def validate_century_pivot(cls, v):
        if not 0 <= v <= 99:
            msg = "century_pivot must be between 0 and 99"
            raise ValueError(msg)
        return v

    @field_validator("mrz_length", "dg13_max_elements")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            msg = "Value must be positive"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.strip().upper()
        if level not in LOG_LEVEL_NAMES:
            msg = f"log_level must be one of {', '.join(LOG_LEVEL_NAMES)}"
            raise ValueError(msg)
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        log_format = v.strip()
        if log_format.lower() in LOG_FORMAT_NAMES:
            return log_format.lower()
        if "%(" not in log_format:
            msg = "log_format must be 'text', 'json' or a %-style format string"
            raise ValueError(msg)
        return log_format


def get_config_path() -> Path:
    """
    Get the path to the settings file.

    Returns:
        Path from ``DNIE_CONFIG_FILE`` or the bundled ``config/default.yaml``
    """
    override = os.environ.get(CONFIG_FILE_ENV_VAR)
    if override:
        return Path(override)

    project_root = Path(__file__).resolve().parent.parent.parent
    return project_root / "config" / "default.yaml"


def load_settings(path: str | Path | None = None) -> ExtractionSettings:
    """
    Load extraction settings from a YAML file.

    A missing default file is not an error; the built-in defaults apply.
    An explicitly requested file that does not exist is.

    Args:
        path: Settings file to read. If None, uses get_config_path()

    Returns:
        Validated ExtractionSettings

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    explicit = path is not None or CONFIG_FILE_ENV_VAR in os.environ
    config_path = Path(path) if path is not None else get_config_path()

    if not config_path.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        return ExtractionSettings()

    try:
        with open(config_path, encoding="utf-8") as file:
            config_data = yaml.safe_load(file) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML configuration file {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error reading configuration file {config_path}: {e}")

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    section = config_data.get("extraction", config_data)

    try:
        return ExtractionSettings(**_expand_env_vars(section))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid extraction settings in {config_path}: {e}")


@lru_cache(maxsize=1)
def get_settings() -> ExtractionSettings:
    """Return the process-wide default settings."""
    return load_settings()


def _expand_env_vars(obj: Any) -> Any:
    """
    Recursively expand environment variables in configuration values.

    Supports format: ${VAR_NAME:-default_value}
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    if isinstance(obj, str):
        return _expand_env_var_string(obj)
    return obj


def _expand_env_var_string(value: str) -> str:
    def replace_var(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default_value = var_expr.split(":-", 1)
            return os.environ.get(var_name, default_value)
        return os.environ.get(var_expr, "")

    return _ENV_VAR_PATTERN.sub(replace_var, value)

"""Configuration settings and loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GeneratorConfig(BaseSettings):
    """Configuration for stategen."""

    model_config = SettingsConfigDict(
        env_prefix="STATEGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    name_suffix: str = "State"
    wrapped_field_name: str = "_wrapped"
    constructor_argument_name: str = "stateful_object"
    max_workers: int = Field(default=1, ge=1)
    log_level: str = "WARNING"
    log_json: bool = False

    @field_validator("name_suffix", "wrapped_field_name", "constructor_argument_name")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        # Suffixes may start with a digit.
        if not v or not ("_" + v).isidentifier():
            raise ValueError(f"'{v}' is not a valid identifier")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> Any:
        if isinstance(v, int):
            return logging.getLevelName(v)
        if isinstance(v, str):
            level = v.upper()
            if level not in _LOG_LEVELS:
                raise ValueError(f"Invalid log level: {v}. Valid: {list(_LOG_LEVELS)}")
            return level
        return v


def load_config(config_path: str | Path | None = None) -> GeneratorConfig:
    """Load configuration from file and environment.

    Priority: env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}

    env_overrides = _get_env_overrides()
    config_data.update(env_overrides)

    return GeneratorConfig(**config_data)


def _get_env_overrides() -> dict[str, str]:
    """Raw ``STATEGEN_*`` values, left for GeneratorConfig to coerce.

    File values are passed to GeneratorConfig as init arguments, which
    outrank the environment, so the environment is re-applied on top.
    """
    prefix = GeneratorConfig.model_config.get("env_prefix", "")
    overrides: dict[str, str] = {}
    for name in GeneratorConfig.model_fields:
        value = os.environ.get(f"{prefix}{name}".upper())
        if value is not None:
            overrides[name] = value
    return overrides

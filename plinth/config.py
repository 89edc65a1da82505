"""
Plinth — Configuration System

All configuration is Pydantic-validated and loaded from:
1. default.yaml (defaults)
2. Environment variables (overrides, nested keys via ``PLINTH_<SECTION>__<KEY>``)

Severity masks are written as lists of names in YAML and env vars and
exposed as integer bitmasks to the rest of the package.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from plinth.primitives.common import ALL_SOFT, mask_from_names, names_from_mask

DEFAULT_CONFIG_PATH = "config/default.yaml"

# ─── Sub-configs ──────────────────────────────────────────────────


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"
    colors: bool = True
    callsite: bool = False


class InterceptionConfig(BaseModel):
    # Severities the process reports at all (the reporting level)
    reporting_mask: list[str] = Field(
        default_factory=lambda: names_from_mask(ALL_SOFT),
    )
    # Severities a plugin handler is installed for on activation
    handler_mask: list[str] = Field(
        default_factory=lambda: names_from_mask(ALL_SOFT),
    )
    emphasis: str = "html"  # "html" | "ansi" | "plain"
    fatal_exit_code: int = 1

    @field_validator("reporting_mask", "handler_mask", mode="before")
    @classmethod
    def _split_names(cls, value: Any) -> Any:
        # Env vars arrive as "notice,warning"
        if isinstance(value, str):
            return [part for part in value.split(",") if part.strip()]
        return value

    @field_validator("reporting_mask", "handler_mask")
    @classmethod
    def _known_names(cls, value: list[str]) -> list[str]:
        mask_from_names(value)  # raises ValueError on unknown names
        return [name.strip().lower() for name in value]

    @field_validator("emphasis")
    @classmethod
    def _known_emphasis(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("html", "ansi", "plain"):
            raise ValueError(f"emphasis must be html, ansi or plain, got {value!r}")
        return value

    @property
    def reporting_bits(self) -> int:
        return mask_from_names(self.reporting_mask)

    @property
    def handler_bits(self) -> int:
        return mask_from_names(self.handler_mask)


class ResolverConfig(BaseModel):
    framework_scope: str = "plinth"
    include_global_scope: bool = True


# ─── Root Configuration ──────────────────────────────────────────


class PlinthConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.

    Env vars outrank constructor values, so ``PLINTH_INTERCEPTION__EMPHASIS``
    beats the ``emphasis`` key of the YAML file handed in by ``load_config``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLINTH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    interception: InterceptionConfig = Field(default_factory=InterceptionConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: str | Path | None = None) -> PlinthConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.

    Without an explicit path, ``PLINTH_CONFIG_PATH`` is used, falling back to
    ``config/default.yaml`` under the working directory. A missing file
    means built-in defaults.
    """
    if config_path is None:
        config_path = os.environ.get("PLINTH_CONFIG_PATH", DEFAULT_CONFIG_PATH)

    raw: dict[str, Any] = {}
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    overrides: dict[str, Any] = {}
    if level := os.environ.get("PLINTH_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = level
    if log_format := os.environ.get("PLINTH_LOG_FORMAT"):
        overrides.setdefault("logging", {})["format"] = log_format
    if emphasis := os.environ.get("PLINTH_EMPHASIS"):
        overrides.setdefault("interception", {})["emphasis"] = emphasis
    if reporting := os.environ.get("PLINTH_REPORTING_MASK"):
        overrides.setdefault("interception", {})["reporting_mask"] = reporting

    return PlinthConfig(**_deep_merge(raw, overrides))

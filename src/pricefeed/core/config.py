"""Configuration loading, validation, and access."""

from __future__ import annotations

import logging
import os
from enum import StrEnum
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from pricefeed.core.exceptions import ConfigError

_DEFAULT_BASE_URL = "https://www.alphavantage.co/query"


class Interval(StrEnum):
    """Intraday sampling intervals offered by Alpha Vantage."""

    ONE_MINUTE = "1min"
    FIVE_MINUTES = "5min"
    FIFTEEN_MINUTES = "15min"
    THIRTY_MINUTES = "30min"
    SIXTY_MINUTES = "60min"


class OutputSize(StrEnum):
    """How much history Alpha Vantage returns per request."""

    COMPACT = "compact"
    FULL = "full"


class AlphaVantageConfig(BaseModel):
    """Alpha Vantage API access configuration."""

    model_config = ConfigDict(frozen=True)

    api_key: str | None = None
    api_key_file: str | None = None
    base_url: str = _DEFAULT_BASE_URL
    interval: Interval = Interval.FIVE_MINUTES
    output_size: OutputSize = OutputSize.COMPACT
    request_timeout: float = 30.0

    @field_validator("base_url")
    @classmethod
    def base_url_is_http(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"request_timeout must be > 0, got {v}")
        return v

    def resolve_api_key(self) -> str:
        """Return the explicit api_key, falling back to api_key_file."""
        if self.api_key:
            return self.api_key
        if self.api_key_file:
            return read_api_key(self.api_key_file)
        raise ConfigError(
            "No Alpha Vantage API key configured. Set alpha_vantage.api_key "
            "or alpha_vantage.api_key_file",
            context={"field": "alpha_vantage.api_key"},
        )


class LoggingConfig(BaseModel):
    """Log output configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def level_is_known(cls, v: str) -> str:
        upper = v.upper()
        if upper not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown logging level: {v!r}")
        return upper


class PriceFeedConfig(BaseModel):
    """Root configuration for pricefeed."""

    model_config = ConfigDict(frozen=True)

    alpha_vantage: AlphaVantageConfig = AlphaVantageConfig()
    logging: LoggingConfig = LoggingConfig()


def read_api_key(path: str) -> str:
    """Read an API key from a file, stripping surrounding whitespace."""
    p = Path(path)
    try:
        key = p.read_text(encoding="utf-8").strip()
    except OSError as e:
        raise ConfigError(
            f"Cannot read API key file: {path}",
            context={"field": "api_key_file", "value": path},
        ) from e
    if not key:
        raise ConfigError(
            f"API key file is empty: {path}",
            context={"field": "api_key_file", "value": path},
        )
    return key


def load_config(
    config_path: str | None = None,
    env_prefix: str = "PRICEFEED_",
) -> PriceFeedConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (PRICEFEED_ALPHA_VANTAGE__API_KEY, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        PRICEFEED_ALPHA_VANTAGE__INTERVAL=1min  ->  alpha_vantage.interval = "1min"
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return PriceFeedConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("PRICEFEED_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from PRICEFEED_CONFIG not found: {env_path}",
                context={"field": "PRICEFEED_CONFIG", "value": env_path},
            )
        return p

    default = Path("pricefeed.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels. Values are kept as strings
    and left to the pydantic models to coerce.
    """
    result = {k: dict(v) if isinstance(v, dict) else v for k, v in base.items()}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # Skip the CONFIG env var itself
        if parts == ["config"]:
            continue

        target = result
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[parts[-1]] = value

    return result

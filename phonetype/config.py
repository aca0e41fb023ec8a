"""
Configuration loader.

Design goals:
- Support `.env` for local development.
- Support YAML for non-secret defaults (dataset choice, locale, separator).
- Validate configuration with pydantic.

Precedence (highest to lowest):
1. OS environment variables
2. `.env` values
3. YAML config file values
4. Code defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel
from pydantic import ConfigDict as PydanticConfigDict
from pydantic import field_validator

from phonetype.core.countries import CountryCodeTable
from phonetype.core.resolver import PhoneResolver
from phonetype.logging_config import configure_logging


class PhonetypeSettings(BaseModel):
    model_config = PydanticConfigDict(extra="ignore")

    # General
    log_level: str = "INFO"
    json_logging: bool = False

    # Country code dataset
    country_source: Literal["bundled", "phonenumbers"] = "bundled"
    country_codes_path: Path | None = None
    geocoder_locale: str = "en"

    # Formatting
    default_separator: str = "-"

    @field_validator("default_separator")
    @classmethod
    def _single_char_separator(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError("default_separator must be exactly one character")
        return v


_ENV_MAP: dict[str, str] = {
    "PHONETYPE_LOG_LEVEL": "log_level",
    "PHONETYPE_JSON_LOGGING": "json_logging",
    "PHONETYPE_COUNTRY_SOURCE": "country_source",
    "PHONETYPE_COUNTRY_CODES_PATH": "country_codes_path",
    "PHONETYPE_GEOCODER_LOCALE": "geocoder_locale",
    "PHONETYPE_DEFAULT_SEPARATOR": "default_separator",
}


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    return raw if isinstance(raw, dict) else {}


def _read_dotenv(path: Path) -> dict[str, str]:
    # dotenv_values does not mutate os.environ; it just parses the file.
    values = dotenv_values(path)
    out: dict[str, str] = {}
    for k, v in values.items():
        if isinstance(k, str) and isinstance(v, str):
            out[k] = v
    return out


def _overlay_env(target: dict[str, Any], env: dict[str, str]) -> None:
    for env_key, field_name in _ENV_MAP.items():
        if env_key in env:
            target[field_name] = env[env_key]


def load_settings(
    *, yaml_path: Path | None = None, env_path: Path | None = None
) -> PhonetypeSettings:
    """
    Load settings from YAML and .env, with OS env overrides.

    Args:
        yaml_path: Optional YAML config path.
        env_path: Optional .env path (default: `.env` if present).
    """

    data: dict[str, Any] = {}

    if env_path is None:
        maybe = Path(".env")
        env_path = maybe if maybe.exists() else None

    dotenv = _read_dotenv(env_path) if env_path is not None and env_path.exists() else {}

    # YAML path resolution:
    # - explicit yaml_path wins
    # - else PHONETYPE_CONFIG from OS env wins
    # - else PHONETYPE_CONFIG from .env
    if yaml_path is None:
        cfg = os.environ.get("PHONETYPE_CONFIG") or dotenv.get("PHONETYPE_CONFIG")
        if cfg:
            yaml_path = Path(cfg)

    if yaml_path is not None and yaml_path.exists():
        data.update(_read_yaml(yaml_path))

    if dotenv:
        _overlay_env(data, dotenv)

    os_env: dict[str, str] = {k: v for k, v in os.environ.items() if k in _ENV_MAP}
    _overlay_env(data, os_env)

    return PhonetypeSettings.model_validate(data)


def build_table(settings: PhonetypeSettings) -> CountryCodeTable:
    """Build the country code table selected by `settings`."""

    if settings.country_source == "phonenumbers":
        return CountryCodeTable.from_phonenumbers(locale=settings.geocoder_locale)
    return CountryCodeTable.bundled(settings.country_codes_path)


def build_resolver(settings: PhonetypeSettings) -> PhoneResolver:
    return PhoneResolver(build_table(settings), separator=settings.default_separator)


def configure_from_settings(settings: PhonetypeSettings) -> None:
    """Apply the logging settings to the root logger."""

    configure_logging(level=settings.log_level, json_logging=settings.json_logging)


def bootstrap(
    *, yaml_path: Path | None = None, env_path: Path | None = None
) -> PhoneResolver:
    """
    Load settings, configure logging, and build the resolver.

    Call once at application startup and share the returned resolver.
    """

    settings = load_settings(yaml_path=yaml_path, env_path=env_path)
    configure_from_settings(settings)
    return build_resolver(settings)

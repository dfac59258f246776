"""Centralized configuration for Sitios.

Settings come from three layers, highest priority first:

1. Environment variables (``SITIOS_SECTION__KEY``, e.g. ``SITIOS_SERVICE__MAIN_HOSTNAME``)
2. The config file (``sitios.toml`` or ``.sitios/sitios.toml``, searched upward)
3. Defaults declared on the models below

Site *content* (globals and sources) is never part of these settings: it is
passed explicitly to a generation run.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sitios.config.enums import Discipline
from sitios.config.exceptions import ConfigParseError, ConfigValidationError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("sitios.toml", ".sitios/sitios.toml")
ENV_PREFIX = "SITIOS_"

DEFAULT_STATIC_EXTENSIONS = ("jpeg", "jpg", "png", "svg", "txt")
DEFAULT_MAIN_HOSTNAME = "sitios.xyz"


class GenerationSettings(BaseModel):
    """How generation runs are executed."""

    discipline: Discipline = Field(
        default=Discipline.SEQUENTIAL,
        description="Source scheduling: 'sequential' (deterministic) or 'concurrent'",
    )
    max_workers: int | None = Field(
        default=None,
        ge=1,
        le=64,
        description="Thread pool size for the concurrent discipline (default: one per source)",
    )
    postprocess: bool = Field(
        default=True,
        description="Run the error page postprocessing hook after sources are processed",
    )
    static_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_STATIC_EXTENSIONS),
        description="File extensions copied verbatim from the source directory",
    )

    @field_validator("static_extensions")
    @classmethod
    def strip_leading_dots(cls, v: list[str]) -> list[str]:
        """Accept both ``png`` and ``.png``."""
        return [ext.lstrip(".") for ext in v if ext.strip(".")]


class ServiceSettings(BaseModel):
    """Provisioning service settings."""

    main_hostname: str = Field(
        default=DEFAULT_MAIN_HOSTNAME,
        description="Base hostname under which instant sites are created",
    )
    host: str = Field(default="127.0.0.1", description="Interface the API binds to")
    port: int = Field(default=8000, ge=1, le=65535, description="Port the API listens on")
    database_path: Path = Field(
        default=Path(".sitios/sitios.duckdb"),
        description="DuckDB file holding sites and sources",
    )
    deploy_dir: Path = Field(
        default=Path("_deploy"),
        description="Directory receiving one published tree per site domain",
    )


class TrelloSettings(BaseModel):
    """Trello API settings."""

    api_key: str = Field(default="", description="Trello application key used by the onboarding wizard")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout for Trello calls (seconds)")


class SitiosSettings(BaseSettings):
    """Root configuration for Sitios.

    Supports environment variable overrides with the pattern
    ``SITIOS_SECTION__KEY`` (e.g. ``SITIOS_GENERATION__DISCIPLINE=concurrent``).
    """

    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    trello: TrelloSettings = Field(default_factory=TrelloSettings)

    model_config = SettingsConfigDict(
        extra="forbid",
        validate_assignment=True,
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
    )


def find_config(start_dir: Path) -> Path | None:
    """Search upward from ``start_dir`` for a Sitios config file."""
    current = start_dir.expanduser().resolve()
    for candidate in (current, *current.parents):
        for name in CONFIG_FILENAMES:
            path = candidate / name
            if path.is_file():
                return path
    return None


def _env_keys() -> set[str]:
    """Dotted setting keys (``service.port``) already set through the environment."""
    return {
        ".".join(part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part)
        for name in os.environ
        if name.startswith(ENV_PREFIX)
    }


def _overlay(
    defaults: dict[str, Any], file_values: dict[str, Any], env_keys: set[str], prefix: str = ""
) -> dict[str, Any]:
    """Lay file values over ``defaults``, leaving keys the environment set alone."""
    result = dict(defaults)
    for key, value in file_values.items():
        dotted = prefix + str(key).lower()
        if dotted in env_keys:
            continue
        current = result.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            result[key] = _overlay(current, value, env_keys, dotted + ".")
        else:
            result[key] = value
    return result


def load_settings(config_path: Path | None = None, *, start_dir: Path | None = None) -> SitiosSettings:
    """Load settings from a config file, environment variables and defaults.

    Args:
        config_path: Explicit config file. When omitted, the file is searched
            upward from ``start_dir`` (default: current directory).
        start_dir: Directory the upward search starts from.

    Raises:
        ConfigParseError: If the file is not valid TOML.
        ConfigValidationError: If the merged values fail validation.

    """
    if config_path is None:
        config_path = find_config(start_dir or Path.cwd())

    if config_path is None:
        logger.debug("No sitios config file found, using defaults and environment")
        return SitiosSettings()

    logger.info("Loading config from %s", config_path)
    try:
        file_data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigParseError(config_path, str(e)) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    try:
        # Env vars > config file > defaults
        defaults = SitiosSettings().model_dump(mode="json")
        return SitiosSettings.model_validate(_overlay(defaults, file_data, _env_keys()))
    except ValidationError as e:
        raise ConfigValidationError(config_path, e.errors()) from e

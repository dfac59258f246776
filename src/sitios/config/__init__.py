"""Configuration facade.

    from sitios.config import SitiosSettings, load_settings
"""

from sitios.config.enums import Discipline
from sitios.config.exceptions import (
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    SiteFileError,
)
from sitios.config.settings import (
    DEFAULT_MAIN_HOSTNAME,
    DEFAULT_STATIC_EXTENSIONS,
    GenerationSettings,
    ServiceSettings,
    SitiosSettings,
    TrelloSettings,
    find_config,
    load_settings,
)
from sitios.config.site_file import load_site_file

__all__ = [
    "DEFAULT_MAIN_HOSTNAME",
    "DEFAULT_STATIC_EXTENSIONS",
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    "Discipline",
    "GenerationSettings",
    "ServiceSettings",
    "SiteFileError",
    "SitiosSettings",
    "TrelloSettings",
    "find_config",
    "load_settings",
    "load_site_file",
]

"""Source plugins and the registry that maps providers to them."""

from sitios.plugins.base import PluginMeta, SourcePlugin
from sitios.plugins.exceptions import PluginDataError, PluginError, PluginLoadError, SourceFetchError
from sitios.plugins.registry import ENTRY_POINT_GROUP, PluginRegistry, default_registry
from sitios.plugins.trello import TrelloListPlugin
from sitios.plugins.url import UrlPlugin

__all__ = [
    "ENTRY_POINT_GROUP",
    "PluginDataError",
    "PluginError",
    "PluginLoadError",
    "PluginMeta",
    "PluginRegistry",
    "SourceFetchError",
    "SourcePlugin",
    "TrelloListPlugin",
    "UrlPlugin",
    "default_registry",
]

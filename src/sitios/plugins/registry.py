"""Plugin registry mapping source providers to source plugins.

The registry is assembled once, at startup, from:

1. Built-in plugins (``url:html``, ``url:markdown``, ``trello:list``)
2. Third-party plugins published as entry points (group ``sitios.plugins``)
3. Plugins passed explicitly to the constructor (highest priority)

Third-party plugins register under their provider key:

    [project.entry-points."sitios.plugins"]
    "evernote:note" = "sitios_evernote:NotePlugin"

After construction the registry is read-only. Looking up an unknown provider
returns ``None``; the runner decides what absence means.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from importlib.metadata import EntryPoint, entry_points
from types import MappingProxyType

from sitios.plugins.base import PluginMeta, SourcePlugin
from sitios.plugins.exceptions import PluginLoadError

logger = logging.getLogger(__name__)
__all__ = ["ENTRY_POINT_GROUP", "PluginRegistry", "default_registry"]

ENTRY_POINT_GROUP = "sitios.plugins"


class PluginRegistry:
    """Lookup table from provider key (e.g. ``"trello:list"``) to plugin.

    Example:
        >>> registry = PluginRegistry()
        >>> registry.get("url:markdown")
        UrlPlugin(markup='markdown')
        >>> registry.get("nope:nothing") is None
        True

    """

    def __init__(
        self,
        plugins: Mapping[str, SourcePlugin] | None = None,
        *,
        load_builtin: bool = True,
        load_entry_points: bool = True,
    ) -> None:
        found: dict[str, SourcePlugin] = {}
        if load_builtin:
            found.update(self._builtin_plugins())
        if load_entry_points:
            found.update(self._entry_point_plugins())
        if plugins:
            found.update(plugins)
        self._plugins = MappingProxyType(found)

    @staticmethod
    def _builtin_plugins() -> dict[str, SourcePlugin]:
        from sitios.plugins.trello import TrelloListPlugin
        from sitios.plugins.url import UrlPlugin

        builtin: dict[str, SourcePlugin] = {
            "url:html": UrlPlugin(markup="html"),
            "url:markdown": UrlPlugin(markup="markdown"),
            "trello:list": TrelloListPlugin(),
        }
        for provider, plugin in builtin.items():
            meta = plugin.get_plugin_metadata()
            logger.debug("Loaded built-in plugin: %s -> %s v%s", provider, meta["name"], meta["version"])
        return builtin

    def _entry_point_plugins(self) -> dict[str, SourcePlugin]:
        loaded: dict[str, SourcePlugin] = {}
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                plugin = self._load_entry_point(ep)
            except PluginLoadError as exc:
                logger.warning("%s, skipping", exc)
                continue
            loaded[ep.name] = plugin
            meta = plugin.get_plugin_metadata()
            logger.info("Loaded plugin: %s -> %s v%s (from %s)", ep.name, meta["name"], meta["version"], ep.value)
        return loaded

    @staticmethod
    def _load_entry_point(ep: EntryPoint) -> SourcePlugin:
        try:
            plugin = ep.load()()
        except Exception as exc:  # noqa: BLE001
            raise PluginLoadError(ep.name, exc) from exc
        if not isinstance(plugin, SourcePlugin):
            raise PluginLoadError(ep.name, "does not implement produce() and get_plugin_metadata()")
        return plugin

    def get(self, provider: str) -> SourcePlugin | None:
        """Return the plugin for ``provider``, or ``None`` when there is none."""
        return self._plugins.get(provider)

    def providers(self) -> list[str]:
        """Registered provider keys, sorted."""
        return sorted(self._plugins)

    def list_plugins(self) -> list[tuple[str, PluginMeta]]:
        """Provider keys with the metadata of the plugin serving them."""
        return [(provider, self._plugins[provider].get_plugin_metadata()) for provider in self.providers()]

    def __contains__(self, provider: object) -> bool:
        return provider in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    def __repr__(self) -> str:
        return f"PluginRegistry(providers=[{', '.join(self.providers())}])"


_default_registry: PluginRegistry | None = None


def default_registry() -> PluginRegistry:
    """Return the process-wide registry, building it on first use."""
    global _default_registry  # noqa: PLW0603
    if _default_registry is None:
        _default_registry = PluginRegistry()
    return _default_registry

"""Exceptions raised by source plugins."""

from __future__ import annotations

from sitios.exceptions import SitiosError


class PluginError(SitiosError):
    """Base exception for plugin errors."""


class PluginDataError(PluginError, ValueError):
    """Raised when a source's ``data`` lacks what its plugin needs."""

    def __init__(self, plugin: str, missing: list[str]) -> None:
        self.plugin = plugin
        self.missing = missing
        super().__init__(f"{plugin} requires data field(s): {', '.join(missing)}")


class SourceFetchError(PluginError):
    """Raised when a plugin cannot fetch its source content."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class PluginLoadError(PluginError):
    """Raised when a plugin registered through an entry point is unusable."""

    def __init__(self, name: str, reason: str | Exception) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Failed to load plugin '{name}': {reason}")

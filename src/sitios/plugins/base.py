"""Source plugin interface.

A source plugin turns one external content source (a URL, a Trello list, ...)
into pages. It receives the mount point (``root``), its provider-specific
parameters (``data``) and the generator it writes pages through, and returns
the files it wrote. Raising any exception signals failure; the runner wraps it
with the source context.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, TypedDict, runtime_checkable

if TYPE_CHECKING:
    from sitios.generation.generator import SiteGenerator

__all__ = ["PluginMeta", "SourcePlugin"]


class PluginMeta(TypedDict):
    """Metadata shown by ``sitios plugins`` and used for registry logging.

    Attributes:
        name: Human readable plugin name
        version: Semantic version
        providers: Provider keys the plugin serves (e.g. ``["trello:list"]``)
        doc_url: Documentation URL

    """

    name: str
    version: str
    providers: list[str]
    doc_url: str


@runtime_checkable
class SourcePlugin(Protocol):
    """Capability interface every source plugin implements."""

    def get_plugin_metadata(self) -> PluginMeta: ...

    def produce(self, root: str, data: Mapping[str, Any], site: SiteGenerator) -> list[Path]:
        """Write the pages for one source and return their paths."""
        ...

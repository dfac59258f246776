"""Data model shared by generation, provisioning and onboarding.

All models are pydantic and frozen: a descriptor handed to a generation run is
never mutated by it.
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["HOSTNAME_PATTERN", "Globals", "NavItem", "RunOutcome", "Site", "SourceDescriptor", "SourceResult"]

# Dot-separated DNS labels, with underscores since Trello usernames end up in them.
# A bare label ("alice") is a subdomain of the main hostname.
_LABEL = r"[A-Za-z0-9_](?:[A-Za-z0-9_-]{0,61}[A-Za-z0-9_])?"
HOSTNAME_PATTERN = rf"^{_LABEL}(?:\.{_LABEL})*$"
HOSTNAME_MAX_LENGTH = 253


class NavItem(BaseModel):
    """One entry of the site navigation bar."""

    model_config = ConfigDict(frozen=True)

    url: str
    txt: str


class Globals(BaseModel):
    """Site-wide metadata passed to ``init`` and to every page template.

    ``description``, ``aside`` and ``footer`` are written in markdown.
    Unknown keys are kept so site owners can feed extra variables to
    templates.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    name: str = ""
    description: str = ""
    favicon: str = ""
    header: str = ""
    aside: str = ""
    footer: str = ""
    includes: tuple[str, ...] = ()
    nav: tuple[NavItem, ...] = ()
    justhtml: bool = False
    root_url: str = Field(default="", alias="rootURL")

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> Globals:
        """Build globals from stored site data, treating ``None`` values as unset."""
        return cls.model_validate({key: value for key, value in data.items() if value is not None})


class SourceDescriptor(BaseModel):
    """One external content source mounted at ``root`` in the generated site.

    ``data`` holds provider-specific parameters (ids, API keys). ``reference``
    is an optional per-source pointer that plugins receive as ``data["ref"]``.
    """

    model_config = ConfigDict(frozen=True)

    provider: str
    root: str
    data: dict[str, Any] = Field(default_factory=dict)
    reference: str = ""
    id: int | None = None

    def plugin_data(self) -> dict[str, Any]:
        """Return a private copy of ``data`` for a plugin invocation."""
        data = deepcopy(self.data)
        if self.reference:
            data["ref"] = self.reference
        return data


class SourceResult(BaseModel):
    """Pages written for one processed source."""

    model_config = ConfigDict(frozen=True)

    source: SourceDescriptor
    pages: tuple[Path, ...] = ()


class RunOutcome(BaseModel):
    """Result of a successful run. Failures raise instead of returning one."""

    processed: list[SourceResult] = Field(default_factory=list)
    skipped: list[SourceDescriptor] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return sum(len(result.pages) for result in self.processed)


class Site(BaseModel):
    """A provisioned site: domain, site-wide data and its sources."""

    id: int
    domain: str
    data: dict[str, Any] = Field(default_factory=dict)
    sources: list[SourceDescriptor] = Field(default_factory=list)

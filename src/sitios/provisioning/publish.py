"""Publishing: generate a stored site and deploy the result.

A site is generated into a temporary directory first; only a successful run
replaces the previously deployed tree at ``<deploy_dir>/<domain>``.
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any, Protocol

from sitios.config.settings import SitiosSettings
from sitios.generation.session import generate
from sitios.models import HOSTNAME_MAX_LENGTH, HOSTNAME_PATTERN, Globals, Site
from sitios.plugins.registry import PluginRegistry, default_registry
from sitios.provisioning.exceptions import UnsafeDomainError

logger = logging.getLogger(__name__)

_hostname_re = re.compile(HOSTNAME_PATTERN)

GLOBAL_DEFAULTS: dict[str, Any] = {
    "name": "unnamed",
    "description": "~",
    "nav": [],
    "aside": "",
    "footer": "",
    "includes": [],
}


def site_host(domain: str, main_hostname: str) -> str:
    """Hostname a site is served and deployed under.

    Bare subdomains (``"alice"``) live under the main hostname. Anything that
    is not a hostname raises :class:`UnsafeDomainError`.
    """
    if len(domain) > HOSTNAME_MAX_LENGTH or not _hostname_re.fullmatch(domain):
        raise UnsafeDomainError(domain)
    return domain if "." in domain else f"{domain}.{main_hostname}"


def site_globals(site: Site, settings: SitiosSettings) -> Globals:
    """Default globals for ``site`` overlaid with the site's own data."""
    values = {
        "rootURL": f"https://{site_host(site.domain, settings.service.main_hostname)}",
        **GLOBAL_DEFAULTS,
    }
    values.update({key: value for key, value in site.data.items() if value is not None})
    return Globals.model_validate(values)


class SitePublisher(Protocol):
    def publish(self, site: Site) -> Path: ...


class Publisher:
    """Generate sites and deploy them under ``settings.service.deploy_dir``."""

    def __init__(
        self,
        settings: SitiosSettings,
        *,
        registry: PluginRegistry | None = None,
        static_dir: Path | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry if registry is not None else default_registry()
        self.static_dir = static_dir

    @property
    def deploy_dir(self) -> Path:
        return Path(self.settings.service.deploy_dir)

    def publish(self, site: Site) -> Path:
        """Generate ``site`` and swap it into place. Returns the deployed directory."""
        host = site_host(site.domain, self.settings.service.main_hostname)
        destination = self._destination(site.domain, host)
        generation = self.settings.generation
        with tempfile.TemporaryDirectory(prefix="sitios-") as tmp:
            build_dir = Path(tmp) / "_site"
            outcome = generate(
                site_globals(site, self.settings),
                site.sources,
                target_dir=build_dir,
                source_dir=self.static_dir or Path(tmp),
                registry=self.registry,
                discipline=generation.discipline,
                max_workers=generation.max_workers,
                postprocess=generation.postprocess,
                static_extensions=generation.static_extensions,
            )

            if destination.exists():
                shutil.rmtree(destination)
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copytree(build_dir, destination)

        logger.info("Published %s (%d page(s)) to %s", host, outcome.page_count, destination)
        return destination

    def _destination(self, domain: str, host: str) -> Path:
        destination = self.deploy_dir / host
        deploy_root = self.deploy_dir.resolve()
        if destination.resolve().parent != deploy_root:
            raise UnsafeDomainError(domain, f"resolves outside {deploy_root}")
        return destination


__all__ = ["GLOBAL_DEFAULTS", "Publisher", "SitePublisher", "site_globals", "site_host"]

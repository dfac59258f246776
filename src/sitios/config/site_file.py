"""Site definition files for ``sitios generate``.

A site file is YAML (or JSON, which YAML accepts) holding the site globals
and its sources::

    globals:
      name: My site
      nav:
        - {url: /, txt: Home}
    sources:
      - provider: url:markdown
        root: /about
        data: {url: https://example.com/about.md}

``data`` is accepted in place of ``globals``, matching the shape stored by the
provisioning service.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from sitios.config.exceptions import ConfigParseError, SiteFileError
from sitios.models import Globals, SourceDescriptor


def load_site_file(path: Path) -> tuple[Globals, list[SourceDescriptor]]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigParseError(path, str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigParseError(path, str(e)) from e

    if not isinstance(raw, dict):
        raise SiteFileError(path, "expected a mapping with 'globals' and 'sources'")

    globals_data = raw.get("globals", raw.get("data")) or {}
    if not isinstance(globals_data, dict):
        raise SiteFileError(path, "'globals' must be a mapping")
    sources_data = raw.get("sources") or []
    if not isinstance(sources_data, list):
        raise SiteFileError(path, "'sources' must be a list")

    try:
        globals_ = Globals.from_data(globals_data)
        sources = [SourceDescriptor.model_validate(source) for source in sources_data]
    except ValidationError as e:
        raise SiteFileError(path, str(e)) from e
    return globals_, sources


__all__ = ["load_site_file"]

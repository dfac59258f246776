"""``url:html`` and ``url:markdown``: one page from the content behind a URL."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import httpx
from markupsafe import Markup

from sitios.plugins.base import PluginMeta
from sitios.plugins.exceptions import PluginDataError, SourceFetchError
from sitios.rendering.markup import render_markup

if TYPE_CHECKING:
    from sitios.generation.generator import SiteGenerator

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class UrlPlugin:
    """Fetch ``data["url"]`` and write it as the page at ``root``.

    With ``markup="markdown"`` the body is rendered from markdown; with
    ``markup="html"`` it is embedded as is. ``data["title"]`` sets the page
    title.
    """

    def __init__(
        self,
        markup: Literal["html", "markdown"] = "html",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.markup = markup
        self.timeout = timeout
        self._transport = transport

    def __repr__(self) -> str:
        return f"UrlPlugin(markup={self.markup!r})"

    def get_plugin_metadata(self) -> PluginMeta:
        return PluginMeta(
            name="URL",
            version="1.0.0",
            providers=[f"url:{self.markup}"],
            doc_url="https://github.com/sitios/sitios#url-sources",
        )

    def produce(self, root: str, data: Mapping[str, Any], site: SiteGenerator) -> list[Path]:
        url = data.get("url")
        if not url:
            raise PluginDataError(f"url:{self.markup}", ["url"])

        text = self._fetch(str(url))
        body = render_markup(text) if self.markup == "markdown" else Markup(text)
        title = str(data.get("title", ""))
        content = site.renderer.render_article(body, title=title)
        return [site.generate_page(root, content=content, title=title, props={"url": url})]

    def _fetch(self, url: str) -> str:
        logger.debug("Fetching %s", url)
        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True, transport=self._transport) as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SourceFetchError(url, str(e)) from e
        return response.text


__all__ = ["UrlPlugin"]

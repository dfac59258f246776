"""``trello:list``: a blog built from the cards of one Trello list.

Each open card becomes a post at ``<root>/<card-slug>`` with its description
rendered from markdown. ``root`` itself gets an index of the posts in list
order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sitios.plugins.base import PluginMeta
from sitios.plugins.exceptions import PluginDataError
from sitios.rendering.markup import render_markup
from sitios.text import slugify, summarize
from sitios.trello.client import DEFAULT_TIMEOUT, TrelloClient

if TYPE_CHECKING:
    from collections.abc import Callable

    from sitios.generation.generator import SiteGenerator

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "apiKey", "apiToken")


class TrelloListPlugin:
    """Turn the cards of list ``data["id"]`` into posts."""

    def __init__(self, client_factory: Callable[[str, str], TrelloClient] | None = None) -> None:
        self._client_factory = client_factory or (
            lambda key, token: TrelloClient(key, token, timeout=DEFAULT_TIMEOUT)
        )

    def __repr__(self) -> str:
        return "TrelloListPlugin()"

    def get_plugin_metadata(self) -> PluginMeta:
        return PluginMeta(
            name="Trello list",
            version="1.0.0",
            providers=["trello:list"],
            doc_url="https://github.com/sitios/sitios#trello-sources",
        )

    def produce(self, root: str, data: Mapping[str, Any], site: SiteGenerator) -> list[Path]:
        missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
        if missing:
            raise PluginDataError("trello:list", missing)

        with self._client_factory(str(data["apiKey"]), str(data["apiToken"])) as client:
            cards = client.list_cards(str(data["id"]))
        cards = sorted(cards, key=lambda card: card.get("pos", 0))

        base = "/" + root.strip("/")
        written: list[Path] = []
        items: list[dict[str, str]] = []
        used: set[str] = set()
        for card in cards:
            slug = self._unique_slug(card, used)
            href = f"{base.rstrip('/')}/{slug}/"
            title = card.get("name", "")
            date = (card.get("dateLastActivity") or "")[:10]
            body = site.renderer.render_article(render_markup(card.get("desc", "")), title=title, date=date)
            written.append(site.generate_page(href, content=body, title=title, props={"card": card.get("id")}))
            items.append({"href": href, "title": title, "summary": summarize(card.get("desc", ""))})

        written.append(site.generate_page(base, content=site.renderer.render_listing(items)))
        logger.info("trello:list %s produced %d post(s) under %s", data["id"], len(cards), base)
        return written

    @staticmethod
    def _unique_slug(card: Mapping[str, Any], used: set[str]) -> str:
        slug = slugify(card.get("name", ""), fallback=str(card.get("shortLink") or card.get("id") or "post"))
        if slug in used:
            slug = f"{slug}-{card.get('shortLink') or card.get('id')}"
        used.add(slug)
        return slug


__all__ = ["TrelloListPlugin"]

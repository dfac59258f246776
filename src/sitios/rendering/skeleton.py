"""Page skeleton: turns site globals plus page content into an HTML document."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from sitios.models import Globals
from sitios.rendering.markup import render_markup, split_includes

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
BUNDLE_PATH = "/bundle.js"


class PageRenderer:
    """Render pages, listings and the error page with the bundled templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_page(
        self,
        global_: Globals,
        children: str | Markup,
        *,
        title: str = "",
    ) -> str:
        """Render a full document around ``children``.

        ``children`` is trusted HTML produced by a plugin. ``title`` defaults
        to the site name.
        """
        stylesheets, scripts = split_includes(global_.includes)
        template = self.env.get_template("page.html.jinja")
        return template.render(
            site=global_,
            title=title or global_.name,
            description=render_markup(global_.description),
            aside=render_markup(global_.aside),
            footer=render_markup(global_.footer),
            stylesheets=stylesheets,
            scripts=scripts,
            bundle=None if global_.justhtml else BUNDLE_PATH,
            children=Markup(children),
        )

    def render_listing(self, items: Iterable[dict[str, str]]) -> Markup:
        """Render a list of ``{"href", "title", "summary"}`` links."""
        template = self.env.get_template("listing.html.jinja")
        return Markup(template.render(items=list(items)))

    def render_article(self, body: str | Markup, *, title: str = "", date: str = "") -> Markup:
        """Wrap rendered content in an ``<article>`` with optional heading and date."""
        template = self.env.get_template("article.html.jinja")
        return Markup(template.render(title=title, date=date, body=Markup(body)))

    def render_error_page(self, global_: Globals) -> str:
        """Render the page served for missing paths."""
        body = Markup(self.env.get_template("error.html.jinja").render(site=global_))
        return self.render_page(global_, body, title="Not found")


__all__ = ["BUNDLE_PATH", "TEMPLATES_DIR", "PageRenderer"]

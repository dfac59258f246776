"""Markdown rendering for site-wide text fields and plugin content."""

from __future__ import annotations

from markupsafe import Markup
from markdown_it import MarkdownIt

# Site owners write these fields themselves, so raw HTML is allowed through.
_md = MarkdownIt("commonmark", {"html": True})


def render_markup(text: str | None) -> Markup:
    """Render markdown to HTML that templates embed without escaping.

    Returns an empty ``Markup`` for ``None`` or blank text.
    """
    if not text or not text.strip():
        return Markup("")
    return Markup(_md.render(text).strip())


def split_includes(includes: tuple[str, ...] | list[str]) -> tuple[list[str], list[str]]:
    """Partition include URLs into stylesheets and scripts.

    The suffix is checked after dropping any query string, so
    ``theme.css?v=2`` is a stylesheet. Anything else is ignored.
    """
    css: list[str] = []
    js: list[str] = []
    for url in includes:
        path = url.split("?", 1)[0]
        if path.endswith(".css"):
            css.append(url)
        elif path.endswith(".js"):
            js.append(url)
    return css, js


__all__ = ["render_markup", "split_includes"]

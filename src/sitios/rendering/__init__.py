"""HTML rendering: page skeleton templates and markdown helpers."""

from sitios.rendering.markup import render_markup, split_includes
from sitios.rendering.skeleton import BUNDLE_PATH, PageRenderer

__all__ = ["BUNDLE_PATH", "PageRenderer", "render_markup", "split_includes"]

"""Output side of a generation run: pages, static assets, error page and bundle.

``SiteGenerator`` owns the target directory. Source plugins only ever write
through :meth:`SiteGenerator.generate_page`, which is safe to call from the
concurrent runner's worker threads.
"""

from __future__ import annotations

import json
import logging
import shutil
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from markupsafe import Markup

from sitios.generation.exceptions import (
    GeneratorNotInitializedError,
    InitializationError,
    PagePathError,
    StaticCopyError,
    UnknownPostprocessorError,
)
from sitios.models import Globals
from sitios.rendering.skeleton import PageRenderer

logger = logging.getLogger(__name__)

ERROR_PAGE_HOOK = "sitio-error"
ASSETS_DIR = Path(__file__).resolve().parents[1] / "rendering" / "assets"
MANIFEST_NAME = "pages.json"
BUNDLE_NAME = "bundle.js"
ERROR_PAGE_NAME = "error.html"


class SiteGenerator:
    """Write a static site into ``target_dir``.

    Args:
        target_dir: Output directory; created on :meth:`init`.
        source_dir: Directory static assets are copied from (default: cwd).
        renderer: Page skeleton renderer.

    """

    def __init__(
        self,
        target_dir: Path,
        *,
        source_dir: Path | None = None,
        renderer: PageRenderer | None = None,
    ) -> None:
        self.target_dir = Path(target_dir)
        self.source_dir = Path(source_dir) if source_dir is not None else Path.cwd()
        self.renderer = renderer or PageRenderer()
        self._globals: Globals | None = None
        self._pages: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._postprocessors: dict[str, Callable[[], Path]] = {
            ERROR_PAGE_HOOK: self._write_error_page,
        }

    @property
    def globals(self) -> Globals:
        if self._globals is None:
            raise GeneratorNotInitializedError
        return self._globals

    @property
    def pages(self) -> list[dict[str, Any]]:
        """Pages written so far, sorted by path."""
        with self._lock:
            return [self._pages[path] for path in sorted(self._pages)]

    def init(self, globals_: Globals) -> None:
        """Create the target directory and bind the site globals."""
        try:
            self.target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create target directory {self.target_dir}: {e}"
            raise InitializationError(msg) from e
        self._globals = globals_
        logger.info("Generating '%s' into %s", globals_.name or "unnamed", self.target_dir)

    def generate_page(
        self,
        path: str,
        *,
        content: str | Markup,
        title: str = "",
        props: dict[str, Any] | None = None,
    ) -> Path:
        """Render ``content`` inside the page skeleton and write it at ``path``.

        ``path`` is a site path such as ``/posts/hello``; the page lands in
        ``<target>/posts/hello/index.html``. ``props`` (JSON values) are kept
        with the page in the manifest written by :meth:`end`.
        """
        globals_ = self.globals
        url_path, output = self._resolve_page_path(path)
        html = self.renderer.render_page(globals_, content, title=title)

        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(html, encoding="utf-8")

        with self._lock:
            if url_path in self._pages:
                logger.warning("Page %s written twice, keeping the latest", url_path)
            entry: dict[str, Any] = {"path": url_path, "title": title or globals_.name}
            if props:
                entry["props"] = dict(props)
            self._pages[url_path] = entry

        logger.debug("Wrote page %s", url_path)
        return output

    def copy_static(self, extensions: Iterable[str]) -> list[Path]:
        """Copy files with the given extensions from the source directory.

        Extensions are matched exactly (``PNG`` does not match ``png``).
        The target directory is skipped when it lives inside the source.
        """
        self._require_init()
        wanted = {ext.lstrip(".") for ext in extensions}
        if not self.source_dir.is_dir():
            logger.warning("Static source directory %s does not exist, nothing copied", self.source_dir)
            return []

        target = self.target_dir.resolve()
        copied: list[Path] = []
        try:
            for candidate in sorted(self.source_dir.rglob("*")):
                if not candidate.is_file() or candidate.suffix[1:] not in wanted:
                    continue
                if candidate.resolve().is_relative_to(target):
                    continue
                destination = self.target_dir / candidate.relative_to(self.source_dir)
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(candidate, destination)
                copied.append(destination)
        except OSError as e:
            raise StaticCopyError(f"Failed to copy static assets from {self.source_dir}: {e}") from e

        logger.info("Copied %d static file(s)", len(copied))
        return copied

    def postprocess(self, hook: str) -> Path:
        """Run a named postprocessing hook."""
        self._require_init()
        try:
            runner = self._postprocessors[hook]
        except KeyError:
            raise UnknownPostprocessorError(hook, sorted(self._postprocessors)) from None
        return runner()

    def end(self) -> Path:
        """Finalize the output: write the client bundle and the page manifest."""
        globals_ = self.globals
        shutil.copyfile(ASSETS_DIR / BUNDLE_NAME, self.target_dir / BUNDLE_NAME)

        manifest = {
            "name": globals_.name,
            "rootURL": globals_.root_url,
            "pages": self.pages,
        }
        manifest_path = self.target_dir / MANIFEST_NAME
        manifest_path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Finalized site with %d page(s)", len(manifest["pages"]))
        return manifest_path

    def _require_init(self) -> None:
        if self._globals is None:
            raise GeneratorNotInitializedError

    def _resolve_page_path(self, path: str) -> tuple[str, Path]:
        parts = [part for part in path.strip().split("/") if part]
        if any(part in {"..", "."} for part in parts):
            raise PagePathError(path)

        output = self.target_dir.joinpath(*parts, "index.html")
        if not output.resolve().is_relative_to(self.target_dir.resolve()):
            raise PagePathError(path)

        url_path = "/" + "/".join(parts) + ("/" if parts else "")
        return url_path, output

    def _write_error_page(self) -> Path:
        output = self.target_dir / ERROR_PAGE_NAME
        output.write_text(self.renderer.render_error_page(self.globals), encoding="utf-8")
        return output


__all__ = ["ERROR_PAGE_HOOK", "SiteGenerator"]

"""One generation run, from ``init`` to ``end``.

A session drives a :class:`SiteGenerator` through a fixed lifecycle::

    UNINITIALIZED -> INITIALIZED -> SOURCES_PROCESSED
                  -> STATIC_ASSETS_COPIED -> ENDED

Any failure moves it to ``ABORTED`` and re-raises. Sessions are one-shot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from sitios.config.enums import Discipline
from sitios.config.settings import DEFAULT_STATIC_EXTENSIONS
from sitios.generation.exceptions import (
    FinalizationError,
    GenerationError,
    InitializationError,
    PostprocessError,
    SessionStateError,
)
from sitios.generation.generator import ERROR_PAGE_HOOK, SiteGenerator
from sitios.generation.runner import SourceRunner
from sitios.models import Globals, RunOutcome, SourceDescriptor
from sitios.plugins.registry import PluginRegistry, default_registry

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    SOURCES_PROCESSED = "sources_processed"
    STATIC_ASSETS_COPIED = "static_assets_copied"
    ENDED = "ended"
    ABORTED = "aborted"


class GenerationSession:
    """Run the generation lifecycle once against ``site``.

    Args:
        site: Generator the pages are written through.
        registry: Provider lookup for the sources.
        discipline: Source scheduling discipline.
        max_workers: Pool size for the concurrent discipline.
        postprocess: Whether to run the ``sitio-error`` hook.
        static_extensions: Extensions copied verbatim after the sources ran.

    """

    def __init__(
        self,
        site: SiteGenerator,
        registry: PluginRegistry,
        *,
        discipline: Discipline = Discipline.SEQUENTIAL,
        max_workers: int | None = None,
        postprocess: bool = True,
        static_extensions: Iterable[str] = DEFAULT_STATIC_EXTENSIONS,
    ) -> None:
        self.site = site
        self.registry = registry
        self.discipline = Discipline(discipline)
        self.max_workers = max_workers
        self.postprocess = postprocess
        self.static_extensions = tuple(static_extensions)
        self.state = SessionState.UNINITIALIZED

    def run(self, globals_: Globals | Mapping[str, Any], sources: Iterable[SourceDescriptor]) -> RunOutcome:
        if self.state is not SessionState.UNINITIALIZED:
            msg = f"Session already ran (state: {self.state.value}); create a new one"
            raise SessionStateError(msg)

        if not isinstance(globals_, Globals):
            globals_ = Globals.model_validate(globals_)

        try:
            return self._run(globals_, list(sources))
        except Exception:
            logger.debug("Session aborted in state %s", self.state.value)
            self.state = SessionState.ABORTED
            raise

    def _run(self, globals_: Globals, sources: list[SourceDescriptor]) -> RunOutcome:
        try:
            self.site.init(globals_)
        except InitializationError:
            raise
        except Exception as e:
            raise InitializationError(f"Generator init failed: {e}") from e
        self.state = SessionState.INITIALIZED

        runner = SourceRunner(self.registry, self.site, discipline=self.discipline, max_workers=self.max_workers)
        outcome = runner.run(sources)
        self.state = SessionState.SOURCES_PROCESSED

        if self.postprocess:
            try:
                self.site.postprocess(ERROR_PAGE_HOOK)
            except PostprocessError:
                raise
            except Exception as e:
                raise PostprocessError(ERROR_PAGE_HOOK, str(e)) from e

        self.site.copy_static(self.static_extensions)
        self.state = SessionState.STATIC_ASSETS_COPIED

        if globals_.justhtml:
            logger.info("justhtml set, skipping finalization")
        else:
            try:
                self.site.end()
            except GenerationError:
                raise
            except Exception as e:
                raise FinalizationError(f"Finalization failed: {e}") from e
        self.state = SessionState.ENDED
        return outcome


def generate(
    globals_: Globals | Mapping[str, Any],
    sources: Iterable[SourceDescriptor | Mapping[str, Any]],
    *,
    target_dir: Path,
    source_dir: Path | None = None,
    registry: PluginRegistry | None = None,
    discipline: Discipline = Discipline.SEQUENTIAL,
    max_workers: int | None = None,
    postprocess: bool = True,
    static_extensions: Iterable[str] = DEFAULT_STATIC_EXTENSIONS,
) -> RunOutcome:
    """Generate a whole site into ``target_dir`` in one call."""
    descriptors = [s if isinstance(s, SourceDescriptor) else SourceDescriptor.model_validate(s) for s in sources]
    session = GenerationSession(
        SiteGenerator(target_dir, source_dir=source_dir),
        registry if registry is not None else default_registry(),
        discipline=discipline,
        max_workers=max_workers,
        postprocess=postprocess,
        static_extensions=static_extensions,
    )
    return session.run(globals_, descriptors)


__all__ = ["GenerationSession", "SessionState", "generate"]

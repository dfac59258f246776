"""Run every configured source through the plugin that serves its provider.

Two disciplines:

- ``sequential`` (default): sources run in list order and the first failure
  stops the run; plugins after it are never invoked.
- ``concurrent``: every resolved source is submitted to a thread pool. The run
  waits until all of them have settled, then raises the first failure in
  completion order. Running siblings are never cancelled.

Sources whose provider has no plugin are skipped with a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from sitios.config.enums import Discipline
from sitios.generation.exceptions import SourceFailedError, redact
from sitios.models import RunOutcome, SourceDescriptor, SourceResult

if TYPE_CHECKING:
    from sitios.generation.generator import SiteGenerator
    from sitios.plugins.base import SourcePlugin
    from sitios.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)


class SourceRunner:
    """Resolve sources through ``registry`` and invoke their plugins on ``site``."""

    def __init__(
        self,
        registry: PluginRegistry,
        site: SiteGenerator,
        *,
        discipline: Discipline = Discipline.SEQUENTIAL,
        max_workers: int | None = None,
    ) -> None:
        self.registry = registry
        self.site = site
        self.discipline = Discipline(discipline)
        self.max_workers = max_workers

    def resolve(
        self, sources: Iterable[SourceDescriptor]
    ) -> tuple[list[tuple[SourceDescriptor, SourcePlugin]], list[SourceDescriptor]]:
        """Split sources into (source, plugin) pairs and skipped sources."""
        resolved: list[tuple[SourceDescriptor, SourcePlugin]] = []
        skipped: list[SourceDescriptor] = []
        for source in sources:
            plugin = self.registry.get(source.provider)
            if plugin is None:
                logger.warning("No plugin for provider '%s' (root %s), skipping source", source.provider, source.root)
                skipped.append(source)
            else:
                resolved.append((source, plugin))
        return resolved, skipped

    def run(self, sources: Iterable[SourceDescriptor]) -> RunOutcome:
        resolved, skipped = self.resolve(sources)
        if self.discipline is Discipline.CONCURRENT:
            processed = self._run_concurrent(resolved)
        else:
            processed = [self._invoke(source, plugin) for source, plugin in resolved]

        logger.info(
            "Processed %d source(s) (%s), skipped %d",
            len(processed),
            self.discipline.value,
            len(skipped),
        )
        return RunOutcome(processed=processed, skipped=skipped)

    def _run_concurrent(self, resolved: list[tuple[SourceDescriptor, SourcePlugin]]) -> list[SourceResult]:
        if not resolved:
            return []

        workers = self.max_workers or len(resolved)
        results: dict[int, SourceResult] = {}
        first_failure: SourceFailedError | None = None
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sitios-source") as pool:
            futures: dict[Future[SourceResult], int] = {
                pool.submit(self._invoke, source, plugin): index for index, (source, plugin) in enumerate(resolved)
            }
            for future in as_completed(futures):
                try:
                    results[futures[future]] = future.result()
                except SourceFailedError as exc:
                    if first_failure is None:
                        first_failure = exc

        if first_failure is not None:
            raise first_failure
        return [results[index] for index in sorted(results)]

    def _invoke(self, source: SourceDescriptor, plugin: SourcePlugin) -> SourceResult:
        data = source.plugin_data()
        try:
            pages = plugin.produce(source.root, data, self.site)
        except Exception as exc:
            logger.error(
                "Source '%s' at %s failed: %s (data: %s)",
                source.provider,
                source.root,
                exc,
                redact(source.data),
            )
            raise SourceFailedError(source.provider, source.root, source.data) from exc
        return SourceResult(source=source, pages=tuple(pages or ()))


__all__ = ["SourceRunner"]

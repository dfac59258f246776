from __future__ import annotations

import threading
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from sitios.generation.generator import SiteGenerator
from sitios.models import Globals, SourceDescriptor
from sitios.plugins.base import PluginMeta
from sitios.plugins.registry import PluginRegistry


class RecordingPlugin:
    """Test plugin: writes one page per call and records what it received."""

    def __init__(
        self,
        name: str = "recording",
        *,
        fail: Exception | None = None,
        delay: float = 0.0,
        started: threading.Event | None = None,
        wait_for: threading.Event | None = None,
    ) -> None:
        self.name = name
        self.fail = fail
        self.delay = delay
        self.started = started
        self.wait_for = wait_for
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.finished: list[str] = []
        self._lock = threading.Lock()

    def get_plugin_metadata(self) -> PluginMeta:
        return PluginMeta(name=self.name, version="0.0.1", providers=[f"test:{self.name}"], doc_url="")

    def produce(self, root: str, data: Mapping[str, Any], site: SiteGenerator) -> list[Path]:
        with self._lock:
            self.calls.append((root, dict(data)))
        if self.started is not None:
            self.started.set()
        if self.wait_for is not None:
            self.wait_for.wait(timeout=5)
        if self.delay:
            time.sleep(self.delay)
        if self.fail is not None:
            raise self.fail
        page = site.generate_page(root, content=f"<p>{self.name} at {root}</p>", title=self.name)
        with self._lock:
            self.finished.append(root)
        return [page]


def make_registry(**plugins: RecordingPlugin) -> PluginRegistry:
    """Registry with only the given plugins, keyed ``test:<kwarg>``."""
    return PluginRegistry(
        {f"test:{key}": plugin for key, plugin in plugins.items()},
        load_builtin=False,
        load_entry_points=False,
    )


@pytest.fixture
def make_plugin():
    return RecordingPlugin


@pytest.fixture
def registry_of():
    return make_registry


@pytest.fixture
def site_globals() -> Globals:
    return Globals(
        name="Test site",
        description="A *test* site",
        aside="Hello from the aside",
        footer="Made with sitios",
        includes=("https://cdn.example.com/theme.css", "https://cdn.example.com/app.js?v=2"),
        nav=({"url": "/", "txt": "Posts"},),
        rootURL="https://test.sitios.xyz",
    )


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "content"
    path.mkdir()
    return path


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    return tmp_path / "_site"


@pytest.fixture
def generator(target_dir: Path, source_dir: Path) -> SiteGenerator:
    return SiteGenerator(target_dir, source_dir=source_dir)


@pytest.fixture
def initialized_generator(generator: SiteGenerator, site_globals: Globals) -> SiteGenerator:
    generator.init(site_globals)
    return generator


def source(provider: str, root: str, **data: Any) -> SourceDescriptor:
    return SourceDescriptor(provider=provider, root=root, data=data)


@pytest.fixture
def make_source():
    return source

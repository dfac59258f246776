"""Tests for the plugin registry.

Tests cover:
- Built-in plugin loading
- Lookup semantics (``None`` for unknown providers)
- Plugin discovery via entry points, including broken plugins
- Explicit plugins overriding discovered ones
"""

from __future__ import annotations

from importlib.metadata import EntryPoint

import pytest

from sitios.plugins import registry as registry_module
from sitios.plugins.registry import ENTRY_POINT_GROUP, PluginRegistry, default_registry
from sitios.plugins.trello import TrelloListPlugin
from sitios.plugins.url import UrlPlugin


class NotePlugin:
    """Stand-in for a third-party ``evernote:note`` plugin."""

    def get_plugin_metadata(self):
        return {"name": "Evernote note", "version": "2.0.0", "providers": ["evernote:note"], "doc_url": ""}

    def produce(self, root, data, site):
        return []


class NotAPlugin:
    pass


def _entry_points(*eps: EntryPoint):
    def fake(*, group: str):
        assert group == ENTRY_POINT_GROUP
        return list(eps)

    return fake


class TestPluginRegistry:
    def test_builtin_providers(self):
        registry = PluginRegistry(load_entry_points=False)

        assert registry.providers() == ["trello:list", "url:html", "url:markdown"]
        assert len(registry) == 3
        assert "url:html" in registry
        assert isinstance(registry.get("trello:list"), TrelloListPlugin)
        assert registry.get("url:markdown").markup == "markdown"

    def test_unknown_provider_is_none(self):
        registry = PluginRegistry(load_entry_points=False)

        assert registry.get("evernote:note") is None
        assert "evernote:note" not in registry

    def test_list_plugins_metadata(self):
        listed = dict(PluginRegistry(load_entry_points=False).list_plugins())

        assert listed["url:html"]["name"] == "URL"
        assert listed["trello:list"]["providers"] == ["trello:list"]

    def test_entry_point_plugins(self, monkeypatch):
        ep = EntryPoint(name="evernote:note", value=f"{__name__}:NotePlugin", group=ENTRY_POINT_GROUP)
        monkeypatch.setattr(registry_module, "entry_points", _entry_points(ep))

        registry = PluginRegistry()

        assert isinstance(registry.get("evernote:note"), NotePlugin)
        assert len(registry) == 4

    def test_broken_entry_points_are_skipped(self, monkeypatch, caplog):
        broken = EntryPoint(name="broken:import", value="sitios_missing_module:Plugin", group=ENTRY_POINT_GROUP)
        invalid = EntryPoint(name="broken:type", value=f"{__name__}:NotAPlugin", group=ENTRY_POINT_GROUP)
        monkeypatch.setattr(registry_module, "entry_points", _entry_points(broken, invalid))

        registry = PluginRegistry()

        assert "broken:import" not in registry
        assert "broken:type" not in registry
        assert "broken:import" in caplog.text
        assert "broken:type" in caplog.text

    def test_explicit_plugins_win(self):
        custom = UrlPlugin("markdown")
        registry = PluginRegistry({"url:html": custom}, load_entry_points=False)

        assert registry.get("url:html") is custom

    def test_only_explicit_plugins(self):
        registry = PluginRegistry({"x:y": NotePlugin()}, load_builtin=False, load_entry_points=False)

        assert registry.providers() == ["x:y"]
        assert repr(registry) == "PluginRegistry(providers=[x:y])"

    def test_registry_is_read_only(self):
        registry = PluginRegistry(load_entry_points=False)

        with pytest.raises(TypeError):
            registry._plugins["x:y"] = NotePlugin()


def test_default_registry_is_built_once(monkeypatch):
    monkeypatch.setattr(registry_module, "_default_registry", None)

    first = default_registry()

    assert default_registry() is first

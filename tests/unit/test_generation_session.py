"""Tests for the generation session lifecycle."""

from __future__ import annotations

from pathlib import Path

import pytest

from sitios.generation.exceptions import (
    FinalizationError,
    InitializationError,
    PostprocessError,
    SessionStateError,
    SourceFailedError,
)
from sitios.generation.generator import SiteGenerator
from sitios.generation.session import GenerationSession, SessionState, generate
from sitios.models import Globals


class SpyGenerator(SiteGenerator):
    """Records the lifecycle calls made by a session."""

    def __init__(self, *args, fail_on: str | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.events: list[str] = []
        self.fail_on = fail_on

    def _record(self, name: str) -> None:
        self.events.append(name)
        if self.fail_on == name:
            raise OSError(f"{name} exploded")

    def init(self, globals_):
        self._record("init")
        super().init(globals_)

    def postprocess(self, hook):
        self._record(f"postprocess:{hook}")
        return super().postprocess(hook)

    def copy_static(self, extensions):
        self._record("copy_static")
        return super().copy_static(extensions)

    def end(self):
        self._record("end")
        return super().end()


@pytest.fixture
def spy(target_dir: Path, source_dir: Path) -> SpyGenerator:
    return SpyGenerator(target_dir, source_dir=source_dir)


def test_full_lifecycle_order(spy, registry_of, make_plugin, make_source, site_globals):
    session = GenerationSession(spy, registry_of(p=make_plugin()))

    outcome = session.run(site_globals, [make_source("test:p", "/a")])

    assert spy.events == ["init", "postprocess:sitio-error", "copy_static", "end"]
    assert session.state is SessionState.ENDED
    assert outcome.page_count == 1


def test_only_unknown_providers_succeeds(spy, registry_of, make_plugin, make_source, site_globals):
    plugin = make_plugin()
    session = GenerationSession(spy, registry_of(p=plugin))

    outcome = session.run(site_globals, [make_source("unknown:x", "/a")])

    assert plugin.calls == []
    assert session.state is SessionState.ENDED
    assert len(outcome.skipped) == 1


def test_source_failure_skips_static_copy(spy, registry_of, make_plugin, make_source, site_globals):
    session = GenerationSession(spy, registry_of(p=make_plugin(fail=RuntimeError("boom"))))

    with pytest.raises(SourceFailedError):
        session.run(site_globals, [make_source("test:p", "/a")])

    assert "copy_static" not in spy.events
    assert "end" not in spy.events
    assert session.state is SessionState.ABORTED


def test_justhtml_skips_end(spy, registry_of, make_plugin, make_source, site_globals, target_dir):
    session = GenerationSession(spy, registry_of(p=make_plugin()))

    session.run(site_globals.model_copy(update={"justhtml": True}), [make_source("test:p", "/a")])

    assert "end" not in spy.events
    assert spy.events.count("copy_static") == 1
    assert session.state is SessionState.ENDED
    assert not (target_dir / "bundle.js").exists()


def test_end_runs_once_after_static_copy(spy, registry_of, site_globals):
    session = GenerationSession(spy, registry_of())

    session.run(site_globals, [])

    assert spy.events.count("end") == 1
    assert spy.events.index("copy_static") < spy.events.index("end")


def test_postprocess_can_be_disabled(spy, registry_of, site_globals, target_dir):
    session = GenerationSession(spy, registry_of(), postprocess=False)

    session.run(site_globals, [])

    assert not any(event.startswith("postprocess") for event in spy.events)
    assert not (target_dir / "error.html").exists()


def test_init_failure_runs_no_source(target_dir, source_dir, registry_of, make_plugin, make_source, site_globals):
    plugin = make_plugin()
    spy = SpyGenerator(target_dir, source_dir=source_dir, fail_on="init")
    session = GenerationSession(spy, registry_of(p=plugin))

    with pytest.raises(InitializationError):
        session.run(site_globals, [make_source("test:p", "/a")])

    assert plugin.calls == []
    assert session.state is SessionState.ABORTED


def test_postprocess_failure(target_dir, source_dir, registry_of, site_globals):
    spy = SpyGenerator(target_dir, source_dir=source_dir, fail_on="postprocess:sitio-error")
    session = GenerationSession(spy, registry_of())

    with pytest.raises(PostprocessError) as exc_info:
        session.run(site_globals, [])

    assert exc_info.value.hook == "sitio-error"
    assert "copy_static" not in spy.events


def test_end_failure(target_dir, source_dir, registry_of, site_globals):
    spy = SpyGenerator(target_dir, source_dir=source_dir, fail_on="end")
    session = GenerationSession(spy, registry_of())

    with pytest.raises(FinalizationError):
        session.run(site_globals, [])

    assert session.state is SessionState.ABORTED


def test_session_is_one_shot(spy, registry_of, site_globals):
    session = GenerationSession(spy, registry_of())
    session.run(site_globals, [])

    with pytest.raises(SessionStateError):
        session.run(site_globals, [])


def test_globals_accepted_as_mapping(spy, registry_of):
    session = GenerationSession(spy, registry_of())

    session.run({"name": "From a dict", "rootURL": "https://x.example"}, [])

    assert spy.globals == Globals(name="From a dict", rootURL="https://x.example")


def test_static_copy_matches_configured_extensions(target_dir, source_dir, registry_of, site_globals):
    for name in ("logo.png", "photo.JPG", "notes.txt", "style.css", "img/icon.svg", "deep/a/b.jpeg"):
        path = source_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x")

    generate(site_globals, [], target_dir=target_dir, source_dir=source_dir, registry=registry_of())

    copied = sorted(
        str(p.relative_to(target_dir))
        for p in target_dir.rglob("*")
        if p.is_file() and p.suffix in {".png", ".JPG", ".txt", ".css", ".svg", ".jpeg"}
    )
    assert copied == ["deep/a/b.jpeg", "img/icon.svg", "logo.png", "notes.txt"]


def test_generate_accepts_plain_source_dicts(target_dir, source_dir, registry_of, make_plugin, site_globals):
    plugin = make_plugin()

    outcome = generate(
        site_globals,
        [{"provider": "test:p", "root": "/hello", "data": {"x": 1}}],
        target_dir=target_dir,
        source_dir=source_dir,
        registry=registry_of(p=plugin),
    )

    assert plugin.calls == [("/hello", {"x": 1})]
    assert (target_dir / "hello" / "index.html").is_file()
    assert outcome.page_count == 1

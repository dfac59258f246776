from __future__ import annotations

import pytest

from sitios.database.exceptions import SiteExistsError, SiteNotFoundError, SourceNotFoundError
from sitios.database.site_store import SiteStore
from sitios.models import SourceDescriptor


@pytest.fixture
def store(tmp_path):
    with SiteStore(tmp_path / "db" / "sitios.duckdb") as site_store:
        yield site_store


def test_create_and_fetch(store):
    site_id = store.create_site("alice@trello", "alice.sitios.xyz")

    site = store.fetch_site("alice@trello", site_id)

    assert site.id == site_id
    assert site.domain == "alice.sitios.xyz"
    assert site.data == {}
    assert site.sources == []


def test_duplicate_domain(store):
    store.create_site("alice@trello", "alice.sitios.xyz")

    with pytest.raises(SiteExistsError):
        store.create_site("bob@trello", "alice.sitios.xyz")


def test_sites_are_scoped_by_owner(store):
    site_id = store.create_site("alice@trello", "alice.sitios.xyz")
    store.create_site("bob@trello", "bob.sitios.xyz")

    assert [s.domain for s in store.list_sites("alice@trello")] == ["alice.sitios.xyz"]
    with pytest.raises(SiteNotFoundError):
        store.fetch_site("bob@trello", site_id)
    with pytest.raises(SiteNotFoundError):
        store.update_site_data("bob@trello", site_id, {"name": "stolen"})


def test_update_site_data(store):
    site_id = store.create_site("alice@trello", "alice.sitios.xyz")

    site = store.update_site_data("alice@trello", site_id, {"name": "Alice", "nav": [{"url": "/", "txt": "Home"}]})

    assert site.data == {"name": "Alice", "nav": [{"url": "/", "txt": "Home"}]}


def test_source_lifecycle(store):
    site_id = store.create_site("alice@trello", "alice.sitios.xyz")

    site = store.add_source("alice@trello", site_id)
    empty = site.sources[0]
    assert (empty.provider, empty.root, empty.reference, empty.data) == ("", "", "", {})

    site = store.update_source(
        "alice@trello",
        SourceDescriptor(id=empty.id, provider="trello:list", root="/posts", reference="r1", data={"id": "l1"}),
    )
    assert site.sources == [
        SourceDescriptor(id=empty.id, provider="trello:list", root="/posts", reference="r1", data={"id": "l1"})
    ]

    site = store.remove_source("alice@trello", empty.id)
    assert site.sources == []


def test_sources_of_other_owners_are_invisible(store):
    site_id = store.create_site("alice@trello", "alice.sitios.xyz")
    source_id = store.add_source("alice@trello", site_id).sources[0].id

    with pytest.raises(SourceNotFoundError):
        store.update_source("bob@trello", SourceDescriptor(id=source_id, provider="url:html", root="/"))
    with pytest.raises(SourceNotFoundError):
        store.remove_source("bob@trello", source_id)
    with pytest.raises(SiteNotFoundError):
        store.add_source("bob@trello", site_id)


def test_update_source_without_id(store):
    with pytest.raises(SourceNotFoundError):
        store.update_source("alice@trello", SourceDescriptor(provider="url:html", root="/"))


def test_delete_site_removes_sources(store):
    site_id = store.create_site("alice@trello", "alice.sitios.xyz")
    store.add_source("alice@trello", site_id)

    store.delete_site("alice@trello", site_id)

    assert store.list_sites("alice@trello") == []
    with pytest.raises(SiteNotFoundError):
        store.delete_site("alice@trello", site_id)


def test_in_memory_store():
    with SiteStore() as store:
        site_id = store.create_site("alice@trello", "a.example")
        assert store.fetch_site("alice@trello", site_id).domain == "a.example"


def test_persists_across_connections(tmp_path):
    path = tmp_path / "sitios.duckdb"
    with SiteStore(path) as store:
        site_id = store.create_site("alice@trello", "alice.sitios.xyz")

    with SiteStore(path) as store:
        assert store.fetch_site("alice@trello", site_id).domain == "alice.sitios.xyz"

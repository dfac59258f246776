"""DuckDB-backed store of provisioned sites and their sources.

Every operation is scoped by ``owner``: a site owned by someone else behaves
exactly like a missing one. JSON payloads (site data, source data) are kept
as serialized VARCHAR columns.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

import duckdb

from sitios.database.exceptions import SiteExistsError, SiteNotFoundError, SourceNotFoundError
from sitios.models import Site, SourceDescriptor

logger = logging.getLogger(__name__)

SCHEMA = (
    "CREATE SEQUENCE IF NOT EXISTS sites_id_seq START 1",
    "CREATE SEQUENCE IF NOT EXISTS sources_id_seq START 1",
    """
    CREATE TABLE IF NOT EXISTS sites (
        id INTEGER PRIMARY KEY DEFAULT nextval('sites_id_seq'),
        owner VARCHAR NOT NULL,
        domain VARCHAR NOT NULL UNIQUE,
        data VARCHAR NOT NULL DEFAULT '{}'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sources (
        id INTEGER PRIMARY KEY DEFAULT nextval('sources_id_seq'),
        site INTEGER NOT NULL,
        provider VARCHAR NOT NULL DEFAULT '',
        reference VARCHAR NOT NULL DEFAULT '',
        root VARCHAR NOT NULL DEFAULT '',
        data VARCHAR NOT NULL DEFAULT '{}'
    )
    """,
)


class SiteStore:
    """Sites and sources, per owner.

    Args:
        db_path: DuckDB file; ``None`` keeps everything in memory.

    """

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path
        if db_path is not None:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = duckdb.connect(str(db_path) if db_path else ":memory:")
        self._lock = threading.RLock()
        with self._lock:
            for statement in SCHEMA:
                self._conn.execute(statement)
        logger.debug("SiteStore ready (db=%s)", "memory" if db_path is None else db_path)

    def __enter__(self) -> SiteStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def list_sites(self, owner: str) -> list[Site]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT id FROM sites WHERE owner = ? ORDER BY id",
                [owner],
            ).fetchall()
            return [self.fetch_site(owner, row[0]) for row in rows]

    def create_site(self, owner: str, domain: str) -> int:
        """Create an empty site and return its id."""
        with self._lock:
            taken = self._conn.execute("SELECT 1 FROM sites WHERE domain = ?", [domain]).fetchone()
            if taken:
                raise SiteExistsError(domain)
            try:
                row = self._conn.execute(
                    "INSERT INTO sites (owner, domain) VALUES (?, ?) RETURNING id",
                    [owner, domain],
                ).fetchone()
            except duckdb.ConstraintException as e:
                raise SiteExistsError(domain) from e
        logger.info("Created site %s (%s) for %s", row[0], domain, owner)
        return int(row[0])

    def delete_site(self, owner: str, site_id: int) -> None:
        """Delete a site together with its sources."""
        with self._lock:
            self._require_site(owner, site_id)
            self._conn.execute("DELETE FROM sources WHERE site = ?", [site_id])
            self._conn.execute("DELETE FROM sites WHERE id = ? AND owner = ?", [site_id, owner])
        logger.info("Deleted site %s for %s", site_id, owner)

    def fetch_site(self, owner: str, site_id: int) -> Site:
        with self._lock:
            row = self._conn.execute(
                "SELECT id, domain, data FROM sites WHERE owner = ? AND id = ?",
                [owner, site_id],
            ).fetchone()
            if row is None:
                raise SiteNotFoundError(site_id, owner)
            sources = self._conn.execute(
                "SELECT id, provider, reference, root, data FROM sources WHERE site = ? ORDER BY id",
                [site_id],
            ).fetchall()
        return Site(
            id=row[0],
            domain=row[1],
            data=json.loads(row[2] or "{}"),
            sources=[
                SourceDescriptor(
                    id=source_id,
                    provider=provider,
                    reference=reference,
                    root=root,
                    data=json.loads(data or "{}"),
                )
                for source_id, provider, reference, root, data in sources
            ],
        )

    def update_site_data(self, owner: str, site_id: int, data: dict[str, Any]) -> Site:
        with self._lock:
            self._require_site(owner, site_id)
            self._conn.execute(
                "UPDATE sites SET data = ? WHERE id = ? AND owner = ?",
                [json.dumps(data), site_id, owner],
            )
            return self.fetch_site(owner, site_id)

    def add_source(self, owner: str, site_id: int) -> Site:
        """Append an empty source to a site; fill it in with :meth:`update_source`."""
        with self._lock:
            self._require_site(owner, site_id)
            self._conn.execute("INSERT INTO sources (site) VALUES (?)", [site_id])
            return self.fetch_site(owner, site_id)

    def update_source(self, owner: str, source: SourceDescriptor) -> Site:
        """Overwrite root, provider, reference and data of an existing source."""
        with self._lock:
            site_id = self._source_site(owner, source.id)
            self._conn.execute(
                "UPDATE sources SET root = ?, provider = ?, reference = ?, data = ? WHERE id = ?",
                [source.root, source.provider, source.reference, json.dumps(source.data), source.id],
            )
            return self.fetch_site(owner, site_id)

    def remove_source(self, owner: str, source_id: int) -> Site:
        with self._lock:
            site_id = self._source_site(owner, source_id)
            self._conn.execute("DELETE FROM sources WHERE id = ?", [source_id])
            return self.fetch_site(owner, site_id)

    def _require_site(self, owner: str, site_id: int) -> None:
        row = self._conn.execute("SELECT 1 FROM sites WHERE owner = ? AND id = ?", [owner, site_id]).fetchone()
        if row is None:
            raise SiteNotFoundError(site_id, owner)

    def _source_site(self, owner: str, source_id: int | None) -> int:
        if source_id is None:
            raise SourceNotFoundError(source_id, owner)
        row = self._conn.execute(
            """
            SELECT sites.id FROM sources
            INNER JOIN sites ON sources.site = sites.id
            WHERE sites.owner = ? AND sources.id = ?
            """,
            [owner, source_id],
        ).fetchone()
        if row is None:
            raise SourceNotFoundError(source_id, owner)
        return int(row[0])


__all__ = ["SiteStore"]

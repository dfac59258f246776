"""Persistence for provisioned sites."""

from sitios.database.exceptions import DatabaseError, SiteExistsError, SiteNotFoundError, SourceNotFoundError
from sitios.database.site_store import SiteStore

__all__ = ["DatabaseError", "SiteExistsError", "SiteNotFoundError", "SiteStore", "SourceNotFoundError"]

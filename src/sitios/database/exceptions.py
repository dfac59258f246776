"""Custom exceptions for the site store."""

from __future__ import annotations

from sitios.exceptions import SitiosError


class DatabaseError(SitiosError):
    """Base exception for database-related errors."""


class SiteExistsError(DatabaseError):
    """Raised when a site is created for a domain that is already taken."""

    def __init__(self, domain: str) -> None:
        self.domain = domain
        super().__init__(f"Site '{domain}' already exists")


class SiteNotFoundError(DatabaseError):
    """Raised when a site does not exist or belongs to another owner."""

    def __init__(self, site_id: int, owner: str) -> None:
        self.site_id = site_id
        self.owner = owner
        super().__init__(f"Site {site_id} not found for owner '{owner}'")


class SourceNotFoundError(DatabaseError):
    """Raised when a source does not exist or its site belongs to another owner."""

    def __init__(self, source_id: int | None, owner: str) -> None:
        self.source_id = source_id
        self.owner = owner
        super().__init__(f"Source {source_id} not found for owner '{owner}'")

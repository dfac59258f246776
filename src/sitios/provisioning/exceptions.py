"""Exceptions for publishing and the provisioning API."""

from __future__ import annotations

from sitios.exceptions import SitiosError


class ProvisioningError(SitiosError):
    """Base exception for provisioning errors."""


class UnsafeDomainError(ProvisioningError):
    """Raised when a site domain is not a hostname or would deploy outside the deploy directory."""

    def __init__(self, domain: str, reason: str = "not a valid hostname") -> None:
        self.domain = domain
        self.reason = reason
        super().__init__(f"Refusing to deploy site '{domain}': {reason}")


class ServiceFailure(Exception):
    """Stops request handling with a plain-text error response."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)

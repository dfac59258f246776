"""Exceptions for site generation runs."""

from __future__ import annotations

from typing import Any

from sitios.exceptions import SitiosError

_SECRET_MARKERS = ("key", "token", "secret", "password")


def redact(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with secret-looking values masked for logs."""
    return {
        key: "***" if any(marker in key.lower() for marker in _SECRET_MARKERS) else value
        for key, value in data.items()
    }


class GenerationError(SitiosError):
    """Base exception for generation failures. Any of these aborts the run."""


class InitializationError(GenerationError):
    """Raised when the generator cannot be initialized with the site globals."""


class SourceFailedError(GenerationError):
    """Raised when a source plugin fails; carries the failing source's context."""

    def __init__(self, provider: str, root: str, data: dict[str, Any]) -> None:
        self.provider = provider
        self.root = root
        self.data = data
        super().__init__(f"Source '{provider}' at '{root}' failed (data: {redact(data)})")


class PostprocessError(GenerationError):
    """Raised when a postprocessing hook fails."""

    def __init__(self, hook: str, reason: str) -> None:
        self.hook = hook
        self.reason = reason
        super().__init__(f"Postprocessing hook '{hook}' failed: {reason}")


class UnknownPostprocessorError(PostprocessError):
    """Raised when a postprocessing hook name is not known to the generator."""

    def __init__(self, hook: str, available: list[str]) -> None:
        super().__init__(hook, f"unknown hook, available: {', '.join(available)}")


class FinalizationError(GenerationError):
    """Raised when the generator fails to finalize the output."""


class StaticCopyError(GenerationError):
    """Raised when static assets cannot be copied into the output."""


class GeneratorNotInitializedError(GenerationError):
    """Raised when the generator is used before ``init``."""

    def __init__(self, message: str = "Generator has not been initialized. Call init() first.") -> None:
        super().__init__(message)


class PagePathError(GenerationError):
    """Raised when a page path would escape the target directory."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Page path '{path}' resolves outside the target directory")


class SessionStateError(GenerationError):
    """Raised when a session is driven out of its lifecycle order."""

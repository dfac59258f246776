"""Exceptions raised by the Trello client."""

from __future__ import annotations

from sitios.exceptions import SitiosError


class TrelloError(SitiosError):
    """Base exception for Trello errors."""


class TrelloAPIError(TrelloError):
    """Raised when the Trello API answers with a non-retryable error.

    ``status_code`` is ``None`` when no response was received at all
    (transport failure after retries).
    """

    def __init__(self, path: str, status_code: int | None, body: str = "") -> None:
        self.path = path
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "no response"
        detail = f": {body[:200]}" if body else ""
        super().__init__(f"Trello call {path} failed ({status}){detail}")


class TrelloAuthError(TrelloError):
    """Raised when a call needs a user token and none was given."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Trello call {path} requires an API token")

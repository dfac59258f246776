"""Minimal Trello REST client.

Only the handful of calls the onboarding wizard, the instant-site endpoint and
the ``trello:list`` plugin need. Transient failures (429, 5xx, transport
errors) are retried with exponential backoff; anything else surfaces as
:class:`TrelloAPIError`.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from sitios.trello.exceptions import TrelloAPIError, TrelloAuthError

logger = logging.getLogger(__name__)

TRELLO_API_BASE = "https://api.trello.com/1"
TRELLO_AUTHORIZE_URL = "https://trello.com/1/authorize"
DEFAULT_TIMEOUT = 30.0
MAX_ATTEMPTS = 4
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == HTTP_TOO_MANY_REQUESTS or status >= HTTP_SERVER_ERROR
    return isinstance(exc, httpx.TransportError)


class TrelloClient:
    """Synchronous Trello API client.

    Args:
        api_key: Application key.
        api_token: User token granted through :meth:`authorize_url`.
        timeout: Per-request timeout in seconds.
        base_url: API root, overridable for tests.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).

    """

    def __init__(
        self,
        api_key: str,
        api_token: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = TRELLO_API_BASE,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_token = api_token
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> TrelloClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def authorize_url(
        self,
        *,
        app_name: str = "sitios.xyz",
        expiration: str = "never",
        scope: str = "read",
        return_url: str | None = None,
    ) -> str:
        """URL where a user grants this application a token."""
        params = {
            "key": self.api_key,
            "name": app_name,
            "expiration": expiration,
            "scope": scope,
            "response_type": "token",
        }
        if return_url:
            params["return_url"] = return_url
        return f"{TRELLO_AUTHORIZE_URL}?{urlencode(params)}"

    def member(self, member_id: str = "me") -> dict[str, Any]:
        """Profile of a member (``username``, ``fullName``, ``avatarHash``, ``bio``)."""
        return self._get(f"/members/{member_id}")

    def boards(self) -> list[dict[str, Any]]:
        """Open boards of the authorized member, starred ones first."""
        boards = self._get("/members/me/boards", params={"filter": "open", "fields": "id,name,starred"})
        return sorted(boards, key=lambda b: (bool(b.get("starred")), b.get("name", "")), reverse=True)

    def board_lists(self, board_id: str) -> list[dict[str, Any]]:
        """Open lists of a board."""
        return self._get(f"/boards/{board_id}/lists/open")

    def get_list(self, list_id: str) -> dict[str, Any]:
        return self._get(f"/lists/{list_id}")

    def list_cards(self, list_id: str) -> list[dict[str, Any]]:
        """Open cards of a list, in list order."""
        return self._get(
            f"/lists/{list_id}/cards",
            params={"filter": "open", "fields": "id,name,desc,dateLastActivity,pos,shortLink"},
        )

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        if not self.api_token:
            raise TrelloAuthError(path)
        query = {"key": self.api_key, "token": self.api_token, **(params or {})}
        try:
            response = self._get_with_retries(path, query)
        except httpx.HTTPStatusError as e:
            raise TrelloAPIError(path, e.response.status_code, e.response.text) from e
        except httpx.HTTPError as e:
            raise TrelloAPIError(path, None, str(e)) from e
        return response.json()

    @retry(
        stop=stop_after_attempt(MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
        retry=retry_if_exception(_is_transient),
        reraise=True,
    )
    def _get_with_retries(self, path: str, query: dict[str, Any]) -> httpx.Response:
        response = self._client.get(path, params=query)
        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            logger.warning("Trello rate limit hit on %s, retrying", path)
        elif response.status_code >= HTTP_SERVER_ERROR:
            logger.warning("Trello server error %s on %s, retrying", response.status_code, path)
        response.raise_for_status()
        return response


__all__ = ["TRELLO_API_BASE", "TrelloClient"]

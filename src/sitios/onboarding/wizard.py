"""Trello onboarding: from an authorized Trello account to a published blog.

The wizard is a linear step machine::

    AUTHORIZE -> CHOOSE_BOARD -> CHOOSE_LIST -> BUILDING -> DONE

Every step talks to Trello (and the last one to the provisioning service).
Any failure moves the wizard to ``FAILED`` and raises :class:`WizardError`;
there is no retry, a new wizard has to be started.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Any, NoReturn

import httpx

from sitios.onboarding.exceptions import WizardError, WizardStepError
from sitios.trello.client import TrelloClient
from sitios.trello.exceptions import TrelloError

logger = logging.getLogger(__name__)

INSTANT_SITE_PATH = "/trello/instant-site"
THEME_URL = "https://cdn.rawgit.com/fiatjaf/classless/e332d9f7/themes/zen/theme.css"
AVATAR_URL = "https://trello-avatars.s3.amazonaws.com/{hash}/170.png"
POSTS_ROOT = "/posts"


class WizardStep(str, Enum):
    AUTHORIZE = "authorize"
    CHOOSE_BOARD = "choose_board"
    CHOOSE_LIST = "choose_list"
    BUILDING = "building"
    DONE = "done"
    FAILED = "failed"


def build_instant_site_request(
    me: dict[str, Any],
    trello_list: dict[str, Any],
    *,
    api_key: str,
    api_token: str,
    main_hostname: str,
    year: int | None = None,
) -> dict[str, Any]:
    """Site descriptor POSTed to the instant-site endpoint.

    ``me`` is the Trello member profile, ``trello_list`` the chosen list.
    """
    username = me["username"]
    avatar_hash = me.get("avatarHash")
    avatar = AVATAR_URL.format(hash=avatar_hash) if avatar_hash else ""
    year = year or datetime.now(UTC).year

    aside_parts = [f"![]({avatar})"] if avatar else []
    aside_parts.append(f"Hello, I'm {me.get('fullName') or username}!")
    if me.get("bio"):
        aside_parts.append(me["bio"])

    return {
        "domain": f"{username}-trello-list-{trello_list['id']}.{main_hostname}",
        "data": {
            "name": f"{username}'s site",
            "description": "",
            "header": "",
            "favicon": avatar,
            "aside": "\n\n".join(aside_parts),
            "footer": (
                f"A demo site created by [{username}](https://trello.com/{username}) on {main_hostname}, {year}."
            ),
            "includes": [THEME_URL],
            "nav": [
                {"url": "/", "txt": "Posts"},
                {"url": f"https://trello.com/{username}", "txt": "About"},
            ],
        },
        "sources": [
            {
                "provider": "trello:list",
                "root": POSTS_ROOT,
                "data": {"id": trello_list["id"], "apiKey": api_key, "apiToken": api_token},
            }
        ],
    }


class OnboardingWizard:
    """Drive a Trello user through creating an instant site.

    Args:
        trello: Trello client holding the application key.
        provisioning_client: httpx client whose ``base_url`` points at the
            provisioning service.
        main_hostname: Hostname instant sites are created under.

    """

    def __init__(self, trello: TrelloClient, provisioning_client: httpx.Client, main_hostname: str) -> None:
        self.trello = trello
        self.provisioning_client = provisioning_client
        self.main_hostname = main_hostname
        self.step = WizardStep.AUTHORIZE
        self.error: str | None = None
        self.boards: list[dict[str, Any]] = []
        self.lists: list[dict[str, Any]] = []
        self.chosen_board: str | None = None
        self.chosen_list: str | None = None
        self.site: dict[str, Any] | None = None

    def authorize_url(self) -> str:
        return self.trello.authorize_url(app_name=self.main_hostname)

    def authorize(self, token: str) -> list[dict[str, Any]]:
        """Accept the user's token and load their open boards."""
        self._expect(WizardStep.AUTHORIZE)
        self.trello.api_token = token
        self.boards = self._call(self.trello.boards)
        self.step = WizardStep.CHOOSE_BOARD
        return self.boards

    def choose_board(self, board_id: str) -> list[dict[str, Any]]:
        """Pick the board holding the list and load its open lists."""
        self._expect(WizardStep.CHOOSE_BOARD)
        self.chosen_board = board_id
        self.lists = self._call(self.trello.board_lists, board_id)
        self.step = WizardStep.CHOOSE_LIST
        return self.lists

    def choose_list(self, list_id: str) -> dict[str, Any]:
        """Pick the list and build the site from it."""
        self._expect(WizardStep.CHOOSE_LIST)
        self.chosen_list = list_id
        self.step = WizardStep.BUILDING

        me = self._call(self.trello.member)
        trello_list = self._call(self.trello.get_list, list_id)
        payload = build_instant_site_request(
            me,
            trello_list,
            api_key=self.trello.api_key,
            api_token=self.trello.api_token or "",
            main_hostname=self.main_hostname,
        )

        try:
            response = self.provisioning_client.post(INSTANT_SITE_PATH, json=payload)
        except httpx.HTTPError as e:
            self._fail(f"provisioning service unreachable: {e}")
        if response.is_error:
            self._fail(f"provisioning service answered {response.status_code}: {response.text}")

        try:
            site = response.json()
        except ValueError as e:
            self._fail(f"provisioning service sent an unreadable reply: {e}")
        if not isinstance(site, dict):
            self._fail(f"provisioning service sent an unexpected reply: {response.text[:200]}")

        self.site = site
        self.step = WizardStep.DONE
        logger.info("Instant site ready at %s", self.site.get("domain"))
        return self.site

    def _expect(self, step: WizardStep) -> None:
        if self.step is not step:
            raise WizardStepError(step, self.step)

    def _call(self, func: Any, *args: Any) -> Any:
        try:
            return func(*args)
        except TrelloError as e:
            self._fail(str(e))

    def _fail(self, reason: str) -> NoReturn:
        failed_at = self.step
        self.step = WizardStep.FAILED
        self.error = reason
        logger.error("Onboarding failed at %s: %s", failed_at.value, reason)
        raise WizardError(failed_at, reason)


__all__ = ["OnboardingWizard", "WizardStep", "build_instant_site_request"]

from __future__ import annotations

import json

import httpx
import pytest

from sitios.onboarding.exceptions import WizardError, WizardStepError
from sitios.onboarding.wizard import OnboardingWizard, WizardStep, build_instant_site_request
from sitios.trello.client import TrelloClient

ME = {
    "username": "alice",
    "fullName": "Alice Liddell",
    "avatarHash": "abc123",
    "bio": "Down the rabbit hole.",
}

TRELLO_ROUTES = {
    "/1/members/me/boards": [
        {"id": "b1", "name": "Alpha", "starred": False},
        {"id": "b2", "name": "Blog", "starred": True},
    ],
    "/1/boards/b2/lists/open": [{"id": "l1", "name": "Posts"}],
    "/1/members/me": ME,
    "/1/lists/l1": {"id": "l1", "name": "Posts"},
}


def trello_handler(request: httpx.Request) -> httpx.Response:
    if request.url.params.get("token") != "user-token":
        return httpx.Response(401, text="invalid token")
    payload = TRELLO_ROUTES.get(request.url.path)
    if payload is None:
        return httpx.Response(404, text="not found")
    return httpx.Response(200, json=payload)


class Provisioning:
    """Fake provisioning service recording the instant-site requests."""

    def __init__(self, status_code: int = 200, raw_reply: str | None = None) -> None:
        self.status_code = status_code
        self.raw_reply = raw_reply
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="failed to publish site: boom")
        if self.raw_reply is not None:
            return httpx.Response(200, text=self.raw_reply)
        return httpx.Response(200, json={"id": 1, "domain": body["domain"], "data": body["data"], "sources": []})


@pytest.fixture
def provisioning():
    return Provisioning()


def make_wizard(provisioning, trello_handler=trello_handler) -> OnboardingWizard:
    trello = TrelloClient("app-key", transport=httpx.MockTransport(trello_handler))
    service = httpx.Client(base_url="http://provisioning.test", transport=httpx.MockTransport(provisioning))
    return OnboardingWizard(trello, service, "sitios.xyz")


def test_happy_path(provisioning):
    wizard = make_wizard(provisioning)
    assert wizard.step is WizardStep.AUTHORIZE

    boards = wizard.authorize("user-token")
    assert [b["id"] for b in boards] == ["b2", "b1"]
    assert wizard.step is WizardStep.CHOOSE_BOARD

    lists = wizard.choose_board("b2")
    assert lists == [{"id": "l1", "name": "Posts"}]
    assert wizard.step is WizardStep.CHOOSE_LIST

    site = wizard.choose_list("l1")
    assert site["domain"] == "alice-trello-list-l1.sitios.xyz"
    assert wizard.step is WizardStep.DONE

    sent = provisioning.requests[0]
    assert sent["sources"] == [
        {
            "provider": "trello:list",
            "root": "/posts",
            "data": {"id": "l1", "apiKey": "app-key", "apiToken": "user-token"},
        }
    ]


def test_steps_must_run_in_order(provisioning):
    wizard = make_wizard(provisioning)

    with pytest.raises(WizardStepError):
        wizard.choose_board("b2")
    with pytest.raises(WizardStepError):
        wizard.choose_list("l1")
    assert wizard.step is WizardStep.AUTHORIZE


def test_trello_failure_moves_to_failed(provisioning):
    wizard = make_wizard(provisioning)

    with pytest.raises(WizardError) as exc_info:
        wizard.authorize("wrong-token")

    assert exc_info.value.step is WizardStep.AUTHORIZE
    assert wizard.step is WizardStep.FAILED
    assert "401" in wizard.error
    with pytest.raises(WizardStepError):
        wizard.authorize("user-token")


def test_provisioning_failure(provisioning):
    provisioning.status_code = 500
    wizard = make_wizard(provisioning)
    wizard.authorize("user-token")
    wizard.choose_board("b2")

    with pytest.raises(WizardError) as exc_info:
        wizard.choose_list("l1")

    assert exc_info.value.step is WizardStep.BUILDING
    assert "failed to publish site" in wizard.error
    assert wizard.step is WizardStep.FAILED


@pytest.mark.parametrize("reply", ["<html>Bad gateway</html>", "[1, 2]"])
def test_unreadable_provisioning_reply(provisioning, reply):
    provisioning.raw_reply = reply
    wizard = make_wizard(provisioning)
    wizard.authorize("user-token")
    wizard.choose_board("b2")

    with pytest.raises(WizardError) as exc_info:
        wizard.choose_list("l1")

    assert exc_info.value.step is WizardStep.BUILDING
    assert wizard.step is WizardStep.FAILED
    assert wizard.site is None


def test_unknown_list(provisioning):
    wizard = make_wizard(provisioning)
    wizard.authorize("user-token")
    wizard.choose_board("b2")

    with pytest.raises(WizardError):
        wizard.choose_list("missing")

    assert provisioning.requests == []


class TestBuildInstantSiteRequest:
    def test_site_data(self):
        payload = build_instant_site_request(
            ME, {"id": "l1"}, api_key="k", api_token="t", main_hostname="sitios.xyz", year=2024
        )
        data = payload["data"]

        assert payload["domain"] == "alice-trello-list-l1.sitios.xyz"
        assert data["name"] == "alice's site"
        assert data["favicon"] == "https://trello-avatars.s3.amazonaws.com/abc123/170.png"
        assert data["aside"] == (
            "![](https://trello-avatars.s3.amazonaws.com/abc123/170.png)\n\n"
            "Hello, I'm Alice Liddell!\n\n"
            "Down the rabbit hole."
        )
        assert data["footer"] == (
            "A demo site created by [alice](https://trello.com/alice) on sitios.xyz, 2024."
        )
        assert data["includes"] == ["https://cdn.rawgit.com/fiatjaf/classless/e332d9f7/themes/zen/theme.css"]
        assert data["nav"] == [
            {"url": "/", "txt": "Posts"},
            {"url": "https://trello.com/alice", "txt": "About"},
        ]

    def test_member_without_avatar_or_bio(self):
        payload = build_instant_site_request(
            {"username": "bob", "fullName": "Bob", "avatarHash": None, "bio": ""},
            {"id": "l2"},
            api_key="k",
            api_token="t",
            main_hostname="example.org",
        )

        assert payload["data"]["aside"] == "Hello, I'm Bob!"
        assert payload["data"]["favicon"] == ""
        assert "null" not in payload["data"]["aside"]
        assert payload["domain"] == "bob-trello-list-l2.example.org"

"""Site management routes for the dashboard.

Every route acts for the owner identified by the ``Authorization: Bearer
<trello token>`` header, so one owner's sites are invisible to everyone else.

    GET    /sites                      list the owner's sites
    POST   /sites                      create an empty site for a domain
    GET    /sites/{site_id}            fetch one site with its sources
    PUT    /sites/{site_id}/data       replace the site-wide data
    DELETE /sites/{site_id}            delete a site and its sources
    POST   /sites/{site_id}/sources    append an empty source
    POST   /sites/{site_id}/publish    generate and deploy the site
    PUT    /sources/{source_id}        fill in a source
    DELETE /sources/{source_id}        remove a source
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, Request, Response
from pydantic import BaseModel, Field

from sitios.database.site_store import SiteStore
from sitios.exceptions import SitiosError
from sitios.models import HOSTNAME_MAX_LENGTH, HOSTNAME_PATTERN, SourceDescriptor
from sitios.provisioning.exceptions import ServiceFailure
from sitios.provisioning.publish import SitePublisher
from sitios.trello.client import TrelloClient
from sitios.trello.exceptions import TrelloError

logger = logging.getLogger(__name__)

Authenticator = Callable[[str], str]

router = APIRouter(tags=["sites"])


class NewSite(BaseModel):
    domain: str = Field(min_length=1, max_length=HOSTNAME_MAX_LENGTH, pattern=HOSTNAME_PATTERN)


class SourceUpdate(BaseModel):
    provider: str
    root: str
    reference: str = ""
    data: dict[str, Any] = Field(default_factory=dict)


def trello_authenticator(trello_factory: Callable[[str, str], TrelloClient], api_key: str) -> Authenticator:
    """Owners are ``<trello username>@trello``, resolved from the bearer token."""

    def authenticate(token: str) -> str:
        if not api_key:
            raise ServiceFailure(503, "login unavailable: no Trello application key configured")
        with trello_factory(api_key, token) as trello:
            username = trello.member().get("username")
        if not username:
            raise ServiceFailure(401, "login failed: trello member has no username")
        return f"{username}@trello"

    return authenticate


def current_owner(request: Request, authorization: Annotated[str | None, Header()] = None) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise ServiceFailure(401, "login required")
    try:
        return request.app.state.authenticate(token.strip())
    except TrelloError as e:
        raise ServiceFailure(401, f"login failed: {e}") from e


def site_store(request: Request) -> SiteStore:
    return request.app.state.store


def site_publisher(request: Request) -> SitePublisher:
    return request.app.state.publisher


OwnerDep = Annotated[str, Depends(current_owner)]
StoreDep = Annotated[SiteStore, Depends(site_store)]
PublisherDep = Annotated[SitePublisher, Depends(site_publisher)]


@router.get("/sites")
def list_sites(owner: OwnerDep, store: StoreDep) -> list[dict[str, Any]]:
    return [site.model_dump(mode="json") for site in store.list_sites(owner)]


@router.post("/sites", status_code=201)
def create_site(body: NewSite, owner: OwnerDep, store: StoreDep) -> dict[str, Any]:
    site_id = store.create_site(owner, body.domain)
    return store.fetch_site(owner, site_id).model_dump(mode="json")


@router.get("/sites/{site_id}")
def enter_site(site_id: int, owner: OwnerDep, store: StoreDep) -> dict[str, Any]:
    return store.fetch_site(owner, site_id).model_dump(mode="json")


@router.put("/sites/{site_id}/data")
def update_site_data(site_id: int, data: dict[str, Any], owner: OwnerDep, store: StoreDep) -> dict[str, Any]:
    return store.update_site_data(owner, site_id, data).model_dump(mode="json")


@router.delete("/sites/{site_id}", status_code=204)
def delete_site(site_id: int, owner: OwnerDep, store: StoreDep) -> Response:
    store.delete_site(owner, site_id)
    return Response(status_code=204)


@router.post("/sites/{site_id}/sources")
def add_source(site_id: int, owner: OwnerDep, store: StoreDep) -> dict[str, Any]:
    return store.add_source(owner, site_id).model_dump(mode="json")


@router.post("/sites/{site_id}/publish")
def publish_site(site_id: int, owner: OwnerDep, store: StoreDep, publisher: PublisherDep) -> dict[str, Any]:
    site = store.fetch_site(owner, site_id)
    try:
        publisher.publish(site)
    except (SitiosError, OSError) as e:
        logger.exception("Publishing %s failed", site.domain)
        raise ServiceFailure(500, f"failed to publish site: {e}") from e
    return {"id": site.id, "domain": site.domain, "status": "published"}


@router.put("/sources/{source_id}")
def update_source(source_id: int, body: SourceUpdate, owner: OwnerDep, store: StoreDep) -> dict[str, Any]:
    source = SourceDescriptor(id=source_id, **body.model_dump())
    return store.update_source(owner, source).model_dump(mode="json")


@router.delete("/sources/{source_id}")
def remove_source(source_id: int, owner: OwnerDep, store: StoreDep) -> dict[str, Any]:
    return store.remove_source(owner, source_id).model_dump(mode="json")


__all__ = ["Authenticator", "router", "trello_authenticator"]

"""HTTP boundary of the provisioning service.

``POST /trello/instant-site`` turns an onboarding request into a stored,
published site owned by ``<trello username>@trello``. Error responses are
plain text, 400 for a bad request body and 500 for any failing step.

The dashboard routes of :mod:`sitios.provisioning.sites` are mounted on the
same app.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import duckdb
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field, ValidationError

from sitios import __version__
from sitios.config.settings import SitiosSettings
from sitios.database.exceptions import DatabaseError, SiteExistsError, SiteNotFoundError, SourceNotFoundError
from sitios.database.site_store import SiteStore
from sitios.exceptions import SitiosError
from sitios.models import HOSTNAME_MAX_LENGTH, HOSTNAME_PATTERN, Site, SourceDescriptor
from sitios.provisioning.exceptions import ServiceFailure
from sitios.provisioning.publish import Publisher, SitePublisher
from sitios.provisioning.sites import Authenticator, trello_authenticator
from sitios.provisioning.sites import router as sites_router
from sitios.trello.client import TrelloClient
from sitios.trello.exceptions import TrelloError

logger = logging.getLogger(__name__)

TrelloFactory = Callable[[str, str], TrelloClient]


class InstantSiteRequest(BaseModel):
    """Body of ``POST /trello/instant-site``."""

    domain: str = Field(min_length=1, max_length=HOSTNAME_MAX_LENGTH, pattern=HOSTNAME_PATTERN)
    data: dict[str, Any] = Field(default_factory=dict)
    sources: list[Any] = Field(default_factory=list)


class TrelloCredentials(BaseModel):
    api_key: str = Field(alias="apiKey", min_length=1)
    api_token: str = Field(alias="apiToken", min_length=1)


def _default_trello_factory(settings: SitiosSettings) -> TrelloFactory:
    return lambda key, token: TrelloClient(key, token, timeout=settings.trello.timeout)


def parse_instant_site(raw: bytes) -> tuple[InstantSiteRequest, list[SourceDescriptor], TrelloCredentials]:
    """Validate the request body. Raises :class:`ServiceFailure` (400)."""
    try:
        request = InstantSiteRequest.model_validate(json.loads(raw or b"null"))
    except (ValueError, ValidationError) as e:
        raise ServiceFailure(400, f"wrong site data: {e}") from e

    try:
        sources = [SourceDescriptor.model_validate(source) for source in request.sources]
    except ValidationError as e:
        raise ServiceFailure(400, f"wrong site.sources: {e}") from e
    if not sources:
        raise ServiceFailure(400, "wrong site.sources: zero sources received.")

    try:
        credentials = TrelloCredentials.model_validate(sources[0].data)
    except ValidationError as e:
        raise ServiceFailure(400, f"wrong trello data: {e}") from e
    return request, sources, credentials


class InstantSiteService:
    """The steps behind ``POST /trello/instant-site``, each mapped to a 500 message."""

    def __init__(self, store: SiteStore, publisher: SitePublisher, trello_factory: TrelloFactory) -> None:
        self.store = store
        self.publisher = publisher
        self.trello_factory = trello_factory

    def owner_for(self, credentials: TrelloCredentials) -> str:
        try:
            with self.trello_factory(credentials.api_key, credentials.api_token) as trello:
                me = trello.member()
        except TrelloError as e:
            raise ServiceFailure(500, f"trello call failed: {e}") from e
        username = me.get("username")
        if not username:
            raise ServiceFailure(500, "failed to decode trello response: no username")
        return f"{username}@trello"

    def create(self, request: InstantSiteRequest, sources: list[SourceDescriptor], owner: str) -> Site:
        site_id = self._step("create site", self.store.create_site, owner, request.domain)
        self._step("update site", self.store.update_site_data, owner, site_id, request.data)
        site = self._step("add source", self.store.add_source, owner, site_id)

        source = sources[0].model_copy(update={"id": site.sources[0].id})
        site = self._step("update source", self.store.update_source, owner, source)

        try:
            self.publisher.publish(site)
        except (SitiosError, OSError) as e:
            logger.exception("Publishing %s failed", site.domain)
            raise ServiceFailure(500, f"failed to publish site: {e}") from e
        return site

    @staticmethod
    def _step(action: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return func(*args)
        except (DatabaseError, duckdb.Error) as e:
            logger.error("Failed to %s: %s", action, e)
            raise ServiceFailure(500, f"failed to {action}: {e}") from e


def create_app(
    settings: SitiosSettings | None = None,
    *,
    store: SiteStore | None = None,
    publisher: SitePublisher | None = None,
    trello_factory: TrelloFactory | None = None,
    authenticate: Authenticator | None = None,
) -> FastAPI:
    """Build the provisioning API.

    Collaborators default to the ones described by ``settings``; tests inject
    their own.
    """
    settings = settings or SitiosSettings()
    store = store or SiteStore(settings.service.database_path)
    publisher = publisher or Publisher(settings)
    trello_factory = trello_factory or _default_trello_factory(settings)
    service = InstantSiteService(store, publisher, trello_factory)

    app = FastAPI(title="sitios", version=__version__)
    app.state.settings = settings
    app.state.service = service
    app.state.store = store
    app.state.publisher = publisher
    app.state.authenticate = authenticate or trello_authenticator(trello_factory, settings.trello.api_key)
    app.include_router(sites_router)

    @app.exception_handler(ServiceFailure)
    async def service_failure(_request: Request, exc: ServiceFailure) -> PlainTextResponse:
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(SiteNotFoundError)
    @app.exception_handler(SourceNotFoundError)
    async def not_found(_request: Request, exc: DatabaseError) -> PlainTextResponse:
        return PlainTextResponse(str(exc), status_code=404)

    @app.exception_handler(SiteExistsError)
    async def site_exists(_request: Request, exc: SiteExistsError) -> PlainTextResponse:
        return PlainTextResponse(str(exc), status_code=409)

    @app.post("/trello/instant-site")
    async def trello_instant_site(request: Request) -> JSONResponse:
        body, sources, credentials = parse_instant_site(await request.body())
        owner = await run_in_threadpool(service.owner_for, credentials)
        site = await run_in_threadpool(service.create, body, sources, owner)
        logger.info("Instant site %s created for %s", site.domain, owner)
        return JSONResponse(site.model_dump(mode="json"))

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


__all__ = ["InstantSiteRequest", "InstantSiteService", "create_app", "parse_instant_site"]

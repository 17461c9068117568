"""
FastAPI application factory.

Builds one set of services per application: a single record store and
subscription hub shared by every route, constructed here rather than held
in module globals so tests get a fresh state per app.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..errors import CheckinError
from ..realtime.hub import SubscriptionHub
from ..realtime.valkey_relay import ValkeyEventRelay
from ..services.documents import DocumentRegistry
from ..services.flights import FlightOperations
from ..services.lifecycle import PassengerLifecycle
from ..services.manifest_import import ManifestImporter
from ..store.record_store import RecordStore
from ..utils.config import CheckinConfig
from .routes import router

logger = logging.getLogger(__name__)


@dataclass
class CheckinServices:
    """Everything a request handler may touch."""
    store: RecordStore
    hub: SubscriptionHub
    flights: FlightOperations
    lifecycle: PassengerLifecycle
    importer: ManifestImporter
    documents: DocumentRegistry
    relay: Optional[ValkeyEventRelay] = None

    @classmethod
    def build(
        cls,
        config: CheckinConfig,
        store: Optional[RecordStore] = None,
        hub: Optional[SubscriptionHub] = None,
        relay: Optional[ValkeyEventRelay] = None
    ) -> "CheckinServices":
        store = store or RecordStore(sequence_width=config.sequence_width)
        hub = hub or SubscriptionHub(outbox_size=config.outbox_size)

        if relay is None and config.valkey_relay_enabled:
            relay = ValkeyEventRelay.from_config(config)
        if relay is not None:
            hub.add_relay(relay)

        return cls(
            store=store,
            hub=hub,
            flights=FlightOperations(store, hub),
            lifecycle=PassengerLifecycle(store, hub),
            importer=ManifestImporter(store, hub),
            documents=DocumentRegistry(store),
            relay=relay,
        )


async def handle_checkin_error(request: Request, exc: CheckinError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} malformed request: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "invalid request"})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "internal error"})


def create_app(
    config: Optional[CheckinConfig] = None,
    store: Optional[RecordStore] = None,
    hub: Optional[SubscriptionHub] = None,
    relay: Optional[ValkeyEventRelay] = None
) -> FastAPI:
    """
    Build the check-in application.

    Args:
        config: Service configuration (defaults to built-in defaults)
        store: Record store to serve (a fresh one if omitted)
        hub: Subscription hub to publish through (a fresh one if omitted)
        relay: Cross-process relay; built from config when enabled there

    Returns:
        FastAPI: Configured application
    """
    config = config or CheckinConfig()
    services = CheckinServices.build(config, store=store, hub=hub, relay=relay)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services.relay is not None:
            services.relay.start()
        logger.info("Check-in service ready")
        yield
        if services.relay is not None:
            await services.relay.stop()

    app = FastAPI(title="Check-in Operations", version=__version__, debug=config.debug, lifespan=lifespan)
    app.state.services = services
    app.state.config = config

    app.add_exception_handler(CheckinError, handle_checkin_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(router)
    return app

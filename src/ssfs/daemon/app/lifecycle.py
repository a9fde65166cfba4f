"""SSFS daemon lifecycle — startup wiring, shutdown, shared HTTP client."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx

from ..auth import IdentityStore
from ..control import IntakeHandler
from ..ledger import QuotaLedger
from ..observability import DownstreamNotifier
from ..storage import ArtifactStore, DocumentStore, build_stores
from ..utils.config_loader import Settings
from ..utils.logging_config import StructuredLogger

logger = StructuredLogger(__name__)


@dataclass
class Overrides:
    """Clients supplied by the caller of create_app instead of built at startup."""

    documents: DocumentStore | None = None
    artifacts: ArtifactStore | None = None
    http_client: httpx.AsyncClient | None = None


@dataclass
class IntakeServices:
    settings: Settings
    documents: DocumentStore
    artifacts: ArtifactStore
    http_client: httpx.AsyncClient
    ledger: QuotaLedger
    handler: IntakeHandler
    notifier: DownstreamNotifier
    owns_http_client: bool = field(default=False)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    # Shared async client for connection pooling / keep-alive
    return httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=50),
    )


def build_services(settings: Settings, overrides: Overrides) -> IntakeServices:
    documents, artifacts = overrides.documents, overrides.artifacts
    if documents is None or artifacts is None:
        built_documents, built_artifacts = build_stores(settings)
        documents = built_documents if documents is None else documents
        artifacts = built_artifacts if artifacts is None else artifacts

    owns_http_client = overrides.http_client is None
    http_client = build_http_client(settings) if owns_http_client else overrides.http_client

    identity = IdentityStore(
        documents,
        collection=settings.subscriptions_collection,
        key_field=settings.api_key_field,
    )
    ledger = QuotaLedger(
        documents,
        cost_per_unit=settings.cost_per_unit,
        collection=settings.subscriptions_collection,
    )
    handler = IntakeHandler(
        identity=identity,
        ledger=ledger,
        artifacts=artifacts,
        service_name=settings.service_name,
    )
    notifier = DownstreamNotifier(
        http_client,
        settings.callback_url,
        internal_routing=settings.internal_routing,
    )
    return IntakeServices(
        settings=settings,
        documents=documents,
        artifacts=artifacts,
        http_client=http_client,
        ledger=ledger,
        handler=handler,
        notifier=notifier,
        owns_http_client=owns_http_client,
    )


async def startup_event(app, settings: Settings, overrides: Overrides):
    """Called on FastAPI startup."""
    app.state.intake = build_services(settings, overrides)
    if not settings.callback_url:
        logger.warning("SSFS_SERVICE_CALLBACK_URL is not set; notifications will fail")
    logger.info(
        "Intake service started",
        backend=settings.backend,
        bucket=settings.bucket_name,
        cost_per_unit=settings.cost_per_unit,
    )


async def shutdown_event(app):
    """Called on FastAPI shutdown."""
    services: IntakeServices | None = getattr(app.state, "intake", None)
    if services and services.owns_http_client and not services.http_client.is_closed:
        await services.http_client.aclose()

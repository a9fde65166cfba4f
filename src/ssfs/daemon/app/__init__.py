"""SSFS Daemon Application package.

Creates the FastAPI app, registers routers, and wires up lifecycle events.
Re-exports `app` and `create_app` so consumers can use:
    from ssfs.daemon.app import app
"""

from dotenv import load_dotenv
from fastapi import FastAPI

from ssfs import __version__
from ..storage import ArtifactStore, DocumentStore
from ..utils.config_loader import Settings, config_loader
from ..utils.logging_config import setup_logging
from .lifecycle import Overrides, shutdown_event, startup_event
from .webhook import router as webhook_router

load_dotenv()


def create_app(
    settings: Settings | None = None,
    *,
    documents: DocumentStore | None = None,
    artifacts: ArtifactStore | None = None,
    http_client=None,
) -> FastAPI:
    """Build the intake app; clients not passed in are constructed on startup."""
    settings = settings or config_loader.get_settings()
    setup_logging(settings.log_level, debug_logs_on=settings.debug_logs_on)

    app = FastAPI(title="SSFS Intake", version=__version__)
    overrides = Overrides(documents=documents, artifacts=artifacts, http_client=http_client)

    # --- Lifecycle ---
    @app.on_event("startup")
    async def _startup():
        await startup_event(app, settings, overrides)

    @app.on_event("shutdown")
    async def _shutdown():
        await shutdown_event(app)

    # --- Routers ---
    app.include_router(webhook_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]

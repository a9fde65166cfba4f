"""Inbound async-action webhook and health routes."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ..observability import liveness_report
from ..utils.logging_config import StructuredLogger
from .lifecycle import IntakeServices

logger = StructuredLogger(__name__)

router = APIRouter(tags=["intake"])


def _services(request: Request) -> IntakeServices:
    return request.app.state.intake


@router.get("/health")
async def health():
    return liveness_report()


@router.post("/submitAsyncAction")
async def submit_async_action(request: Request, background_tasks: BackgroundTasks):
    services = _services(request)
    try:
        body = await request.json()
    except ValueError:
        body = None

    outcome = await services.handler.handle(body, request.headers.get("x-api-key"))

    if outcome.notification is not None:
        # Runs after the 201 is written; its errors only reach the log.
        background_tasks.add_task(services.notifier.notify, outcome.notification)

    if isinstance(outcome.content, str):
        return PlainTextResponse(outcome.content, status_code=outcome.status_code)
    return JSONResponse(content=outcome.content, status_code=outcome.status_code)

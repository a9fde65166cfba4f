"""Best-effort downstream notification for stored artifacts."""

from __future__ import annotations

import httpx

from ..errors import NotifyFailureError
from ..models import NotificationPayload
from ..utils.logging_config import StructuredLogger

logger = StructuredLogger(__name__)


class DownstreamNotifier:
    """POSTs artifact locations to the processing service.

    Single attempt, no retry. `notify` never raises: failures are logged and
    reported through the return value only.
    """

    def __init__(self, client: httpx.AsyncClient, target_url: str | None, *, internal_routing: str = "ssfs-internal"):
        self._client = client
        self.target_url = target_url
        # Lets internal calls pass the load balancer security policy.
        self.headers = {"internal-routing": internal_routing}

    async def send(self, payload: NotificationPayload) -> None:
        if not self.target_url:
            raise NotifyFailureError("Callback URL is not configured")
        try:
            response = await self._client.post(
                self.target_url, json=payload.model_dump(), headers=self.headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NotifyFailureError(
                f"Downstream returned HTTP {exc.response.status_code}",
                {"status_code": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            raise NotifyFailureError(f"{type(exc).__name__}: {exc}") from exc

    async def notify(self, payload: NotificationPayload) -> bool:
        logger.debug("Sending notification", target_url=self.target_url, payload=payload.model_dump())
        try:
            await self.send(payload)
        except NotifyFailureError as exc:
            logger.error(
                "Downstream notification failed",
                target_url=self.target_url,
                filename=payload.filename,
                error=exc.message,
                **exc.details,
            )
            return False
        except Exception as exc:
            logger.exception(
                "Downstream notification error",
                target_url=self.target_url,
                filename=payload.filename,
                error=str(exc),
            )
            return False
        logger.debug("Notification sent", target_url=self.target_url)
        return True

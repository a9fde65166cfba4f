"""Intake pipeline: parse, authenticate, debit quota, persist, acknowledge."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
import time
from typing import Any, Callable

from pydantic import ValidationError

from ..auth import CredentialLookup, IdentityStore, LookupStatus, authenticate
from ..errors import MalformedEnvelopeError, MissingAccountIdError
from ..ledger import QuotaLedger
from ..models import NotificationPayload, WebhookEnvelope
from ..storage import ArtifactStore
from ..utils.logging_config import StructuredLogger

logger = StructuredLogger(__name__)

ACCEPTED_MESSAGE = "Request accepted successfully"
INTERNAL_ERROR_MESSAGE = "Internal Server Error"


@dataclass
class IntakeOutcome:
    status_code: int
    content: Any
    # Set only on 201; sent after the response has gone out.
    notification: NotificationPayload | None = None


def artifact_key(service_name: str, account_id: str, now_ms: int) -> str:
    return f"{service_name}/{account_id}/data-{now_ms}.json"


def parse_envelope(body: Any) -> WebhookEnvelope:
    if not isinstance(body, dict):
        raise MalformedEnvelopeError("Malformed request body", {"errors": ["body must be a JSON object"]})
    try:
        return WebhookEnvelope.model_validate(body)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        raise MalformedEnvelopeError("Malformed request body", {"errors": errors}) from exc


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class IntakeHandler:
    """Runs one webhook request through the intake steps, stopping at the first failure."""

    def __init__(
        self,
        *,
        identity: IdentityStore,
        ledger: QuotaLedger,
        artifacts: ArtifactStore,
        service_name: str,
        clock: Callable[[], int] = _epoch_ms,
    ) -> None:
        self.identity = identity
        self.ledger = ledger
        self.artifacts = artifacts
        self.service_name = service_name
        self._clock = clock

    async def _resolve_credential(self, account_id: str) -> CredentialLookup:
        try:
            return await asyncio.to_thread(self.identity.get_stored_credential, account_id)
        except MissingAccountIdError:
            logger.debug("Request has no subscription id")
            return CredentialLookup(LookupStatus.NOT_FOUND)

    async def handle(self, body: Any, api_key: str | None) -> IntakeOutcome:
        try:
            return await self._handle(body, api_key)
        except MalformedEnvelopeError as exc:
            logger.warning("Malformed request body", errors=exc.details.get("errors"))
            return IntakeOutcome(400, {"error": exc.message, "details": exc.details.get("errors", [])})
        except Exception as exc:
            logger.exception("Error processing request", error=str(exc))
            return IntakeOutcome(500, INTERNAL_ERROR_MESSAGE)

    async def _handle(self, body: Any, api_key: str | None) -> IntakeOutcome:
        # 1. Parse
        envelope = parse_envelope(body)
        account_id = envelope.account_id

        # 2. Resolve stored credential
        lookup = await self._resolve_credential(account_id)

        # 3. Authenticate
        auth = authenticate(api_key, lookup)
        if not auth.accepted:
            logger.debug(auth.message, account_id=account_id, lookup=str(lookup.status))
            return IntakeOutcome(401, {"error": auth.message})

        # 4. Quota check and debit
        decision = await asyncio.to_thread(
            self.ledger.check_and_debit, account_id, envelope.batch_size
        )
        logger.debug("Quota decision", account_id=account_id, decision=decision.to_dict())
        if not decision.allowed:
            return IntakeOutcome(403, {"error": decision.message})

        # 5. Persist the envelope exactly as received
        filename = artifact_key(self.service_name, account_id, self._clock())
        data = json.dumps(body).encode("utf-8")
        artifact = await asyncio.to_thread(self.artifacts.save, filename, data)
        logger.debug("File uploaded", filename=filename, bucket=artifact.bucket_name)

        # 6. Acknowledge; the caller schedules the notification
        notification = NotificationPayload(
            filename=artifact.key,
            bucketName=artifact.bucket_name,
            path=artifact.path,
        )
        logger.info(
            "Request accepted",
            account_id=account_id,
            objects=envelope.batch_size,
            filename=filename,
        )
        return IntakeOutcome(201, ACCEPTED_MESSAGE, notification)

"""Wire models for the intake webhook."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Subscription(BaseModel):
    model_config = ConfigDict(extra="allow")

    # Empty ids are rejected by the identity lookup and the ledger, not here.
    munchkinId: str = ""

    @field_validator("munchkinId", mode="before")
    def coerce_numeric_id(cls, v):
        # Some callers send the id as a JSON number.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class EnvelopeContext(BaseModel):
    model_config = ConfigDict(extra="allow")

    subscription: Subscription


class WebhookEnvelope(BaseModel):
    """Inbound async-action request.

    Unknown fields are kept so the stored artifact matches what the caller sent.
    """

    model_config = ConfigDict(extra="allow")

    token: str | None = None
    apiCallBackKey: str | None = None
    campaignId: Any = None
    callbackUrl: str | None = None
    context: EnvelopeContext
    objectData: list[Any] = Field(default_factory=list)

    @property
    def account_id(self) -> str:
        return self.context.subscription.munchkinId

    @property
    def batch_size(self) -> int:
        return len(self.objectData)


class NotificationPayload(BaseModel):
    filename: str
    bucketName: str
    path: str

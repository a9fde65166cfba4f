"""Caller authentication against the stored account key."""

from __future__ import annotations

from dataclasses import dataclass
import hmac

from ..errors import ErrorCode
from .identity import CredentialLookup

MISSING_MESSAGE = "Authorization header missing"
INVALID_MESSAGE = "Invalid credentials"


@dataclass(frozen=True)
class AuthDecision:
    accepted: bool
    reason: str | None = None
    code: ErrorCode | None = None

    @property
    def message(self) -> str | None:
        if self.reason == "missing":
            return MISSING_MESSAGE
        if self.reason == "invalid":
            return INVALID_MESSAGE
        return None


ACCEPTED = AuthDecision(True)


def authenticate(presented: str | None, stored: CredentialLookup | str | None) -> AuthDecision:
    """Accept only an exact match between the presented and stored key."""
    if not presented:
        return AuthDecision(False, "missing", ErrorCode.MISSING_CREDENTIAL)

    if isinstance(stored, CredentialLookup):
        stored = stored.credential if stored.found else None

    if stored is None:
        return AuthDecision(False, "invalid", ErrorCode.INVALID_CREDENTIAL)

    if not hmac.compare_digest(presented.encode("utf-8"), stored.encode("utf-8")):
        return AuthDecision(False, "invalid", ErrorCode.INVALID_CREDENTIAL)

    return ACCEPTED

"""Error taxonomy shared by the intake components."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    MISSING_ACCOUNT_ID = "MISSING_ACCOUNT_ID"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    EMPTY_BATCH = "EMPTY_BATCH"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    STORE_FAILURE = "STORE_FAILURE"
    DOWNSTREAM_NOTIFY_FAILURE = "DOWNSTREAM_NOTIFY_FAILURE"
    MALFORMED_ENVELOPE = "MALFORMED_ENVELOPE"


class IntakeError(Exception):
    """Base exception for intake failures."""

    code: ErrorCode = ErrorCode.STORE_FAILURE

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class MissingAccountIdError(IntakeError):
    code = ErrorCode.MISSING_ACCOUNT_ID

    def __init__(self, message: str = "subscriptionId is required"):
        super().__init__(message)


class MalformedEnvelopeError(IntakeError):
    code = ErrorCode.MALFORMED_ENVELOPE


class StoreFailureError(IntakeError):
    """Document or artifact store call failed."""

    code = ErrorCode.STORE_FAILURE


class ArtifactExistsError(StoreFailureError):
    """Write-once artifact key was already taken."""


class NotifyFailureError(IntakeError):
    code = ErrorCode.DOWNSTREAM_NOTIFY_FAILURE

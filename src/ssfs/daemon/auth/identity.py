"""Account API key lookup."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ..errors import MissingAccountIdError
from ..storage import DocumentStore
from ..utils.logging_config import StructuredLogger

logger = StructuredLogger(__name__)


class LookupStatus(StrEnum):
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    NO_CREDENTIAL = "NO_CREDENTIAL"
    STORE_ERROR = "STORE_ERROR"


@dataclass(frozen=True)
class CredentialLookup:
    status: LookupStatus
    credential: str | None = None

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND


class IdentityStore:
    def __init__(
        self,
        documents: DocumentStore,
        *,
        collection: str = "subscriptions",
        key_field: str = "ssfs_account_api_key",
    ) -> None:
        self._documents = documents
        self._collection = collection
        self._key_field = key_field

    def get_stored_credential(self, account_id: str | None) -> CredentialLookup:
        """Fetch the API key stored for an account.

        Raises MissingAccountIdError without touching the store when no id is
        given. A store failure is reported as STORE_ERROR so callers treat it
        like "no key available".
        """
        if not account_id:
            raise MissingAccountIdError()

        try:
            data = self._documents.get(self._collection, account_id)
        except Exception as exc:
            logger.error("API key lookup failed", account_id=account_id, error=str(exc))
            return CredentialLookup(LookupStatus.STORE_ERROR)

        if data is None:
            logger.debug("ID not found", account_id=account_id)
            return CredentialLookup(LookupStatus.NOT_FOUND)

        credential = data.get(self._key_field)
        if credential is None:
            logger.debug("No API key stored for account", account_id=account_id)
            return CredentialLookup(LookupStatus.NO_CREDENTIAL)

        logger.debug("Found account API key", account_id=account_id)
        return CredentialLookup(LookupStatus.FOUND, str(credential))

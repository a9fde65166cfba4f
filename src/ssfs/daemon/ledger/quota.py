"""Per-account credit quota check and debit."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from ..errors import ErrorCode
from ..storage import DocumentStore
from ..utils.logging_config import StructuredLogger

logger = StructuredLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


@dataclass
class QuotaDecision:
    allowed: bool
    message: str
    used_quota: float | None = None
    remaining_quota: float | None = None
    code: ErrorCode | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def _format_units(value: float) -> str:
    # 4 / 2 -> "2", 5 / 2 -> "2.5"
    return f"{value:g}"


def _exceeded_message(unit_count: int, quota: float, cost_per_unit: int) -> str:
    affordable = _format_units(quota / cost_per_unit)
    return (
        f"Quota exceeded, you've requested {unit_count} leads to be processed, "
        f"only {affordable} leads can be processed based on your remaining credits quota, "
        "additional subscription credits are required. Please renew your subscription."
    )


class QuotaLedger:
    """Checks and debits the `quota` field of an account document.

    The read-decide-write runs inside `DocumentStore.run_transaction`, so two
    concurrent debits on one account cannot both pass against the same balance.
    """

    def __init__(
        self,
        documents: DocumentStore,
        *,
        cost_per_unit: int = 2,
        collection: str = "subscriptions",
    ) -> None:
        if cost_per_unit < 1:
            raise ValueError("cost_per_unit must be >= 1")
        self._documents = documents
        self._collection = collection
        self.cost_per_unit = cost_per_unit

    def check_and_debit(self, account_id: str | None, unit_count: int) -> QuotaDecision:
        if not account_id:
            return QuotaDecision(False, "subscriptionId is required", code=ErrorCode.MISSING_ACCOUNT_ID)

        if unit_count < 1:
            logger.debug("At least one object is required", account_id=account_id)
            return QuotaDecision(False, "At least one object is required", code=ErrorCode.EMPTY_BATCH)

        credits_needed = unit_count * self.cost_per_unit

        def _decide(current: dict[str, Any] | None):
            if current is None:
                return None, QuotaDecision(False, "ID not found", code=ErrorCode.ACCOUNT_NOT_FOUND)

            quota = current.get("quota") or 0
            if quota > credits_needed:
                remaining = quota - credits_needed
                return {"quota": remaining}, QuotaDecision(
                    True, "Success", used_quota=credits_needed, remaining_quota=remaining
                )
            return None, QuotaDecision(
                False,
                _exceeded_message(unit_count, quota, self.cost_per_unit),
                remaining_quota=quota,
                code=ErrorCode.QUOTA_EXCEEDED,
            )

        try:
            decision = self._documents.run_transaction(self._collection, account_id, _decide)
        except Exception as exc:
            logger.error("Quota check failed", account_id=account_id, error=str(exc))
            return QuotaDecision(False, INTERNAL_ERROR_MESSAGE, code=ErrorCode.STORE_FAILURE)

        if decision.allowed:
            logger.info(
                "Quota debited",
                account_id=account_id,
                used_quota=decision.used_quota,
                remaining_quota=decision.remaining_quota,
            )
        else:
            logger.debug("Quota denied", account_id=account_id, decision=decision.to_dict())
        return decision

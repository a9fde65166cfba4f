"""Ledger APIs for prepaid account credits."""

from .quota import QuotaDecision, QuotaLedger

__all__ = [
    "QuotaDecision",
    "QuotaLedger",
]

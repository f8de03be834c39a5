"""Data models for reconciliation."""

from .transaction import (
    BankAccountRef,
    BankTransaction,
    MatchableItem,
    MatchableItemType,
    ReconciliationStats,
    ReconciliationStatus,
    SuggestedMatch,
)

__all__ = [
    "BankAccountRef",
    "BankTransaction",
    "MatchableItem",
    "MatchableItemType",
    "ReconciliationStats",
    "ReconciliationStatus",
    "SuggestedMatch",
]

"""Bank transaction reconciliation matching engine."""

from .config import ReconConfig, load_config
from .lifecycle import (
    annotate,
    apply_transition,
    dispute,
    get_matched_item,
    match,
    reconcile,
    reconcile_all_matched,
    unmatch,
)
from .matching import ReconciliationEngine
from .models import (
    BankAccountRef,
    BankTransaction,
    MatchableItem,
    MatchableItemType,
    ReconciliationStats,
    ReconciliationStatus,
    SuggestedMatch,
)
from .reports import compute_stats, filter_transactions, list_bank_accounts

__version__ = "0.1.0"

__all__ = [
    "ReconConfig",
    "load_config",
    "ReconciliationEngine",
    "BankAccountRef",
    "BankTransaction",
    "MatchableItem",
    "MatchableItemType",
    "ReconciliationStats",
    "ReconciliationStatus",
    "SuggestedMatch",
    "annotate",
    "apply_transition",
    "dispute",
    "get_matched_item",
    "match",
    "reconcile",
    "reconcile_all_matched",
    "unmatch",
    "compute_stats",
    "filter_transactions",
    "list_bank_accounts",
]

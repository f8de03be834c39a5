"""Statistics and queries for presentation layers."""

from .statistics import compute_stats, filter_transactions, list_bank_accounts

__all__ = ["compute_stats", "filter_transactions", "list_bank_accounts"]

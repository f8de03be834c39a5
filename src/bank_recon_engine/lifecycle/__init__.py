"""Reconciliation lifecycle state machine."""

from .transitions import (
    annotate,
    apply_transition,
    dispute,
    get_matched_item,
    match,
    reconcile,
    reconcile_all_matched,
    unmatch,
)

__all__ = [
    "annotate",
    "apply_transition",
    "dispute",
    "get_matched_item",
    "match",
    "reconcile",
    "reconcile_all_matched",
    "unmatch",
]

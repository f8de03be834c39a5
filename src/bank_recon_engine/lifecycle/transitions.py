"""
Reconciliation lifecycle transitions.

Every transition is accepted from every state. Operators drive the
workflow; stricter guards would be a product decision, not an engine one.
Transitions return a new BankTransaction and leave the input untouched.
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional
import logging

from ..models.transaction import (
    BankTransaction,
    MatchableItem,
    ReconciliationStatus,
)
from ..utils.exceptions import TransactionNotFoundError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def match(transaction: BankTransaction, item: MatchableItem) -> BankTransaction:
    """Link a transaction to an item. Overwrites any existing link."""
    return replace(
        transaction,
        reconciliation_status=ReconciliationStatus.MATCHED,
        matched_item_type=item.type,
        matched_item_id=item.id,
        reconciled_at=None,
    )


def unmatch(transaction: BankTransaction) -> BankTransaction:
    """Drop the link and return the transaction to the open pool."""
    return replace(
        transaction,
        reconciliation_status=ReconciliationStatus.UNRECONCILED,
        matched_item_type=None,
        matched_item_id=None,
        reconciled_at=None,
    )


def reconcile(
    transaction: BankTransaction,
    item: Optional[MatchableItem] = None,
    now: Optional[datetime] = None,
) -> BankTransaction:
    """
    Confirm a transaction as reconciled.

    The prior state is not checked. When the transaction has no link yet
    and an item is given, the link is taken from the item.

    Args:
        transaction: Transaction to confirm
        item: Item to link if the transaction is not linked
        now: Timestamp to record, defaults to the current UTC time

    Returns:
        The reconciled transaction
    """
    changes = {
        "reconciliation_status": ReconciliationStatus.RECONCILED,
        "reconciled_at": now or _utcnow(),
    }
    if not transaction.is_matched:
        if item is not None:
            changes["matched_item_type"] = item.type
            changes["matched_item_id"] = item.id
        else:
            logger.warning(
                f"Transaction {transaction.id} reconciled without a matched item"
            )
    return replace(transaction, **changes)


def reconcile_all_matched(
    transactions: Iterable[BankTransaction],
    now: Optional[datetime] = None,
) -> list[BankTransaction]:
    """
    Reconcile every matched transaction, leaving all others untouched.

    All transactions reconciled in one call share the same timestamp.
    """
    now = now or _utcnow()
    updated: list[BankTransaction] = []
    count = 0

    for txn in transactions:
        if txn.reconciliation_status == ReconciliationStatus.MATCHED:
            updated.append(reconcile(txn, now=now))
            count += 1
        else:
            updated.append(txn)

    logger.info(f"Reconciled {count} matched transaction(s)")
    return updated


def dispute(transaction: BankTransaction, notes: Optional[str] = None) -> BankTransaction:
    """Flag a transaction as disputed. Existing links are kept; notes are replaced."""
    return replace(
        transaction,
        reconciliation_status=ReconciliationStatus.DISPUTED,
        notes=notes,
        reconciled_at=None,
    )


def annotate(transaction: BankTransaction, notes: str) -> BankTransaction:
    """Set the notes without touching the status."""
    return replace(transaction, notes=notes)


def apply_transition(
    transactions: Iterable[BankTransaction],
    transaction_id: str,
    transition: Callable[..., BankTransaction],
    *args,
    **kwargs,
) -> list[BankTransaction]:
    """
    Apply a transition to one transaction of a collection, by id.

    Args:
        transactions: Current collection
        transaction_id: Id of the transaction to update
        transition: One of the transition functions of this module
        *args, **kwargs: Extra arguments passed to the transition

    Returns:
        New collection in the same order

    Raises:
        TransactionNotFoundError: If no transaction has the given id
    """
    updated: list[BankTransaction] = []
    found = False

    for txn in transactions:
        if txn.id == transaction_id:
            updated.append(transition(txn, *args, **kwargs))
            found = True
        else:
            updated.append(txn)

    if not found:
        raise TransactionNotFoundError(transaction_id)
    return updated


def get_matched_item(
    transaction: BankTransaction,
    items: Iterable[MatchableItem],
) -> Optional[MatchableItem]:
    """
    Resolve the item a transaction is linked to.

    Returns None when the transaction is unlinked or when the linked item
    no longer exists. The latter is a broken reference for display layers
    to surface.
    """
    if not transaction.matched_item_id:
        return None

    for item in items:
        if item.id == transaction.matched_item_id:
            return item

    logger.warning(
        f"Transaction {transaction.id} links to missing "
        f"{transaction.matched_item_type.value if transaction.matched_item_type else 'item'} "
        f"{transaction.matched_item_id}"
    )
    return None

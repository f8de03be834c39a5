"""Read-only aggregates and queries over a transaction collection."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ..models.transaction import (
    BankAccountRef,
    BankTransaction,
    ReconciliationStats,
    ReconciliationStatus,
)


def compute_stats(transactions: Iterable[BankTransaction]) -> ReconciliationStats:
    """
    Count transactions and sum absolute amounts per reconciliation status.

    Args:
        transactions: Transaction collection

    Returns:
        Statistics; the four status counts always sum to the total
    """
    counts = {status: 0 for status in ReconciliationStatus}
    total_amount = Decimal("0")
    unreconciled_amount = Decimal("0")

    for txn in transactions:
        counts[txn.reconciliation_status] += 1
        total_amount += abs(txn.amount)
        if txn.reconciliation_status == ReconciliationStatus.UNRECONCILED:
            unreconciled_amount += abs(txn.amount)

    return ReconciliationStats(
        total=sum(counts.values()),
        unreconciled=counts[ReconciliationStatus.UNRECONCILED],
        matched=counts[ReconciliationStatus.MATCHED],
        reconciled=counts[ReconciliationStatus.RECONCILED],
        disputed=counts[ReconciliationStatus.DISPUTED],
        total_amount=total_amount,
        unreconciled_amount=unreconciled_amount,
    )


def filter_transactions(
    transactions: Iterable[BankTransaction],
    status: Optional[ReconciliationStatus] = None,
    bank_account_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[BankTransaction]:
    """Select transactions matching all given criteria. Date bounds are inclusive."""
    selected: list[BankTransaction] = []

    for txn in transactions:
        if status and txn.reconciliation_status != status:
            continue
        if bank_account_id and txn.bank_account_id != bank_account_id:
            continue
        if date_from and txn.date < date_from:
            continue
        if date_to and txn.date > date_to:
            continue
        selected.append(txn)

    return selected


def list_bank_accounts(transactions: Iterable[BankTransaction]) -> list[BankAccountRef]:
    """Unique bank accounts in order of first appearance."""
    accounts: dict[str, str] = {}
    for txn in transactions:
        accounts.setdefault(txn.bank_account_id, txn.bank_account_name)
    return [BankAccountRef(id=acc_id, name=name) for acc_id, name in accounts.items()]

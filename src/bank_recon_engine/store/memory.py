"""In-memory record store with exclusive write access per transaction."""

from typing import Callable, Iterable, Optional
import logging
import threading

from ..models.transaction import BankTransaction, MatchableItem
from ..utils.exceptions import TransactionNotFoundError

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Holds the current bank transactions and matchable items.

    Writes go through ``apply``, which serializes updates of the same
    transaction id so concurrent batch operations cannot lose a status change.
    Reads return snapshots.
    """

    def __init__(
        self,
        transactions: Iterable[BankTransaction] = (),
        matchable_items: Iterable[MatchableItem] = (),
    ):
        self._transactions: dict[str, BankTransaction] = {t.id: t for t in transactions}
        self._items: list[MatchableItem] = list(matchable_items)
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, transaction_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(transaction_id)
            if lock is None:
                lock = self._locks[transaction_id] = threading.Lock()
            return lock

    def get_transaction(self, transaction_id: str) -> Optional[BankTransaction]:
        return self._transactions.get(transaction_id)

    def transactions(self) -> list[BankTransaction]:
        with self._registry_lock:
            return list(self._transactions.values())

    def matchable_items(self) -> list[MatchableItem]:
        return list(self._items)

    def apply(
        self,
        transaction_id: str,
        transition: Callable[..., BankTransaction],
        *args,
        **kwargs,
    ) -> BankTransaction:
        """
        Apply a lifecycle transition to one stored transaction.

        Args:
            transaction_id: Id of the transaction to update
            transition: Function taking the current transaction and returning the new one
            *args, **kwargs: Extra arguments passed to the transition

        Returns:
            The stored, updated transaction

        Raises:
            TransactionNotFoundError: If the id is unknown
        """
        with self._lock_for(transaction_id):
            while True:
                with self._registry_lock:
                    current = self._transactions.get(transaction_id)
                if current is None:
                    raise TransactionNotFoundError(transaction_id)

                updated = transition(current, *args, **kwargs)
                with self._registry_lock:
                    # A replace_transactions call may have swapped the record meanwhile
                    if self._transactions.get(transaction_id) is current:
                        self._transactions[transaction_id] = updated
                        break

        logger.debug(
            f"{transaction_id}: {current.reconciliation_status.value} -> "
            f"{updated.reconciliation_status.value}"
        )
        return updated

    def replace_transactions(self, transactions: Iterable[BankTransaction]) -> None:
        """Swap in a whole new collection, e.g. the result of a batch run."""
        replacement = {t.id: t for t in transactions}
        with self._registry_lock:
            self._transactions = replacement

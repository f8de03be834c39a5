"""
Scoring signals for bank transaction matching.
Each signal inspects one aspect of a (transaction, candidate) pair.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from ..config import ScoringConfig
from ..models.transaction import BankTransaction, MatchableItem

# Reason labels, in the order the signals are evaluated
REASON_EXACT_AMOUNT = "exact amount"
REASON_SIMILAR_AMOUNT = "similar amount"
REASON_AMOUNT_NEARBY = "amount nearby"
REASON_REFERENCE = "reference matches"
REASON_DESCRIPTION = "similar description"
REASON_CONTACT = "contact matches"
REASON_DATE_NEARBY = "date nearby"
REASON_DATE_SIMILAR = "date similar"


def _contains_either_way(left: Optional[str], right: Optional[str]) -> bool:
    """Case-insensitive substring check in both directions."""
    if not left or not right:
        return False
    left, right = left.lower(), right.lower()
    return left in right or right in left


class MatchSignal(ABC):
    """Abstract base class for scoring signals."""

    @abstractmethod
    def evaluate(
        self,
        transaction: BankTransaction,
        candidate: MatchableItem,
    ) -> tuple[int, Optional[str]]:
        """
        Evaluate the signal for a pair.

        Args:
            transaction: Bank transaction being matched
            candidate: Candidate accounting record

        Returns:
            Tuple of (points, reason label or None when the signal does not fire)
        """
        pass


class AmountSignal(MatchSignal):
    """
    Compares amount magnitudes. Tiers are exclusive, the best one wins.
    """

    def __init__(
        self,
        exact_points: int = 50,
        exact_tolerance: Decimal = Decimal("0.01"),
        close_points: int = 30,
        close_tolerance: Decimal = Decimal("1.0"),
        near_points: int = 15,
        near_ratio: Decimal = Decimal("0.05"),
    ):
        self.exact_points = exact_points
        self.exact_tolerance = exact_tolerance
        self.close_points = close_points
        self.close_tolerance = close_tolerance
        self.near_points = near_points
        self.near_ratio = near_ratio

    def evaluate(
        self,
        transaction: BankTransaction,
        candidate: MatchableItem,
    ) -> tuple[int, Optional[str]]:
        amount_diff = abs(abs(candidate.amount) - abs(transaction.amount))

        if amount_diff < self.exact_tolerance:
            return self.exact_points, REASON_EXACT_AMOUNT
        if amount_diff < self.close_tolerance:
            return self.close_points, REASON_SIMILAR_AMOUNT

        # Relative tier is undefined for zero-amount transactions
        if transaction.amount != 0:
            if amount_diff / abs(transaction.amount) < self.near_ratio:
                return self.near_points, REASON_AMOUNT_NEARBY

        return 0, None


class ReferenceSignal(MatchSignal):
    """Bank reference and document number contain one another."""

    def __init__(self, points: int = 25):
        self.points = points

    def evaluate(
        self,
        transaction: BankTransaction,
        candidate: MatchableItem,
    ) -> tuple[int, Optional[str]]:
        if _contains_either_way(transaction.reference, candidate.reference):
            return self.points, REASON_REFERENCE
        return 0, None


class DescriptionSignal(MatchSignal):
    """
    Counts candidate description words that also appear in the bank narrative.

    Words are split on whitespace and lowercased, no further normalization.
    Repeated candidate words count once per occurrence.
    """

    def __init__(
        self,
        points_per_word: int = 5,
        max_points: int = 15,
        min_word_length: int = 3,
    ):
        self.points_per_word = points_per_word
        self.max_points = max_points
        self.min_word_length = min_word_length

    def shared_words(
        self, transaction: BankTransaction, candidate: MatchableItem
    ) -> list[str]:
        """Return candidate words found in the transaction description."""
        if not transaction.description or not candidate.description:
            return []

        transaction_words = set(transaction.description.lower().split())
        return [
            word
            for word in candidate.description.lower().split()
            if len(word) > self.min_word_length and word in transaction_words
        ]

    def evaluate(
        self,
        transaction: BankTransaction,
        candidate: MatchableItem,
    ) -> tuple[int, Optional[str]]:
        shared = self.shared_words(transaction, candidate)
        if not shared:
            return 0, None
        return min(len(shared) * self.points_per_word, self.max_points), REASON_DESCRIPTION


class CounterpartySignal(MatchSignal):
    """Bank counterparty and the item's contact name contain one another."""

    def __init__(self, points: int = 20):
        self.points = points

    def evaluate(
        self,
        transaction: BankTransaction,
        candidate: MatchableItem,
    ) -> tuple[int, Optional[str]]:
        if _contains_either_way(transaction.counterparty, candidate.contact_name):
            return self.points, REASON_CONTACT
        return 0, None


class DateProximitySignal(MatchSignal):
    """Posting date close to the item date, in either direction."""

    def __init__(
        self,
        close_days: int = 3,
        close_points: int = 10,
        near_days: int = 7,
        near_points: int = 5,
    ):
        self.close_days = close_days
        self.close_points = close_points
        self.near_days = near_days
        self.near_points = near_points

    def evaluate(
        self,
        transaction: BankTransaction,
        candidate: MatchableItem,
    ) -> tuple[int, Optional[str]]:
        days_diff = abs((transaction.date - candidate.date).days)

        if days_diff <= self.close_days:
            return self.close_points, REASON_DATE_NEARBY
        if days_diff <= self.near_days:
            return self.near_points, REASON_DATE_SIMILAR
        return 0, None


def build_signals(scoring: ScoringConfig) -> list[MatchSignal]:
    """
    Build the signal chain from configuration, in evaluation order.

    Args:
        scoring: Scoring weights

    Returns:
        Signals ordered amount, reference, description, counterparty, date
    """
    amount = scoring.amount
    return [
        AmountSignal(
            exact_points=amount.exact_points,
            exact_tolerance=Decimal(str(amount.exact_tolerance)),
            close_points=amount.close_points,
            close_tolerance=Decimal(str(amount.close_tolerance)),
            near_points=amount.near_points,
            near_ratio=Decimal(str(amount.near_ratio)),
        ),
        ReferenceSignal(points=scoring.reference_points),
        DescriptionSignal(
            points_per_word=scoring.description.points_per_word,
            max_points=scoring.description.max_points,
            min_word_length=scoring.description.min_word_length,
        ),
        CounterpartySignal(points=scoring.counterparty_points),
        DateProximitySignal(
            close_days=scoring.date.close_days,
            close_points=scoring.date.close_points,
            near_days=scoring.date.near_days,
            near_points=scoring.date.near_points,
        ),
    ]

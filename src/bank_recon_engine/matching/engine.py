"""
Weighted-heuristic matching engine for bank reconciliation.
Scores transactions against open items, ranks suggestions and auto-matches.
"""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional, Sequence
import logging

from ..config import ReconConfig
from ..lifecycle.transitions import match
from ..models.transaction import (
    BankTransaction,
    MatchableItem,
    ReconciliationStatus,
    SuggestedMatch,
)
from .signals import MatchSignal, build_signals

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """
    Matching engine that pairs bank transactions with matchable items.

    The engine holds configuration only. Collections are passed in and new
    collections are returned, so one engine can serve concurrent callers.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the matching engine.

        Args:
            config: Engine configuration, defaults apply when omitted
        """
        self.config = config or ReconConfig()
        self.signals: list[MatchSignal] = build_signals(self.config.scoring)

    def score(
        self,
        transaction: BankTransaction,
        candidate: MatchableItem,
    ) -> tuple[int, list[str]]:
        """
        Compute the confidence that a candidate settles a transaction.

        Args:
            transaction: Bank transaction
            candidate: Candidate item

        Returns:
            Tuple of (confidence 0-100, reasons in evaluation order)
        """
        confidence = 0
        reasons: list[str] = []

        for signal in self.signals:
            points, reason = signal.evaluate(transaction, candidate)
            if reason is not None:
                confidence += points
                reasons.append(reason)

        return min(confidence, self.config.scoring.max_confidence), reasons

    def suggest(
        self,
        transaction: BankTransaction,
        candidates: Sequence[MatchableItem],
    ) -> list[SuggestedMatch]:
        """
        Rank candidate items for a transaction.

        Candidates below the minimum confidence are dropped. Ties keep the
        candidates' input order.

        Args:
            transaction: Bank transaction
            candidates: Candidate items

        Returns:
            Suggestions sorted by descending confidence, at most max_suggestions
        """
        settings = self.config.suggestions
        suggestions: list[SuggestedMatch] = []

        for candidate in candidates:
            confidence, reasons = self.score(transaction, candidate)
            if confidence >= settings.min_confidence:
                suggestions.append(
                    SuggestedMatch(
                        item=candidate, confidence=confidence, match_reasons=reasons
                    )
                )

        # sorted() is stable
        ranked = sorted(suggestions, key=lambda s: s.confidence, reverse=True)
        return ranked[: settings.max_suggestions]

    def best_match(
        self,
        transaction: BankTransaction,
        candidates: Sequence[MatchableItem],
    ) -> Optional[SuggestedMatch]:
        """Return the top suggestion if it clears the auto-accept threshold."""
        suggestions = self.suggest(transaction, candidates)
        threshold = self.config.auto_match.accept_threshold
        if suggestions and suggestions[0].confidence >= threshold:
            return suggestions[0]
        return None

    def auto_match_all(
        self,
        transactions: Sequence[BankTransaction],
        candidates: Sequence[MatchableItem],
    ) -> tuple[list[BankTransaction], int]:
        """
        Match every unreconciled transaction whose best suggestion is confident enough.

        Items are not consumed by a match: the same item may be linked to
        several transactions in one run. Such reuse is logged, not prevented.

        Args:
            transactions: Current transaction collection
            candidates: Matchable items

        Returns:
            Tuple of (new transaction collection in input order, matched count)
        """
        start_time = datetime.now()
        open_positions = [
            index
            for index, t in enumerate(transactions)
            if t.reconciliation_status == ReconciliationStatus.UNRECONCILED
        ]
        logger.info(
            f"Auto-matching {len(open_positions)} unreconciled of {len(transactions)} "
            f"transactions against {len(candidates)} items"
        )

        results = self._find_best_matches(
            [transactions[i] for i in open_positions], candidates
        )
        best_by_position = dict(zip(open_positions, results))

        updated: list[BankTransaction] = []
        matched_count = 0
        item_usage: Counter[str] = Counter()

        for index, txn in enumerate(transactions):
            best = best_by_position.get(index)
            if best is None:
                updated.append(txn)
                continue

            updated.append(match(txn, best.item))
            matched_count += 1
            item_usage[best.item.id] += 1
            logger.debug(
                f"Matched {txn.id} to {best.item.type.value} {best.item.id} "
                f"({best.confidence}%: {', '.join(best.match_reasons)})"
            )

        reused = sorted(item_id for item_id, uses in item_usage.items() if uses > 1)
        if reused:
            logger.warning(
                f"Items matched to more than one transaction: {', '.join(reused)}"
            )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(f"Auto-match complete in {elapsed:.2f}s: {matched_count} matched")

        return updated, matched_count

    def _find_best_matches(
        self,
        transactions: Sequence[BankTransaction],
        candidates: Sequence[MatchableItem],
    ) -> list[Optional[SuggestedMatch]]:
        """
        Compute the accepted match, if any, for each transaction in order.

        Each transaction is scored independently, so the work can be spread
        over a thread pool; results are merged after all scoring is done.
        """
        workers = self.config.auto_match.workers

        if workers > 1 and len(transactions) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                return list(
                    executor.map(lambda t: self.best_match(t, candidates), transactions)
                )

        return [self.best_match(t, candidates) for t in transactions]

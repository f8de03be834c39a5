"""Tests for the reconciliation lifecycle transitions."""

import random
from datetime import datetime, timezone

import pytest

from bank_recon_engine.lifecycle.transitions import (
    annotate,
    apply_transition,
    dispute,
    get_matched_item,
    match,
    reconcile,
    reconcile_all_matched,
    unmatch,
)
from bank_recon_engine.models.transaction import (
    MatchableItemType,
    ReconciliationStatus,
)
from bank_recon_engine.utils.exceptions import TransactionNotFoundError

NOW = datetime(2026, 2, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def open_tx(make_transaction):
    return make_transaction("tx-1", "4500.00", description="Zahlung")


@pytest.fixture
def invoice(make_item):
    return make_item("inv-1", "4500.00")


@pytest.fixture
def receipt(make_item):
    return make_item("rec-1", "4500.00", type=MatchableItemType.RECEIPT)


class TestMatch:
    def test_links_item(self, open_tx, invoice) -> None:
        matched = match(open_tx, invoice)

        assert matched.reconciliation_status == ReconciliationStatus.MATCHED
        assert matched.matched_item_type == MatchableItemType.INVOICE
        assert matched.matched_item_id == "inv-1"
        assert matched.is_matched
        # Input left untouched
        assert open_tx.reconciliation_status == ReconciliationStatus.UNRECONCILED

    def test_overwrites_existing_link(self, open_tx, invoice, receipt) -> None:
        rematched = match(match(open_tx, invoice), receipt)

        assert rematched.matched_item_type == MatchableItemType.RECEIPT
        assert rematched.matched_item_id == "rec-1"

    def test_allowed_from_disputed(self, open_tx, invoice) -> None:
        matched = match(dispute(open_tx, "Betrag falsch"), invoice)

        assert matched.reconciliation_status == ReconciliationStatus.MATCHED
        assert matched.notes == "Betrag falsch"


class TestUnmatch:
    def test_clears_link(self, open_tx, invoice) -> None:
        cleared = unmatch(reconcile(match(open_tx, invoice), now=NOW))

        assert cleared.reconciliation_status == ReconciliationStatus.UNRECONCILED
        assert cleared.matched_item_type is None
        assert cleared.matched_item_id is None
        assert cleared.reconciled_at is None

    def test_idempotent(self, open_tx, invoice) -> None:
        once = unmatch(match(open_tx, invoice))

        assert unmatch(once) == once


class TestReconcile:
    def test_from_matched(self, open_tx, invoice) -> None:
        reconciled = reconcile(match(open_tx, invoice), now=NOW)

        assert reconciled.reconciliation_status == ReconciliationStatus.RECONCILED
        assert reconciled.reconciled_at == NOW
        assert reconciled.matched_item_id == "inv-1"

    def test_stamps_current_time_by_default(self, open_tx, invoice) -> None:
        before = datetime.now(timezone.utc)
        reconciled = reconcile(match(open_tx, invoice))

        assert reconciled.reconciled_at is not None
        assert reconciled.reconciled_at >= before

    def test_unlinked_with_item_fills_link(self, open_tx, invoice) -> None:
        reconciled = reconcile(open_tx, invoice, now=NOW)

        assert reconciled.reconciliation_status == ReconciliationStatus.RECONCILED
        assert reconciled.matched_item_id == "inv-1"
        assert reconciled.matched_item_type == MatchableItemType.INVOICE

    def test_item_does_not_replace_existing_link(self, open_tx, invoice, receipt) -> None:
        reconciled = reconcile(match(open_tx, invoice), receipt, now=NOW)

        assert reconciled.matched_item_id == "inv-1"

    def test_unlinked_without_item_is_permitted(self, open_tx) -> None:
        reconciled = reconcile(open_tx, now=NOW)

        assert reconciled.reconciliation_status == ReconciliationStatus.RECONCILED
        assert reconciled.matched_item_id is None


class TestReconcileAllMatched:
    def test_only_matched_are_reconciled(self, make_transaction, invoice) -> None:
        first = match(make_transaction("tx-1"), invoice)
        second = match(make_transaction("tx-2"), invoice)
        still_open = make_transaction("tx-3")

        updated = reconcile_all_matched([first, still_open, second], now=NOW)

        assert [t.reconciliation_status for t in updated] == [
            ReconciliationStatus.RECONCILED,
            ReconciliationStatus.UNRECONCILED,
            ReconciliationStatus.RECONCILED,
        ]
        assert updated[0].reconciled_at == NOW
        assert updated[2].reconciled_at == NOW
        assert updated[1] is still_open

    def test_demo_dataset(self, demo_transactions) -> None:
        updated = reconcile_all_matched(demo_transactions, now=NOW)

        reconciled_now = [t.id for t in updated if t.reconciled_at == NOW]
        assert reconciled_now == ["tx-3"]


class TestDisputeAndAnnotate:
    def test_dispute_keeps_link(self, open_tx, invoice) -> None:
        disputed = dispute(match(open_tx, invoice), "Teilzahlung")

        assert disputed.reconciliation_status == ReconciliationStatus.DISPUTED
        assert disputed.matched_item_id == "inv-1"
        assert disputed.notes == "Teilzahlung"

    def test_dispute_clears_reconciled_at(self, open_tx, invoice) -> None:
        disputed = dispute(reconcile(match(open_tx, invoice), now=NOW), "Rückbuchung")

        assert disputed.reconciled_at is None
        assert disputed.matched_item_id == "inv-1"

    def test_dispute_without_notes_clears_notes(self, open_tx) -> None:
        disputed = dispute(annotate(open_tx, "alt"))

        assert disputed.reconciliation_status == ReconciliationStatus.DISPUTED
        assert disputed.notes is None

    def test_annotate_keeps_status(self, open_tx, invoice) -> None:
        matched = match(open_tx, invoice)
        noted = annotate(matched, "Skonto abgezogen")

        assert noted.notes == "Skonto abgezogen"
        assert noted.reconciliation_status == ReconciliationStatus.MATCHED
        assert noted.matched_item_id == matched.matched_item_id


class TestLinkInvariant:
    def test_random_sequences_keep_link_consistent(self, open_tx, invoice, receipt) -> None:
        """Link fields stay paired; unlinked implies unreconciled or disputed."""
        rng = random.Random(42)
        operations = [
            lambda t: match(t, invoice),
            lambda t: match(t, receipt),
            unmatch,
            lambda t: reconcile(t, rng.choice([invoice, receipt]), now=NOW),
            lambda t: dispute(t, "prüfen"),
            lambda t: dispute(t),
            lambda t: annotate(t, "Notiz"),
        ]

        for _ in range(50):
            tx = open_tx
            for _ in range(20):
                tx = rng.choice(operations)(tx)
                assert (tx.matched_item_type is None) == (tx.matched_item_id is None)
                if tx.matched_item_id is None:
                    assert tx.reconciliation_status in (
                        ReconciliationStatus.UNRECONCILED,
                        ReconciliationStatus.DISPUTED,
                    )

    def test_reconcile_without_item_keeps_link_pairing(
        self, open_tx, invoice, receipt
    ) -> None:
        """Only an item-less reconcile of an unlinked record ends reconciled and unlinked."""
        rng = random.Random(7)
        operations = [
            ("match", lambda t: match(t, invoice)),
            ("match", lambda t: match(t, receipt)),
            ("unmatch", unmatch),
            ("reconcile", lambda t: reconcile(t, now=NOW)),
            ("dispute", lambda t: dispute(t, "prüfen")),
            ("annotate", lambda t: annotate(t, "Notiz")),
        ]

        for _ in range(50):
            tx = open_tx
            # Last status-changing operation applied while unlinked
            last_unlinked_change = None
            for _ in range(20):
                name, operation = rng.choice(operations)
                was_linked = tx.is_matched
                tx = operation(tx)
                if name != "annotate":
                    last_unlinked_change = None if was_linked else name

                assert (tx.matched_item_type is None) == (tx.matched_item_id is None)
                if tx.reconciliation_status == ReconciliationStatus.RECONCILED:
                    if not tx.is_matched:
                        assert last_unlinked_change == "reconcile"


class TestApplyTransition:
    def test_updates_only_target(self, demo_transactions, demo_items) -> None:
        updated = apply_transition(demo_transactions, "tx-5", match, demo_items[0])

        assert updated[4].reconciliation_status == ReconciliationStatus.MATCHED
        assert updated[4].matched_item_id == "inv-1"
        assert [t.id for t in updated] == [t.id for t in demo_transactions]
        assert updated[0] is demo_transactions[0]

    def test_keyword_arguments(self, demo_transactions) -> None:
        updated = apply_transition(demo_transactions, "tx-1", dispute, notes="Doppelt")

        assert updated[0].notes == "Doppelt"

    def test_unknown_id(self, demo_transactions) -> None:
        with pytest.raises(TransactionNotFoundError, match="tx-404"):
            apply_transition(demo_transactions, "tx-404", unmatch)


class TestGetMatchedItem:
    def test_resolves_link(self, demo_transactions, demo_items) -> None:
        item = get_matched_item(demo_transactions[2], demo_items)

        assert item is not None
        assert item.id == "inv-2"

    def test_unlinked(self, demo_transactions, demo_items) -> None:
        assert get_matched_item(demo_transactions[0], demo_items) is None

    def test_broken_reference(self, demo_transactions, demo_items) -> None:
        remaining = [i for i in demo_items if i.id != "inv-2"]

        assert get_matched_item(demo_transactions[2], remaining) is None

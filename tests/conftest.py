from datetime import date, timedelta
from decimal import Decimal
from typing import Callable

import pytest

from bank_recon_engine.matching.engine import ReconciliationEngine
from bank_recon_engine.models.transaction import (
    BankTransaction,
    MatchableItem,
    MatchableItemType,
    ReconciliationStatus,
)

TODAY = date(2026, 2, 10)

SPARKASSE = ("acc-1", "Geschäftskonto (Sparkasse)")
PAYPAL = ("acc-2", "PayPal Business")


def _days_ago(days: int) -> date:
    return TODAY - timedelta(days=days)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_transaction() -> Callable[..., BankTransaction]:
    """Factory for bank transactions with sensible defaults."""

    def _make(
        id: str = "tx",
        amount: str = "100.00",
        days_ago: int = 0,
        description: str = "",
        **kwargs,
    ) -> BankTransaction:
        return BankTransaction(
            id=id,
            bank_account_id=kwargs.pop("bank_account_id", SPARKASSE[0]),
            bank_account_name=kwargs.pop("bank_account_name", SPARKASSE[1]),
            date=_days_ago(days_ago),
            amount=Decimal(amount),
            description=description,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_item() -> Callable[..., MatchableItem]:
    """Factory for matchable items with sensible defaults."""

    def _make(
        id: str = "item",
        amount: str = "100.00",
        days_ago: int = 0,
        description: str = "",
        type: MatchableItemType = MatchableItemType.INVOICE,
        **kwargs,
    ) -> MatchableItem:
        return MatchableItem(
            id=id,
            type=type,
            amount=Decimal(amount),
            date=_days_ago(days_ago),
            description=description,
            **kwargs,
        )

    return _make


@pytest.fixture
def engine() -> ReconciliationEngine:
    return ReconciliationEngine()


@pytest.fixture
def demo_transactions(make_transaction) -> list[BankTransaction]:
    """Ten statement lines across two accounts in every lifecycle state."""
    return [
        make_transaction(
            "tx-1", "4500.00", 1, "SEPA Überweisung Mustermann GmbH RE-2026-0042",
            reference="RE-2026-0042", counterparty="Mustermann GmbH",
        ),
        make_transaction(
            "tx-2", "-2500.00", 2, "Miete Februar 2026 Bürogebäude",
            counterparty="Immobilien Verwaltung KG",
        ),
        make_transaction(
            "tx-3", "8200.00", 3, "Zahlung Tech Solutions AG Rechnung 0045",
            reference="RE-2026-0045", counterparty="Tech Solutions AG",
            reconciliation_status=ReconciliationStatus.MATCHED,
            matched_item_type=MatchableItemType.INVOICE, matched_item_id="inv-2",
        ),
        make_transaction(
            "tx-4", "-890.50", 4, "Adobe Creative Cloud Jahresabo",
            counterparty="Adobe Systems",
            reconciliation_status=ReconciliationStatus.RECONCILED,
            matched_item_type=MatchableItemType.RECEIPT, matched_item_id="rec-1",
        ),
        make_transaction(
            "tx-5", "1250.00", 5, "PayPal Zahlung Online Shop Bestellung #12345",
            reference="#12345", counterparty="Webshop Kunde",
            bank_account_id=PAYPAL[0], bank_account_name=PAYPAL[1],
        ),
        make_transaction(
            "tx-6", "3100.00", 6, "Handel Co KG Teilzahlung",
            counterparty="Handel & Co. KG",
            reconciliation_status=ReconciliationStatus.DISPUTED,
            notes="Betrag stimmt nicht mit Rechnung überein",
        ),
        make_transaction(
            "tx-7", "-450.00", 7, "Büromaterial Office Express",
            counterparty="Office Express GmbH",
        ),
        make_transaction(
            "tx-8", "5800.00", 8, "Beratung Plus Projektabschluss",
            reference="RE-2026-0038", counterparty="Beratung Plus GmbH",
        ),
        make_transaction(
            "tx-9", "-125.90", 9, "Google Workspace Abo",
            counterparty="Google Ireland Ltd",
            bank_account_id=PAYPAL[0], bank_account_name=PAYPAL[1],
            reconciliation_status=ReconciliationStatus.RECONCILED,
            matched_item_type=MatchableItemType.BOOKING, matched_item_id="bk-1",
        ),
        make_transaction(
            "tx-10", "-15000.00", 10, "Gehälter Januar 2026",
            counterparty="Sammelüberweisung",
            reconciliation_status=ReconciliationStatus.RECONCILED,
            matched_item_type=MatchableItemType.BOOKING, matched_item_id="bk-2",
        ),
    ]


@pytest.fixture
def demo_items(make_item) -> list[MatchableItem]:
    """Open invoices, receipts and bookings matching the demo statement."""
    invoice, receipt, booking = (
        MatchableItemType.INVOICE,
        MatchableItemType.RECEIPT,
        MatchableItemType.BOOKING,
    )
    return [
        make_item("inv-1", "4500.00", 5, "Beratungsleistungen Januar 2026",
                  reference="RE-2026-0042", contact_name="Mustermann GmbH", status="sent"),
        make_item("inv-2", "8200.00", 7, "Softwareentwicklung Projekt Alpha",
                  reference="RE-2026-0045", contact_name="Tech Solutions AG", status="paid"),
        make_item("inv-3", "5800.00", 12, "Strategieberatung Q4 2025",
                  reference="RE-2026-0038", contact_name="Beratung Plus GmbH", status="sent"),
        make_item("inv-4", "3500.00", 10, "Warenlieferung Elektronik",
                  reference="RE-2026-0040", contact_name="Handel & Co. KG", status="sent"),
        make_item("rec-1", "890.50", 6, "Adobe Creative Cloud Jahreslizenz",
                  type=receipt, reference="B-2026-0089", contact_name="Adobe Systems"),
        make_item("rec-2", "450.00", 8, "Bürobedarf Papier und Toner",
                  type=receipt, reference="B-2026-0092", contact_name="Office Express GmbH"),
        make_item("rec-3", "2500.00", 3, "Büromiete Februar 2026",
                  type=receipt, reference="B-2026-0088",
                  contact_name="Immobilien Verwaltung KG"),
        make_item("bk-1", "125.90", 10, "Google Workspace Monatsabo",
                  type=booking, reference="BU-2026-0145", contact_name="Google Ireland Ltd"),
        make_item("bk-2", "15000.00", 11, "Gehaltsauszahlung Januar 2026",
                  type=booking, reference="BU-2026-0142"),
    ]

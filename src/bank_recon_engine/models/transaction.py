"""Data models for bank transactions, matchable items and match results."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class ReconciliationStatus(Enum):
    """Lifecycle state of a bank transaction."""

    UNRECONCILED = "unreconciled"
    MATCHED = "matched"
    RECONCILED = "reconciled"
    DISPUTED = "disputed"


class MatchableItemType(Enum):
    """Kind of accounting record a bank transaction can be linked to."""

    INVOICE = "invoice"
    RECEIPT = "receipt"
    BOOKING = "booking"


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    # fromisoformat on older interpreters rejects the "Z" suffix
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass(frozen=True)
class BankTransaction:
    """
    A single bank statement line item.

    Instances are never mutated; lifecycle transitions return a modified copy.
    """

    # Unique identifier from the bank feed
    id: str

    # Source account (name is denormalized for display)
    bank_account_id: str
    bank_account_name: str

    # Posting date
    date: date

    # Signed amount: positive is an inflow, negative an outflow
    amount: Decimal

    # Narrative from the bank feed
    description: str = ""

    # Optional fields extracted from the feed
    reference: Optional[str] = None
    counterparty: Optional[str] = None
    category: Optional[str] = None

    # Reconciliation state
    reconciliation_status: ReconciliationStatus = ReconciliationStatus.UNRECONCILED
    matched_item_type: Optional[MatchableItemType] = None
    matched_item_id: Optional[str] = None
    reconciled_at: Optional[datetime] = None
    notes: Optional[str] = None

    @property
    def is_matched(self) -> bool:
        """Check if the transaction is linked to a matchable item."""
        return self.matched_item_id is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BankTransaction":
        matched_type = data.get("matched_item_type")
        return cls(
            id=str(data["id"]),
            bank_account_id=str(data.get("bank_account_id", "")),
            bank_account_name=data.get("bank_account_name", ""),
            date=_parse_date(data["date"]),
            amount=Decimal(str(data["amount"])),
            description=data.get("description") or "",
            reference=data.get("reference"),
            counterparty=data.get("counterparty"),
            category=data.get("category"),
            reconciliation_status=ReconciliationStatus(
                data.get("reconciliation_status", "unreconciled")
            ),
            matched_item_type=MatchableItemType(matched_type) if matched_type else None,
            matched_item_id=data.get("matched_item_id"),
            reconciled_at=_parse_timestamp(data.get("reconciled_at")),
            notes=data.get("notes"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "bank_account_id": self.bank_account_id,
            "bank_account_name": self.bank_account_name,
            "date": self.date.isoformat(),
            "amount": str(self.amount),
            "description": self.description,
            "reconciliation_status": self.reconciliation_status.value,
        }
        optional = {
            "reference": self.reference,
            "counterparty": self.counterparty,
            "category": self.category,
            "matched_item_type": (
                self.matched_item_type.value if self.matched_item_type else None
            ),
            "matched_item_id": self.matched_item_id,
            "reconciled_at": (
                self.reconciled_at.isoformat() if self.reconciled_at else None
            ),
            "notes": self.notes,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


@dataclass(frozen=True)
class MatchableItem:
    """An invoice, receipt or ledger booking that a bank transaction may settle."""

    id: str
    type: MatchableItemType

    # Magnitude only, direction is implied by the item type
    amount: Decimal
    date: date
    description: str = ""
    reference: Optional[str] = None
    contact_name: Optional[str] = None

    # Status of the underlying document (informational only)
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MatchableItem":
        return cls(
            id=str(data["id"]),
            type=MatchableItemType(data["type"]),
            amount=Decimal(str(data["amount"])),
            date=_parse_date(data["date"]),
            description=data.get("description") or "",
            reference=data.get("reference"),
            contact_name=data.get("contact_name"),
            status=data.get("status"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "amount": str(self.amount),
            "date": self.date.isoformat(),
            "description": self.description,
        }
        optional = {
            "reference": self.reference,
            "contact_name": self.contact_name,
            "status": self.status,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


@dataclass
class SuggestedMatch:
    """A scored candidate for a bank transaction. Never persisted."""

    item: MatchableItem
    confidence: int  # 0 to 100
    match_reasons: list[str] = field(default_factory=list)


@dataclass
class ReconciliationStats:
    """Counts and amounts per reconciliation status."""

    total: int = 0
    unreconciled: int = 0
    matched: int = 0
    reconciled: int = 0
    disputed: int = 0

    # Sums of absolute amounts
    total_amount: Decimal = Decimal("0")
    unreconciled_amount: Decimal = Decimal("0")

    @property
    def reconciliation_rate(self) -> float:
        """Percentage of transactions that are reconciled."""
        if self.total == 0:
            return 0.0
        return (self.reconciled / self.total) * 100


@dataclass(frozen=True)
class BankAccountRef:
    """A bank account as seen through its transactions."""

    id: str
    name: str

"""
JSON snapshots of the two input collections.

A snapshot holds ``transactions`` and ``matchableItems`` in the shape the
host application stores them. Files using ``matchable_items`` are read
too. This is host-side glue for the command line, not a persistence layer.
"""

from dataclasses import dataclass, field
from pathlib import Path
import json
import logging

from ..models.transaction import BankTransaction, MatchableItem
from ..utils.exceptions import SnapshotError

logger = logging.getLogger(__name__)

ITEMS_KEY = "matchableItems"
LEGACY_ITEMS_KEY = "matchable_items"


@dataclass
class Snapshot:
    """Bank transactions and matchable items at one point in time."""

    transactions: list[BankTransaction] = field(default_factory=list)
    matchable_items: list[MatchableItem] = field(default_factory=list)


def load_snapshot(file_path: Path) -> Snapshot:
    """
    Read a snapshot file.

    Args:
        file_path: Path to the JSON file

    Returns:
        Parsed snapshot

    Raises:
        SnapshotError: If the file cannot be read or a record is malformed
    """
    logger.info(f"Loading snapshot: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Failed to read snapshot {file_path}: {e}") from e

    if not isinstance(raw, dict):
        raise SnapshotError(f"Snapshot root must be an object: {file_path}")

    try:
        transactions = [BankTransaction.from_dict(t) for t in raw.get("transactions", [])]
        raw_items = raw.get(ITEMS_KEY)
        if raw_items is None:
            raw_items = raw.get(LEGACY_ITEMS_KEY, [])
        items = [MatchableItem.from_dict(i) for i in raw_items]
    except (KeyError, ValueError, ArithmeticError) as e:
        raise SnapshotError(f"Malformed record in {file_path}: {e!r}") from e

    logger.debug(
        f"Loaded {len(transactions)} transactions and {len(items)} matchable items"
    )
    return Snapshot(transactions=transactions, matchable_items=items)


def save_snapshot(snapshot: Snapshot, file_path: Path) -> Path:
    """Write a snapshot file and return its path."""
    payload = {
        "transactions": [t.to_dict() for t in snapshot.transactions],
        ITEMS_KEY: [i.to_dict() for i in snapshot.matchable_items],
    }

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise SnapshotError(f"Failed to write snapshot {file_path}: {e}") from e

    logger.info(f"Saved snapshot: {file_path}")
    return file_path

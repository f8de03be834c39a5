"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    ConfigurationError,
    SnapshotError,
    TransactionNotFoundError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "ConfigurationError",
    "SnapshotError",
    "TransactionNotFoundError",
    "setup_logging",
]

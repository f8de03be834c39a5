"""Custom exceptions for the reconciliation engine."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class SnapshotError(ReconciliationError):
    """Error reading or writing a transaction snapshot file."""

    pass


class TransactionNotFoundError(ReconciliationError):
    """No bank transaction exists with the requested id."""

    def __init__(self, transaction_id: str):
        super().__init__(f"Bank transaction not found: {transaction_id}")
        self.transaction_id = transaction_id

"""Matching engine and scoring signals."""

from .engine import ReconciliationEngine
from .signals import (
    MatchSignal,
    AmountSignal,
    ReferenceSignal,
    DescriptionSignal,
    CounterpartySignal,
    DateProximitySignal,
    build_signals,
)

__all__ = [
    "ReconciliationEngine",
    "MatchSignal",
    "AmountSignal",
    "ReferenceSignal",
    "DescriptionSignal",
    "CounterpartySignal",
    "DateProximitySignal",
    "build_signals",
]

"""Core domain package for the ClearLedger engine."""

from .formatting import format_currency, format_days, format_short_date
from .models import (
    BudgetGuidanceRow,
    Classification,
    DailyCashflow,
    DecisionMap,
    DuplicateDecision,
    NeedsVsWants,
    OwnershipConfig,
    OwnershipMode,
    SummaryStats,
    Transaction,
    TransactionKind,
    TransferPair,
    TransferResolution,
)
from .validation import EngineInputError

__all__ = [
    "BudgetGuidanceRow",
    "Classification",
    "DailyCashflow",
    "DecisionMap",
    "DuplicateDecision",
    "EngineInputError",
    "NeedsVsWants",
    "OwnershipConfig",
    "OwnershipMode",
    "SummaryStats",
    "Transaction",
    "TransactionKind",
    "TransferPair",
    "TransferResolution",
    "format_currency",
    "format_days",
    "format_short_date",
]

"""Shared data model definitions for the ClearLedger engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Literal, Mapping, TypedDict, get_args

logger = logging.getLogger("clearledger.core.models")

TransactionKind = Literal[
    "income",
    "expense",
    "subscription",
    "fee",
    "transferInternal",
    "transferExternal",
    "refund",
]
OwnershipMode = Literal["spending", "payment", "notMine"]
DuplicateDecision = Literal["confirmed", "dismissed"]
TransferResolution = Literal["internal", "income", "spending", "ignored", "not_applicable"]

TRANSACTION_KINDS: frozenset[str] = frozenset(get_args(TransactionKind))
OWNERSHIP_MODES: frozenset[str] = frozenset(get_args(OwnershipMode))
DUPLICATE_DECISIONS: frozenset[str] = frozenset(get_args(DuplicateDecision))

_MODE_ALIASES = {
    "spending": "spending",
    "payment": "payment",
    "notmine": "notMine",
    "not_mine": "notMine",
    "not-mine": "notMine",
}


@dataclass(frozen=True, slots=True)
class Classification:
    """Category-derived facts resolved once when a transaction is ingested."""

    display_category: str
    groups: tuple[str, ...]
    is_subscription: bool
    is_bill_like: bool
    is_billish: bool
    is_essential: bool
    is_transfer: bool
    is_recurring_candidate: bool


@dataclass(frozen=True, slots=True)
class Transaction:
    id: str
    date: date | None
    amount: float
    description: str
    category: str
    kind: TransactionKind
    classification: Classification
    source_account_key: str | None = None
    target_account_key: str | None = None

    @property
    def is_transfer(self) -> bool:
        return self.kind.startswith("transfer")


@dataclass(frozen=True)
class OwnershipConfig:
    """Read-only view of which accounts the user owns and how they use them."""

    modes: Mapping[str, OwnershipMode] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "modes", MappingProxyType(dict(self.modes)))

    def mode_for(self, account_key: str | None) -> OwnershipMode:
        if not account_key:
            return "notMine"
        return self.modes.get(account_key, "notMine")

    def is_owned(self, account_key: str | None) -> bool:
        return self.mode_for(account_key) != "notMine"

    @classmethod
    def from_mapping(
        cls, modes: "OwnershipConfig | Mapping[str, str] | None"
    ) -> "OwnershipConfig":
        """Build a config from a plain mapping, tolerating unknown mode strings."""

        if isinstance(modes, OwnershipConfig):
            return modes
        if modes is None:
            return cls()

        resolved: dict[str, OwnershipMode] = {}
        for key, raw_mode in modes.items():
            mode = _MODE_ALIASES.get(str(raw_mode).strip().lower())
            if mode is None:
                logger.warning("Unknown ownership mode %r for account %s; treating as notMine", raw_mode, key)
                mode = "notMine"
            resolved[str(key)] = mode  # type: ignore[assignment]
        return cls(resolved)


DecisionMap = Mapping[str, DuplicateDecision]


class DailyCashflow(TypedDict):
    date: date
    income: float
    expense: float
    net: float
    inflow: float
    outflow: float


class TransferPair(TypedDict):
    outbound: Transaction | None
    inbound: Transaction | None


class LargestExpense(TypedDict):
    amount: float
    description: str
    category: str
    date: date | None


class SummaryStats(TypedDict):
    total_income: float
    total_spending: float
    net: float
    subscription_count: int
    total_subscriptions: float
    total_fees: float
    internal_transfers_total: float
    largest_single_expense: LargestExpense | None


class BudgetGuidanceRow(TypedDict):
    category: str
    actual: float
    recommended_max: float
    delta: float
    difference_amount: float
    direction: Literal["over", "under"]


class NeedsVsWants(TypedDict):
    needs: float
    wants: float
    essentials_percent: int
    other_percent: int


__all__ = [
    "TransactionKind",
    "OwnershipMode",
    "DuplicateDecision",
    "TransferResolution",
    "TRANSACTION_KINDS",
    "OWNERSHIP_MODES",
    "DUPLICATE_DECISIONS",
    "Classification",
    "Transaction",
    "OwnershipConfig",
    "DecisionMap",
    "DailyCashflow",
    "TransferPair",
    "LargestExpense",
    "SummaryStats",
    "BudgetGuidanceRow",
    "NeedsVsWants",
]

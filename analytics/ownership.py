"""Transfer ownership resolution.

Accounts carry one of three modes: ``spending`` (the user's own money),
``payment`` (an owned conduit such as a credit card that is paid down) and
``notMine``. A transfer is only internal when both legs are owned spending
accounts; moving money from a spending account onto a payment account is
debt service and counts as real spending.
"""

from __future__ import annotations

from collections.abc import Mapping

from core.models import OwnershipConfig, Transaction, TransferResolution
from core.validation import require_mapping

__all__ = [
    "OwnershipInput",
    "resolve_ownership",
    "resolve_transfer",
    "is_internal_transfer",
    "is_real_income",
    "is_real_spending",
]

OwnershipInput = OwnershipConfig | Mapping[str, str] | None

_SPENDING_KINDS = frozenset({"expense", "subscription", "fee"})


def resolve_ownership(ownership: OwnershipInput) -> OwnershipConfig:
    """Coerce a caller-supplied ownership argument into an ``OwnershipConfig``."""

    if isinstance(ownership, OwnershipConfig):
        return ownership
    return OwnershipConfig.from_mapping(require_mapping(ownership, "ownership"))


def _direction(amount: float) -> TransferResolution:
    if amount > 0:
        return "income"
    if amount < 0:
        return "spending"
    return "ignored"


def resolve_transfer(transaction: Transaction, ownership: OwnershipInput = None) -> TransferResolution:
    """Classify a transfer as internal, real income, real spending or ignored."""

    if not transaction.is_transfer:
        return "not_applicable"

    source = transaction.source_account_key
    target = transaction.target_account_key
    if not source or not target:
        return _direction(transaction.amount)

    config = resolve_ownership(ownership)
    source_mode = config.mode_for(source)
    target_mode = config.mode_for(target)
    both_owned = source_mode != "notMine" and target_mode != "notMine"

    if both_owned and "payment" not in (source_mode, target_mode):
        return "internal"
    if source_mode == "spending" and target_mode == "payment":
        return "spending"
    return _direction(transaction.amount)


def is_internal_transfer(transaction: Transaction, ownership: OwnershipInput = None) -> bool:
    return resolve_transfer(transaction, ownership) == "internal"


def is_real_income(transaction: Transaction, ownership: OwnershipInput = None) -> bool:
    if transaction.is_transfer:
        return resolve_transfer(transaction, ownership) == "income"
    return transaction.kind == "income"


def is_real_spending(transaction: Transaction, ownership: OwnershipInput = None) -> bool:
    if transaction.is_transfer:
        return resolve_transfer(transaction, ownership) == "spending"
    return transaction.kind in _SPENDING_KINDS

"""Category refinement, classification predicates and kind inference."""

from __future__ import annotations

import re
from dataclasses import replace

from analytics.rules import (
    BILL_CATEGORIES,
    BILL_REFINEMENT_RULES,
    BILLISH_DESCRIPTION_PATTERNS,
    BILLS_CATEGORY,
    CATEGORY_ALIASES,
    CATEGORY_GROUPS,
    CATEGORY_NAMES,
    ESSENTIAL_CATEGORIES,
    KNOWN_MERCHANT_PATTERNS,
    PAYMENT_DESCRIPTION_PATTERN,
    SUBSCRIPTION_CATEGORIES,
)
from core.models import Classification, Transaction, TransactionKind

__all__ = [
    "normalize_category_name",
    "classify_description",
    "display_category",
    "is_subscription_category",
    "is_bill_like_category",
    "is_essential_category",
    "is_billish_description",
    "matches_known_merchant",
    "infer_kind",
    "resolve_classification",
    "recategorize",
]

_CANONICAL_BY_LOWER = {name.lower(): name for name in CATEGORY_NAMES}
_REFUND = re.compile(r"refund|reversal|chargeback|returned\s*item|return\b", re.IGNORECASE)
_FEE = re.compile(r"\bfee\b|surcharge|overdraft|service\s*charge", re.IGNORECASE)


def normalize_category_name(category: str | None) -> str:
    """Return the canonical category name, or ``category`` unchanged if unknown."""

    if not category:
        return category or ""
    lower = category.strip().lower()
    alias = CATEGORY_ALIASES.get(lower)
    if alias:
        return alias
    return _CANONICAL_BY_LOWER.get(lower, category)


def classify_description(description: str | None) -> str:
    """Refine a generic bills bucket into Education, Loans or Insurance."""

    text = (description or "").lower()
    for category, pattern in BILL_REFINEMENT_RULES:
        if pattern.search(text):
            return category
    return BILLS_CATEGORY


def display_category(category: str | None, description: str | None) -> str:
    normalized = normalize_category_name(category)
    if normalized == BILLS_CATEGORY:
        return classify_description(description)
    return normalized


def is_subscription_category(category: str | None) -> bool:
    return normalize_category_name(category) in SUBSCRIPTION_CATEGORIES


def is_bill_like_category(category: str | None) -> bool:
    return normalize_category_name(category) in BILL_CATEGORIES


def is_essential_category(category: str | None) -> bool:
    return normalize_category_name(category) in ESSENTIAL_CATEGORIES


def is_billish_description(description: str | None) -> bool:
    if not description:
        return False
    return any(pattern.search(description) for pattern in BILLISH_DESCRIPTION_PATTERNS)


def matches_known_merchant(description: str | None, category: str | None) -> bool:
    """Heuristic hint that ``description`` looks like a typical ``category`` merchant."""

    if not description:
        return False
    patterns = KNOWN_MERCHANT_PATTERNS.get(normalize_category_name(category), ())
    return any(pattern.search(description) for pattern in patterns)


def infer_kind(
    amount: float,
    category: str | None,
    description: str | None,
    source_account_key: str | None = None,
    target_account_key: str | None = None,
) -> TransactionKind:
    """Derive a transaction kind for records that arrive without one."""

    normalized = normalize_category_name(category)
    text = description or ""

    if normalized == "Transfer" or (source_account_key and target_account_key):
        return "transferExternal"
    if amount > 0:
        if _REFUND.search(text):
            return "refund"
        return "income"
    if normalized == "Fees" or _FEE.search(text):
        return "fee"
    if normalized in SUBSCRIPTION_CATEGORIES:
        return "subscription"
    return "expense"


def resolve_classification(category: str | None, kind: str, description: str | None) -> Classification:
    """Compute every category-derived flag for one transaction."""

    normalized = normalize_category_name(category)
    display = display_category(normalized, description)
    is_transfer = kind.startswith("transfer")
    is_subscription = kind == "subscription" or normalized in SUBSCRIPTION_CATEGORIES
    is_bill_like = normalized in BILL_CATEGORIES
    payment_like = bool(description and PAYMENT_DESCRIPTION_PATTERN.search(description))

    return Classification(
        display_category=display,
        groups=CATEGORY_GROUPS.get(display, CATEGORY_GROUPS.get(normalized, ())),
        is_subscription=is_subscription,
        is_bill_like=is_bill_like,
        is_billish=is_billish_description(description),
        is_essential=display in ESSENTIAL_CATEGORIES,
        is_transfer=is_transfer,
        is_recurring_candidate=not is_transfer and (kind == "subscription" or is_bill_like or payment_like),
    )


def recategorize(transaction: Transaction, category: str) -> Transaction:
    """Return a copy of ``transaction`` filed under ``category``."""

    return replace(
        transaction,
        category=category,
        classification=resolve_classification(category, transaction.kind, transaction.description),
    )

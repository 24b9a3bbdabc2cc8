"""Suggest transfer counterparty accounts the user may want to claim."""

from __future__ import annotations

import re
from collections.abc import Collection, Iterable
from typing import Literal, TypedDict

from analytics.categorize import extract_account_label, normalize_transfer_account_key, title_case
from core.models import Transaction
from core.validation import require_transactions

__all__ = [
    "AccountType",
    "CandidateLeg",
    "CandidateAccount",
    "infer_account_type_from_label",
    "detect_account_candidates",
]

AccountType = Literal["Checking", "Savings", "Wallet", "Credit card", "Debit card", "Loan", "Other"]

_ACCOUNT_TYPE_RULES: tuple[tuple[AccountType, re.Pattern[str]], ...] = (
    ("Checking", re.compile(r"checking")),
    ("Savings", re.compile(r"savings")),
    ("Wallet", re.compile(r"cash app|wallet|venmo|paypal")),
    ("Credit card", re.compile(r"credit")),
    ("Debit card", re.compile(r"visa|card|debit")),
    ("Loan", re.compile(r"loan|mortgage|finance|auto")),
)


class CandidateLeg(TypedDict):
    transaction: Transaction
    side: Literal["source", "target"]


class CandidateAccount(TypedDict):
    key: str
    label: str
    ending: str | None
    account_type: AccountType
    legs: list[CandidateLeg]
    count: int


def infer_account_type_from_label(label: str) -> AccountType:
    lower = label.lower()
    for account_type, pattern in _ACCOUNT_TYPE_RULES:
        if pattern.search(lower):
            return account_type
    return "Other"


def _label_and_ending(description: str) -> tuple[str, str | None]:
    parsed = extract_account_label(description)
    return title_case(parsed.name or "") or "Account", parsed.last4


def detect_account_candidates(
    transactions: Iterable[Transaction],
    known_keys: Collection[str] = (),
) -> list[CandidateAccount]:
    """Group unassigned transfer legs by counterparty identity.

    Transfers already tied to a known account key, and counterparties whose
    normalized key is already known, are skipped. Candidates are ordered by
    how many legs reference them, most first.
    """

    items = require_transactions(transactions)
    known = set(known_keys)

    candidates: dict[str, CandidateAccount] = {}
    for tx in items:
        if not tx.is_transfer:
            continue
        if tx.source_account_key in known or tx.target_account_key in known:
            continue

        key = normalize_transfer_account_key(tx.description)
        if key in known:
            continue

        candidate = candidates.get(key)
        if candidate is None:
            label, ending = _label_and_ending(tx.description)
            candidate = {
                "key": key,
                "label": label,
                "ending": ending,
                "account_type": infer_account_type_from_label(label),
                "legs": [],
                "count": 0,
            }
            candidates[key] = candidate

        candidate["legs"].append({"transaction": tx, "side": "source" if tx.amount < 0 else "target"})
        candidate["count"] += 1

    return sorted(candidates.values(), key=lambda candidate: candidate["count"], reverse=True)
